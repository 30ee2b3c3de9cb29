# src/fundledger/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

_LOADED = False


def load_dotenv_if_present(dotenv_path: Optional[str] = None) -> bool:
    """
    Best-effort .env loader.

    - If python-dotenv isn't installed, this is a no-op.
    - Loads once per process.
    - Path rules:
        1) If dotenv_path arg provided, use it.
        2) Else if FUNDLEDGER_DOTENV_PATH is set, use that.
        3) Else default to ".env" in current working directory.
    - Never overrides variables already present in the environment.

    Returns True if a dotenv file was found AND loaded, else False.
    """
    global _LOADED
    if _LOADED:
        return False

    path = Path(dotenv_path or os.getenv("FUNDLEDGER_DOTENV_PATH", ".env")).expanduser()

    if not path.is_file():
        _LOADED = True
        return False

    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        # python-dotenv is an optional extra
        _LOADED = True
        return False

    load_dotenv(dotenv_path=str(path), override=False)
    _LOADED = True
    return True
