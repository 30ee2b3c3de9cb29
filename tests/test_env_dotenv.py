from __future__ import annotations

import os
from pathlib import Path

import pytest

from fundledger import env


def test_missing_dotenv_file_is_a_noop(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(env, "_LOADED", False)
    assert env.load_dotenv_if_present(str(tmp_path / "nope.env")) is False
    # loads once per process
    assert env.load_dotenv_if_present(str(tmp_path / "nope.env")) is False


def test_dotenv_file_is_loaded_without_overriding(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    pytest.importorskip("dotenv")
    monkeypatch.setattr(env, "_LOADED", False)
    p = tmp_path / ".env"
    p.write_text("FUNDLEDGER_TEST_A=from_file\nFUNDLEDGER_TEST_B=from_file\n", encoding="utf-8")
    monkeypatch.delenv("FUNDLEDGER_TEST_A", raising=False)
    monkeypatch.setenv("FUNDLEDGER_TEST_B", "from_env")

    assert env.load_dotenv_if_present(str(p)) is True
    assert os.environ["FUNDLEDGER_TEST_A"] == "from_file"
    assert os.environ["FUNDLEDGER_TEST_B"] == "from_env"
    monkeypatch.delenv("FUNDLEDGER_TEST_A", raising=False)
