# src/fundledger/runtime/contract_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from fundledger.ledger.constants import DEFAULT_DENOM, DISTRIBUTION_POLICIES, POLICY_CREDIT

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return bool(default)
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return bool(default)


@dataclass(frozen=True)
class ContractConfig:
    contract_id: str
    mode: str  # "dev" | "testnet" | "prod"

    # SQLite file path; ":memory:" selects the in-process store.
    db_path: str

    denom: str
    distribution_policy: str  # "credit" | "bounded"
    stakers_enabled: bool

    api_host: str
    api_port: int

    log_level: str


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def validate_contract_config(cfg: ContractConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.contract_id, str) or not cfg.contract_id.strip():
        raise ValueError("contract_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if not isinstance(cfg.db_path, str) or not cfg.db_path.strip():
        raise ValueError("db_path must be a non-empty string")

    if not isinstance(cfg.denom, str) or not cfg.denom.strip():
        raise ValueError("denom must be a non-empty string")

    if cfg.distribution_policy not in DISTRIBUTION_POLICIES:
        raise ValueError(
            f"distribution_policy must be one of {DISTRIBUTION_POLICIES}; got: {cfg.distribution_policy!r}"
        )

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")


def default_contract_config() -> ContractConfig:
    return ContractConfig(
        contract_id="fundledger-dev",
        mode="prod",
        db_path="./data/fundledger.db",
        denom=DEFAULT_DENOM,
        distribution_policy=POLICY_CREDIT,
        stakers_enabled=False,
        api_host="127.0.0.1",
        api_port=8080,
        log_level="INFO",
    )


def contract_config_from_dict(raw: Json) -> ContractConfig:
    d = default_contract_config()

    cfg = ContractConfig(
        contract_id=_as_str(raw.get("contract_id"), d.contract_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        db_path=_as_str(raw.get("db_path"), d.db_path),
        denom=_as_str(raw.get("denom"), d.denom),
        distribution_policy=_as_str(raw.get("distribution_policy"), d.distribution_policy).strip().lower(),
        stakers_enabled=_as_bool(raw.get("stakers_enabled"), d.stakers_enabled),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        log_level=_as_str(raw.get("log_level"), d.log_level).strip().upper(),
    )

    validate_contract_config(cfg)
    return cfg


def _read_config_json(path: str) -> Json:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("contract config must be a JSON object")
    return raw


def load_contract_config(*, config_path: Optional[str] = None) -> ContractConfig:
    """Load config from an explicit path, FUNDLEDGER_CONFIG_PATH, or defaults.

    Individual FUNDLEDGER_* env vars override file values so containers can
    tweak one knob without shipping a new file.
    """
    p = config_path or os.environ.get("FUNDLEDGER_CONFIG_PATH")
    raw: Json = _read_config_json(p) if p else {}

    overrides = {
        "contract_id": "FUNDLEDGER_CONTRACT_ID",
        "mode": "FUNDLEDGER_MODE",
        "db_path": "FUNDLEDGER_DB_PATH",
        "denom": "FUNDLEDGER_DENOM",
        "distribution_policy": "FUNDLEDGER_DISTRIBUTION_POLICY",
        "stakers_enabled": "FUNDLEDGER_STAKERS_ENABLED",
        "api_host": "FUNDLEDGER_API_HOST",
        "api_port": "FUNDLEDGER_API_PORT",
        "log_level": "FUNDLEDGER_LOG_LEVEL",
    }
    for key, env_name in overrides.items():
        v = os.environ.get(env_name)
        if v is not None and v.strip():
            raw[key] = v

    return contract_config_from_dict(raw)
