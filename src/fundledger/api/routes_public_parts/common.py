from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from fundledger.api.errors import ApiError
from fundledger.runtime.executor import LedgerExecutor

Json = Dict[str, Any]


def _executor(request: Request) -> LedgerExecutor:
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        raise ApiError.internal("not_ready", "executor not attached to app.state", {})
    return ex


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "") or "")
