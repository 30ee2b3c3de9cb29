from __future__ import annotations

from fastapi import APIRouter, Request

from fundledger import __version__

router = APIRouter()


@router.get("/health")
def v1_health(request: Request):
    """Liveness plus a cheap readiness hint; never touches the ledger contents."""
    ex = getattr(request.app.state, "executor", None)
    initialized = bool(ex.is_initialized()) if ex is not None else False
    return {
        "ok": True,
        "version": __version__,
        "executor": ex is not None,
        "contract_id": getattr(ex, "contract_id", None),
        "initialized": initialized,
    }
