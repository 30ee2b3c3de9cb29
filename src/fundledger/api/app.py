from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fundledger.api.errors import install_error_handlers
from fundledger.api.routes_public import public_router
from fundledger.api.structured_logging import RequestLogMiddleware, configure_structured_logging
from fundledger.runtime.contract_config import load_contract_config
from fundledger.runtime.executor import build_executor as _build_executor


def build_executor():
    """Build a LedgerExecutor for API runtime.

    This wrapper exists so tests can monkeypatch `fundledger.api.app.build_executor`
    without reaching into runtime modules.
    """
    return _build_executor(load_contract_config())


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): load contract config + attach executor
      - False: keep lightweight for unit tests / import-time validation
    """
    cfg = load_contract_config()
    configure_structured_logging(cfg.log_level)

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        yield
        ex = getattr(app.state, "executor", None)
        close = getattr(ex, "close", None)
        if callable(close):
            close()

    # Disable docs in production.
    if cfg.mode == "prod":
        app = FastAPI(title="FundLedger API", docs_url=None, redoc_url=None, openapi_url=None, lifespan=_lifespan)
    else:
        app = FastAPI(title="FundLedger API", lifespan=_lifespan)

    app.state.cfg = cfg
    app.state.executor = build_executor() if boot_runtime else None

    app.add_middleware(RequestLogMiddleware)
    install_error_handlers(app)

    app.include_router(public_router)

    return app


def app_from_env() -> FastAPI:
    """uvicorn factory: `uvicorn fundledger.api.app:app_from_env --factory`."""
    return create_app(boot_runtime=(os.environ.get("FUNDLEDGER_BOOT_RUNTIME", "1").strip() != "0"))
