# src/fundledger/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from fundledger.api.routes_public_parts.contract import router as contract_router
from fundledger.api.routes_public_parts.health import router as health_router

public_router = APIRouter()

public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(contract_router, prefix="/v1", tags=["contract"])
