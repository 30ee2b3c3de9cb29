from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from fundledger.api.routes_public_parts.common import Json, _executor, _request_id
from fundledger.api.schemas import ExecuteRequest, InstantiateRequest, QueryRequest
from fundledger.runtime.messages import message_schemas
from fundledger.runtime.runtime_logging import log_event

router = APIRouter()

log = logging.getLogger("fundledger.http")


@router.post("/contract/instantiate")
def v1_contract_instantiate(body: InstantiateRequest, request: Request) -> Json:
    ex = _executor(request)
    res = ex.instantiate(body.sender, body.msg)
    log_event(log, "contract_instantiated", request_id=_request_id(request), admin=body.sender)
    return {"ok": True, **res.to_json()}


@router.post("/contract/execute")
def v1_contract_execute(body: ExecuteRequest, request: Request) -> Json:
    """Run one execute message.

    Returns:
      { ok, attributes: [{key, value}], messages: [{to, amount, denom}] }
    """
    ex = _executor(request)
    funds = [c.model_dump() for c in body.funds]
    res = ex.execute(body.sender, body.msg, funds)
    return {"ok": True, **res.to_json()}


@router.post("/contract/query")
def v1_contract_query(body: QueryRequest, request: Request) -> Json:
    ex = _executor(request)
    return {"ok": True, "data": ex.query(body.msg)}


@router.get("/contract/balances")
def v1_contract_balances(request: Request) -> Json:
    ex = _executor(request)
    return {"ok": True, "balances": ex.query({"get_balance": {}})}


@router.get("/contract/balances/{address}")
def v1_contract_balance_of(address: str, request: Request) -> Json:
    ex = _executor(request)
    return {"ok": True, **ex.query({"get_balance_of": {"address": address}})}


@router.get("/contract/admin")
def v1_contract_admin(request: Request) -> Json:
    ex = _executor(request)
    return {"ok": True, **ex.query({"get_admin": {}})}


@router.get("/contract/stakers")
def v1_contract_stakers(request: Request) -> Json:
    ex = _executor(request)
    return {"ok": True, "stakers": ex.query({"get_stakers": {}})}


@router.get("/contract/schema")
def v1_contract_schema() -> Json:
    return {"ok": True, "schemas": message_schemas()}
