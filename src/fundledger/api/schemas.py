from __future__ import annotations

"""Pydantic request schemas for the HTTP API.

These only describe the HTTP envelope (who is calling, what was attached).
The ledger message inside `msg` is validated by fundledger.runtime.messages.

The caller identity is taken from the request body: in a real deployment the
host verifies signatures before a request reaches this API.
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field, StrictInt, StrictStr


class CoinBody(BaseModel):
    denom: str = Field(..., min_length=1, description="Coin denomination, e.g. uscrt")
    amount: Union[StrictInt, StrictStr] = Field(..., description="Integer amount (int or decimal string)")

    model_config = {"extra": "forbid"}


class InstantiateRequest(BaseModel):
    sender: str = Field(..., description="Creator identity; becomes the admin")
    msg: Dict[str, Any] = Field(default_factory=dict, description="InstantiateMsg")

    model_config = {"extra": "forbid"}


class ExecuteRequest(BaseModel):
    sender: str = Field(..., description="Caller identity")
    funds: List[CoinBody] = Field(default_factory=list, description="Coins attached to the call")
    msg: Dict[str, Any] = Field(..., description="Execute message, e.g. {'deposit': {}}")

    model_config = {"extra": "forbid"}


class QueryRequest(BaseModel):
    msg: Dict[str, Any] = Field(..., description="Query message, e.g. {'get_balance': {}}")

    model_config = {"extra": "forbid"}
