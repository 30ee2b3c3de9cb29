from __future__ import annotations

"""Wire messages for instantiate / execute / query.

Execute and query messages are externally tagged unions with snake_case tags,
one key per message:

    {"distribute_funds": {"recipients": ["a", "b"], "amounts": ["30", 20]}}

These models are shape checks only (types, required keys, no unknown keys).
Semantic validation (identity format, non-negative amounts, admin rights)
happens in the CommandProcessor so that every rejection carries its own
error kind.
"""

from typing import Any, Dict, List, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, ValidationError, create_model

from fundledger.runtime.errors import InvalidMessage

Json = Dict[str, Any]

# Amounts travel as JSON ints or decimal strings (u128 values do not fit a
# double, so most clients send strings).
Amount = Union[StrictInt, StrictStr]


class _StrictModel(BaseModel):
    """Strict model: reject unknown keys."""

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Instantiate
# ---------------------------------------------------------------------------


class InstantiateMsg(_StrictModel):
    initial_balances: List[Tuple[StrictStr, Amount]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Execute
# ---------------------------------------------------------------------------


class StakerMsg(_StrictModel):
    address: StrictStr
    amount: Amount


class Deposit(_StrictModel):
    pass


class DistributeFunds(_StrictModel):
    recipients: List[StrictStr]
    amounts: List[Amount]


class ChangeAdmin(_StrictModel):
    new_admin: StrictStr


class AddStakers(_StrictModel):
    stakers: List[StakerMsg]


class DistributeRewards(_StrictModel):
    amount: Amount


EXECUTE_MESSAGES: Dict[str, Type[_StrictModel]] = {
    "deposit": Deposit,
    "distribute_funds": DistributeFunds,
    "change_admin": ChangeAdmin,
    "add_stakers": AddStakers,
    "distribute_rewards": DistributeRewards,
}

# Older clients send ChangeAdmin under its original tag.
EXECUTE_ALIASES: Dict[str, str] = {"admin": "change_admin"}


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class GetBalance(_StrictModel):
    pass


class GetBalanceOf(_StrictModel):
    address: StrictStr


class GetAdmin(_StrictModel):
    pass


class GetStakers(_StrictModel):
    pass


QUERY_MESSAGES: Dict[str, Type[_StrictModel]] = {
    "get_balance": GetBalance,
    "get_balance_of": GetBalanceOf,
    "get_admin": GetAdmin,
    "get_stakers": GetStakers,
}


# ---------------------------------------------------------------------------
# Tagged-union parsing
# ---------------------------------------------------------------------------


def _wrapper(kind: str, tag: str, model: Type[_StrictModel]) -> Type[_StrictModel]:
    name = "".join(p.capitalize() for p in f"{kind}_{tag}".split("_"))
    return create_model(name, __base__=_StrictModel, **{tag: (model, ...)})


_EXECUTE_WRAPPERS = {tag: _wrapper("execute", tag, m) for tag, m in EXECUTE_MESSAGES.items()}
_QUERY_WRAPPERS = {tag: _wrapper("query", tag, m) for tag, m in QUERY_MESSAGES.items()}


def _validation_details(ve: ValidationError) -> Json:
    return {"errors": ve.errors(include_url=False, include_context=False, include_input=False)}


def _parse_tagged(kind: str, obj: Any, wrappers: Dict[str, Type[_StrictModel]], aliases: Dict[str, str]) -> Tuple[str, Any]:
    if isinstance(obj, BaseModel):
        for tag, model in (EXECUTE_MESSAGES if kind == "execute" else QUERY_MESSAGES).items():
            if type(obj) is model:
                return tag, obj
        raise InvalidMessage(f"unknown_{kind}_model", {"type": type(obj).__name__})

    if not isinstance(obj, dict) or len(obj) != 1:
        raise InvalidMessage(f"{kind}_msg_must_have_exactly_one_tag", {"keys": sorted(obj) if isinstance(obj, dict) else None})

    raw_tag, body = next(iter(obj.items()))
    tag = aliases.get(str(raw_tag), str(raw_tag))
    wrapper = wrappers.get(tag)
    if wrapper is None:
        raise InvalidMessage(f"unknown_{kind}_msg", {"tag": raw_tag, "known": sorted(wrappers)})

    try:
        parsed = wrapper.model_validate({tag: body})
    except ValidationError as ve:
        raise InvalidMessage(f"{kind}_msg_schema_mismatch", {"tag": tag, **_validation_details(ve)}) from ve
    return tag, getattr(parsed, tag)


def parse_instantiate_msg(obj: Any) -> InstantiateMsg:
    if isinstance(obj, InstantiateMsg):
        return obj
    try:
        return InstantiateMsg.model_validate(obj if obj is not None else {})
    except ValidationError as ve:
        raise InvalidMessage("instantiate_msg_schema_mismatch", _validation_details(ve)) from ve


def parse_execute_msg(obj: Any) -> Tuple[str, Any]:
    """Return (tag, model) for an execute message."""
    return _parse_tagged("execute", obj, _EXECUTE_WRAPPERS, EXECUTE_ALIASES)


def parse_query_msg(obj: Any) -> Tuple[str, Any]:
    """Return (tag, model) for a query message."""
    return _parse_tagged("query", obj, _QUERY_WRAPPERS, {})


def message_schemas() -> Json:
    """JSON schemas of all accepted messages, for clients and codegen."""

    def _union(wrappers: Dict[str, Type[_StrictModel]]) -> Json:
        models = tuple(wrappers.values())
        return TypeAdapter(Union[models]).json_schema()  # type: ignore[valid-type]

    return {
        "instantiate": InstantiateMsg.model_json_schema(),
        "execute": _union(_EXECUTE_WRAPPERS),
        "query": _union(_QUERY_WRAPPERS),
    }


__all__ = [
    "InstantiateMsg",
    "StakerMsg",
    "Deposit",
    "DistributeFunds",
    "ChangeAdmin",
    "AddStakers",
    "DistributeRewards",
    "GetBalance",
    "GetBalanceOf",
    "GetAdmin",
    "GetStakers",
    "EXECUTE_MESSAGES",
    "QUERY_MESSAGES",
    "parse_instantiate_msg",
    "parse_execute_msg",
    "parse_query_msg",
    "message_schemas",
]
