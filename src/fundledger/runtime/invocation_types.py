from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from fundledger.ledger.identity import Identity, as_amount
from fundledger.runtime.errors import InvalidMessage


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: int

    @staticmethod
    def from_json(j: Any) -> "Coin":
        if isinstance(j, Coin):
            return j
        if not isinstance(j, dict):
            raise InvalidMessage("coin_not_object", {"type": type(j).__name__})
        denom = str(j.get("denom", "") or "").strip()
        if not denom:
            raise InvalidMessage("coin_missing_denom", {})
        return Coin(denom=denom, amount=as_amount(j.get("amount", 0), field="funds.amount"))

    def to_json(self) -> Dict[str, Any]:
        return {"denom": self.denom, "amount": str(self.amount)}


@dataclass(frozen=True)
class MessageInfo:
    """Who is calling and what they attached, as verified by the host."""

    sender: Identity
    funds: Tuple[Coin, ...] = ()

    @staticmethod
    def of(sender: Any, funds: Sequence[Any] = ()) -> "MessageInfo":
        return MessageInfo(sender=Identity.parse(sender), funds=tuple(Coin.from_json(c) for c in funds))

    def amount_of(self, denom: str) -> int | None:
        """Sum of attached coins in `denom`, or None if none were attached."""
        found = [c.amount for c in self.funds if c.denom == denom]
        if not found:
            return None
        return sum(found)


@dataclass(frozen=True)
class Transfer:
    """Outbound transfer effect the host performs after a successful invocation."""

    to: Identity
    amount: int
    denom: str

    def to_json(self) -> Dict[str, Any]:
        return {"to": self.to.value, "amount": str(self.amount), "denom": self.denom}


@dataclass(frozen=True)
class Response:
    attributes: Tuple[Tuple[str, str], ...] = ()
    messages: Tuple[Transfer, ...] = ()

    @staticmethod
    def build(attributes: Sequence[Tuple[str, Any]] = (), messages: Sequence[Transfer] = ()) -> "Response":
        return Response(
            attributes=tuple((str(k), str(v)) for k, v in attributes),
            messages=tuple(messages),
        )

    def attr(self, key: str) -> str | None:
        for k, v in self.attributes:
            if k == key:
                return v
        return None

    def to_json(self) -> Dict[str, Any]:
        return {
            "attributes": [{"key": k, "value": v} for k, v in self.attributes],
            "messages": [m.to_json() for m in self.messages],
        }
