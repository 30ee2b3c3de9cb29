# src/fundledger/ledger/identity.py
from __future__ import annotations

"""Identity value type and amount helpers.

Identities are opaque principals: the ledger never interprets their contents
beyond a basic shape check. Format validation proper (bech32, checksums, etc.)
belongs to the host boundary that hands us decoded commands.
"""

from dataclasses import dataclass
from typing import Any

from fundledger.ledger.constants import MAX_AMOUNT_DIGITS, MAX_IDENTITY_LEN
from fundledger.runtime.errors import InvalidAmount, InvalidIdentity


@dataclass(frozen=True, order=True, slots=True)
class Identity:
    value: str

    def __post_init__(self) -> None:
        v = self.value
        if not isinstance(v, str):
            raise InvalidIdentity("identity_not_string", {"type": type(v).__name__})
        if not v or v != v.strip():
            raise InvalidIdentity("identity_blank_or_padded", {"identity": v})
        if len(v) > MAX_IDENTITY_LEN:
            raise InvalidIdentity("identity_too_long", {"len": len(v), "max": MAX_IDENTITY_LEN})
        if any(ch.isspace() or not ch.isprintable() for ch in v):
            raise InvalidIdentity("identity_bad_chars", {"identity": v})

    @classmethod
    def parse(cls, v: Any) -> "Identity":
        if isinstance(v, Identity):
            return v
        if not isinstance(v, str):
            raise InvalidIdentity("identity_not_string", {"type": type(v).__name__})
        return cls(v)

    def __str__(self) -> str:
        return self.value


AMOUNT_LIMIT = 10**MAX_AMOUNT_DIGITS


def as_amount(v: Any, *, field: str = "amount") -> int:
    """Coerce an int or decimal-digit string into a non-negative amount.

    bool is rejected even though it is an int subclass; floats are rejected
    because amounts carry no fractional units. Amounts are arbitrary precision
    up to MAX_AMOUNT_DIGITS decimal digits.
    """
    if isinstance(v, bool):
        raise InvalidAmount("amount_not_integer", {"field": field, "value": v})
    if isinstance(v, int):
        if v >= AMOUNT_LIMIT or v <= -AMOUNT_LIMIT:
            raise InvalidAmount("amount_too_large", {"field": field, "max_digits": MAX_AMOUNT_DIGITS})
        n = v
    elif isinstance(v, str) and v.strip().isascii() and v.strip().isdigit():
        s = v.strip()
        if len(s) > MAX_AMOUNT_DIGITS:
            raise InvalidAmount("amount_too_large", {"field": field, "digits": len(s), "max_digits": MAX_AMOUNT_DIGITS})
        n = int(s)
    else:
        raise InvalidAmount("amount_not_integer", {"field": field, "value": repr(v)[:64]})
    if n < 0:
        raise InvalidAmount("amount_negative", {"field": field, "value": n})
    return n


def require_positive(v: Any, *, field: str = "amount") -> int:
    n = as_amount(v, field=field)
    if n <= 0:
        raise InvalidAmount("amount_must_be_positive", {"field": field, "value": n})
    return n


__all__ = ["AMOUNT_LIMIT", "Identity", "as_amount", "require_positive"]
