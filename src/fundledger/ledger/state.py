from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from fundledger.ledger.constants import MAX_AMOUNT_DIGITS, STATE_VERSION
from fundledger.ledger.identity import AMOUNT_LIMIT, Identity, as_amount
from fundledger.runtime.errors import InvalidAmount, LedgerError


Json = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class Staker:
    address: Identity
    amount: int

    def to_json(self) -> Json:
        return {"address": self.address.value, "amount": str(self.amount)}

    @classmethod
    def from_json(cls, j: Any) -> "Staker":
        if not isinstance(j, dict):
            raise LedgerError("corrupt_state", "staker_not_object", {"type": type(j).__name__})
        return cls(
            address=Identity.parse(j.get("address")),
            amount=as_amount(j.get("amount", 0), field="staker.amount"),
        )


@dataclass(slots=True)
class LedgerState:
    """
    The persisted contract singleton: admin identity, balance book and staker list.

    balances is a plain dict; callers that need a deterministic order go through
    balance_list(), which sorts by address.
    """

    admin: Identity
    balances: Dict[Identity, int] = field(default_factory=dict)
    stakers: List[Staker] = field(default_factory=list)

    @classmethod
    def new(cls, admin: Identity, initial_balances: Iterable[Tuple[Identity, int]] = ()) -> "LedgerState":
        st = cls(admin=admin)
        # last write wins for duplicate addresses
        for addr, amount in initial_balances:
            st.balances[addr] = int(amount)
        return st

    def copy(self) -> "LedgerState":
        return LedgerState(admin=self.admin, balances=dict(self.balances), stakers=list(self.stakers))

    def balance_of(self, addr: Identity) -> int:
        return int(self.balances.get(addr, 0))

    def credit(self, addr: Identity, amount: int) -> None:
        new = self.balance_of(addr) + int(amount)
        if new >= AMOUNT_LIMIT:
            raise InvalidAmount("balance_overflow", {"address": addr.value, "max_digits": MAX_AMOUNT_DIGITS})
        self.balances[addr] = new

    def debit(self, addr: Identity, amount: int) -> None:
        have = self.balance_of(addr)
        if amount > have:
            # Callers check funding first; reaching here is a processor bug.
            raise ValueError(f"debit would make balance negative: {addr} has {have}, debit {amount}")
        self.balances[addr] = have - int(amount)

    def total_supply(self) -> int:
        return sum(int(v) for v in self.balances.values())

    def balance_list(self) -> List[Tuple[Identity, int]]:
        return sorted(self.balances.items(), key=lambda kv: kv[0].value)

    def to_json(self) -> Json:
        # Amounts are decimal strings so values beyond 2**53 survive JSON.
        return {
            "state_version": STATE_VERSION,
            "admin": self.admin.value,
            "balances": {a.value: str(v) for a, v in self.balance_list()},
            "stakers": [s.to_json() for s in self.stakers],
        }

    @classmethod
    def from_json(cls, j: Any) -> "LedgerState":
        if not isinstance(j, dict):
            raise LedgerError("corrupt_state", "ledger_state_not_object", {"type": type(j).__name__})
        version = j.get("state_version", STATE_VERSION)
        if version != STATE_VERSION:
            raise LedgerError("corrupt_state", "state_version_mismatch", {"have": version, "want": STATE_VERSION})

        raw_balances = j.get("balances") or {}
        if not isinstance(raw_balances, dict):
            raise LedgerError("corrupt_state", "balances_not_object", {"type": type(raw_balances).__name__})
        raw_stakers = j.get("stakers") or []
        if not isinstance(raw_stakers, list):
            raise LedgerError("corrupt_state", "stakers_not_list", {"type": type(raw_stakers).__name__})

        return cls(
            admin=Identity.parse(j.get("admin")),
            balances={Identity.parse(k): as_amount(v, field="balance") for k, v in raw_balances.items()},
            stakers=[Staker.from_json(s) for s in raw_stakers],
        )


__all__ = ["Json", "LedgerState", "Staker"]
