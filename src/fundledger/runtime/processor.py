# src/fundledger/runtime/processor.py
from __future__ import annotations

"""Command processor.

Each invocation runs the same short state machine:

    Idle -> Validating -> Authorizing -> Applying -> Done
                 \\             \\            \\
                  +-------------+------------+--> Rejected

The store handle is passed into every call; the processor keeps no ledger
state of its own. A mutating command loads the full LedgerState, works on a
private copy, and calls store.save() exactly once with the finished copy. Any
LedgerError raised before that save leaves the stored ledger untouched.

Admin-gated commands authorize before validating their arguments, so a
non-admin caller always gets Unauthorized regardless of payload contents.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from fundledger.ledger.constants import DEFAULT_DENOM, DISTRIBUTION_POLICIES, POLICY_BOUNDED, POLICY_CREDIT
from fundledger.ledger.identity import Identity, as_amount
from fundledger.ledger.state import LedgerState, Staker
from fundledger.runtime import messages as m
from fundledger.runtime.errors import (
    AlreadyInitialized,
    AmountTooSmall,
    InsufficientFunds,
    InvalidAmount,
    LedgerError,
    LengthMismatch,
    NoFunds,
    NoStakers,
    Unauthorized,
    UnsupportedCommand,
)
from fundledger.runtime.invocation_types import MessageInfo, Response, Transfer
from fundledger.runtime.runtime_logging import log_event
from fundledger.runtime.store import LedgerStore

log = logging.getLogger("fundledger.processor")

Json = Dict[str, Any]

PHASE_IDLE = "idle"
PHASE_VALIDATING = "validating"
PHASE_AUTHORIZING = "authorizing"
PHASE_APPLYING = "applying"
PHASE_DONE = "done"
PHASE_REJECTED = "rejected"


@dataclass(frozen=True)
class ProcessorPolicy:
    """Behavior switches that are fixed for the lifetime of a deployment."""

    denom: str = DEFAULT_DENOM
    distribution_policy: str = POLICY_CREDIT
    stakers_enabled: bool = False

    def __post_init__(self) -> None:
        if self.distribution_policy not in DISTRIBUTION_POLICIES:
            raise ValueError(f"unknown distribution_policy: {self.distribution_policy!r}")

    @staticmethod
    def from_config(cfg: Any) -> "ProcessorPolicy":
        return ProcessorPolicy(
            denom=str(cfg.denom),
            distribution_policy=str(cfg.distribution_policy),
            stakers_enabled=bool(cfg.stakers_enabled),
        )


class _Invocation:
    __slots__ = ("command", "sender", "phase")

    def __init__(self, command: str, sender: Identity | None) -> None:
        self.command = command
        self.sender = sender
        self.phase = PHASE_IDLE

    def enter(self, phase: str) -> None:
        self.phase = phase


def _require_admin(state: LedgerState, caller: Identity) -> None:
    if caller != state.admin:
        raise Unauthorized("caller_not_admin", {"caller": caller.value})


def _parse_pairs(recipients: Sequence[Any], amounts: Sequence[Any]) -> List[Tuple[Identity, int]]:
    if len(recipients) != len(amounts):
        raise LengthMismatch(details={"recipients": len(recipients), "amounts": len(amounts)})
    return [
        (Identity.parse(r), as_amount(a, field=f"amounts[{i}]"))
        for i, (r, a) in enumerate(zip(recipients, amounts))
    ]


class CommandProcessor:
    def __init__(self, policy: ProcessorPolicy | None = None) -> None:
        self.policy = policy or ProcessorPolicy()

    # ------------------------------------------------------------------
    # invocation bookkeeping
    # ------------------------------------------------------------------

    @contextmanager
    def _invocation(self, command: str, sender: Identity | None) -> Iterator[_Invocation]:
        inv = _Invocation(command, sender)
        inv.enter(PHASE_VALIDATING)
        try:
            yield inv
        except LedgerError as e:
            failed_in = inv.phase
            inv.enter(PHASE_REJECTED)
            log_event(
                log,
                "command_rejected",
                level=logging.ERROR if e.fatal else logging.WARNING,
                command=command,
                sender=sender.value if sender else None,
                phase=failed_in,
                code=e.code,
                reason=e.reason,
            )
            raise
        inv.enter(PHASE_DONE)
        log_event(log, "command_applied", command=command, sender=sender.value if sender else None)

    def _require_stakers_enabled(self, command: str) -> None:
        if not self.policy.stakers_enabled:
            raise UnsupportedCommand("stakers_mode_disabled", {"command": command})

    # ------------------------------------------------------------------
    # instantiate
    # ------------------------------------------------------------------

    def instantiate(self, store: LedgerStore, info: MessageInfo, msg: Any) -> Response:
        with self._invocation("instantiate", info.sender) as inv:
            parsed = m.parse_instantiate_msg(msg)
            if store.exists():
                raise AlreadyInitialized()
            initial = [(Identity.parse(a), as_amount(v, field="initial_balances")) for a, v in parsed.initial_balances]

            inv.enter(PHASE_APPLYING)
            state = LedgerState.new(info.sender, initial)
            store.save(state)
        return Response.build([("action", "instantiate"), ("admin", info.sender.value)])

    # ------------------------------------------------------------------
    # execute
    # ------------------------------------------------------------------

    def execute(self, store: LedgerStore, info: MessageInfo, msg: Any) -> Response:
        try:
            tag, body = m.parse_execute_msg(msg)
        except LedgerError as e:
            log_event(
                log,
                "command_rejected",
                level=logging.WARNING,
                command="execute",
                sender=info.sender.value,
                phase=PHASE_VALIDATING,
                code=e.code,
                reason=e.reason,
            )
            raise
        if tag == "deposit":
            return self.deposit(store, info)
        if tag == "distribute_funds":
            return self.distribute_funds(store, info, body.recipients, body.amounts)
        if tag == "change_admin":
            return self.change_admin(store, info, body.new_admin)
        if tag == "add_stakers":
            return self.add_stakers(store, info, [(s.address, s.amount) for s in body.stakers])
        if tag == "distribute_rewards":
            return self.distribute_rewards(store, info, body.amount)
        raise UnsupportedCommand("unknown_execute_msg", {"tag": tag})  # pragma: no cover

    def deposit(self, store: LedgerStore, info: MessageInfo) -> Response:
        with self._invocation("deposit", info.sender) as inv:
            amount = info.amount_of(self.policy.denom)
            if amount is None:
                raise NoFunds("no_funds_sent", {"denom": self.policy.denom})
            if amount <= 0:
                raise InvalidAmount("invalid_deposit_amount", {"amount": amount})
            state = store.load()

            inv.enter(PHASE_APPLYING)
            nxt = state.copy()
            nxt.credit(info.sender, amount)
            store.save(nxt)
        return Response.build([("action", "deposit"), ("sender", info.sender.value), ("amount", amount)])

    def distribute_funds(
        self,
        store: LedgerStore,
        info: MessageInfo,
        recipients: Sequence[Any],
        amounts: Sequence[Any],
    ) -> Response:
        with self._invocation("distribute_funds", info.sender) as inv:
            state = store.load()

            inv.enter(PHASE_AUTHORIZING)
            _require_admin(state, info.sender)

            inv.enter(PHASE_VALIDATING)
            pairs = _parse_pairs(recipients, amounts)
            total = sum(a for _, a in pairs)
            bounded = self.policy.distribution_policy == POLICY_BOUNDED
            if bounded and total > state.balance_of(state.admin):
                raise InsufficientFunds(
                    details={"required": str(total), "available": str(state.balance_of(state.admin))}
                )

            inv.enter(PHASE_APPLYING)
            nxt = state.copy()
            if bounded:
                nxt.debit(nxt.admin, total)
            for recipient, amount in pairs:
                nxt.credit(recipient, amount)
            store.save(nxt)
        return Response.build(
            [
                ("action", "distribute_funds"),
                ("policy", self.policy.distribution_policy),
                ("recipients", len(pairs)),
                ("total", total),
            ]
        )

    def change_admin(self, store: LedgerStore, info: MessageInfo, new_admin: Any) -> Response:
        with self._invocation("change_admin", info.sender) as inv:
            state = store.load()

            inv.enter(PHASE_AUTHORIZING)
            _require_admin(state, info.sender)

            inv.enter(PHASE_VALIDATING)
            admin = Identity.parse(new_admin)

            inv.enter(PHASE_APPLYING)
            nxt = state.copy()
            nxt.admin = admin
            store.save(nxt)
        return Response.build([("action", "change_admin"), ("new_admin", admin.value)])

    def add_stakers(self, store: LedgerStore, info: MessageInfo, stakers: Sequence[Tuple[Any, Any]]) -> Response:
        with self._invocation("add_stakers", info.sender) as inv:
            self._require_stakers_enabled("add_stakers")
            state = store.load()

            inv.enter(PHASE_AUTHORIZING)
            _require_admin(state, info.sender)

            inv.enter(PHASE_VALIDATING)
            added = [Staker(Identity.parse(a), as_amount(v, field="stakers.amount")) for a, v in stakers]

            inv.enter(PHASE_APPLYING)
            nxt = state.copy()
            nxt.stakers.extend(added)
            store.save(nxt)
        return Response.build([("action", "add_stakers"), ("added", len(added)), ("stakers", len(nxt.stakers))])

    def distribute_rewards(self, store: LedgerStore, info: MessageInfo, amount: Any) -> Response:
        """Split `amount` equally across stakers as outbound transfers.

        Integer division; the remainder stays undistributed. The ledger itself
        is not modified, so nothing is saved.
        """
        with self._invocation("distribute_rewards", info.sender) as inv:
            self._require_stakers_enabled("distribute_rewards")
            state = store.load()

            inv.enter(PHASE_AUTHORIZING)
            _require_admin(state, info.sender)

            inv.enter(PHASE_VALIDATING)
            total = as_amount(amount)
            if not state.stakers:
                raise NoStakers()
            count = len(state.stakers)
            reward = total // count
            if reward == 0:
                raise AmountTooSmall(details={"amount": str(total), "stakers": count})

            inv.enter(PHASE_APPLYING)
            transfers = [Transfer(to=s.address, amount=reward, denom=self.policy.denom) for s in state.stakers]
        return Response.build(
            [
                ("action", "distribute_rewards"),
                ("reward_per_staker", reward),
                ("remainder", total - reward * count),
            ],
            transfers,
        )

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def get_balance(self, store: LedgerStore) -> List[Tuple[Identity, int]]:
        return store.load().balance_list()

    def get_balance_of(self, store: LedgerStore, address: Any) -> int:
        return store.load().balance_of(Identity.parse(address))

    def get_admin(self, store: LedgerStore) -> Identity:
        return store.load_admin_only()

    def get_stakers(self, store: LedgerStore) -> List[Staker]:
        return list(store.load().stakers)

    def query(self, store: LedgerStore, msg: Any) -> Any:
        """Answer a query message with JSON-ready data (amounts as decimal strings)."""
        tag, body = m.parse_query_msg(msg)
        if tag == "get_balance":
            return [[a.value, str(v)] for a, v in self.get_balance(store)]
        if tag == "get_balance_of":
            addr = Identity.parse(body.address)
            return {"address": addr.value, "balance": str(self.get_balance_of(store, addr))}
        if tag == "get_admin":
            return {"admin": self.get_admin(store).value}
        if tag == "get_stakers":
            return [s.to_json() for s in self.get_stakers(store)]
        raise UnsupportedCommand("unknown_query_msg", {"tag": tag})  # pragma: no cover


__all__ = [
    "CommandProcessor",
    "ProcessorPolicy",
    "PHASE_IDLE",
    "PHASE_VALIDATING",
    "PHASE_AUTHORIZING",
    "PHASE_APPLYING",
    "PHASE_DONE",
    "PHASE_REJECTED",
]
