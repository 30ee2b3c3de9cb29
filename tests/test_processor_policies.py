from __future__ import annotations

import pytest

from fundledger.ledger.identity import Identity
from fundledger.ledger.state import LedgerState
from fundledger.runtime.errors import (
    AmountTooSmall,
    InsufficientFunds,
    NoStakers,
    StorageWriteError,
    Unauthorized,
    UnsupportedCommand,
)
from fundledger.runtime.invocation_types import MessageInfo, Transfer
from fundledger.runtime.processor import CommandProcessor, ProcessorPolicy
from fundledger.runtime.store import MemoryLedgerStore


def _info(sender: str, funds=()) -> MessageInfo:
    return MessageInfo.of(sender, funds)


def _setup(policy: ProcessorPolicy, initial=()):
    store = MemoryLedgerStore()
    proc = CommandProcessor(policy)
    proc.instantiate(store, _info("admin"), {"initial_balances": [list(p) for p in initial]})
    return store, proc


# ---------------------------------------------------------------------------
# bounded distribution
# ---------------------------------------------------------------------------


def test_bounded_policy_debits_admin_and_conserves_supply() -> None:
    store, proc = _setup(ProcessorPolicy(distribution_policy="bounded"), initial=(("admin", 100), ("A", 1)))
    supply = store.load().total_supply()

    proc.execute(store, _info("admin"), {"distribute_funds": {"recipients": ["A", "B"], "amounts": [30, 20]}})

    st = store.load()
    assert st.balance_of(Identity("admin")) == 50
    assert st.balance_of(Identity("A")) == 31
    assert st.balance_of(Identity("B")) == 20
    assert st.total_supply() == supply


def test_bounded_policy_rejects_overdraw_without_changes() -> None:
    store, proc = _setup(ProcessorPolicy(distribution_policy="bounded"), initial=(("admin", 10),))
    before = store.load()
    with pytest.raises(InsufficientFunds):
        proc.execute(store, _info("admin"), {"distribute_funds": {"recipients": ["A"], "amounts": [11]}})
    assert store.load() == before


def test_bounded_policy_admin_paying_itself_is_net_zero() -> None:
    store, proc = _setup(ProcessorPolicy(distribution_policy="bounded"), initial=(("admin", 10),))
    proc.execute(store, _info("admin"), {"distribute_funds": {"recipients": ["admin"], "amounts": [10]}})
    assert store.load().balance_of(Identity("admin")) == 10


def test_unknown_policy_is_rejected_at_construction() -> None:
    with pytest.raises(ValueError):
        ProcessorPolicy(distribution_policy="both")


# ---------------------------------------------------------------------------
# staking mode
# ---------------------------------------------------------------------------

STAKING = ProcessorPolicy(stakers_enabled=True)


def test_staking_commands_rejected_when_disabled() -> None:
    store, proc = _setup(ProcessorPolicy())
    with pytest.raises(UnsupportedCommand):
        proc.execute(store, _info("admin"), {"add_stakers": {"stakers": [{"address": "s1", "amount": 1}]}})
    with pytest.raises(UnsupportedCommand):
        proc.execute(store, _info("admin"), {"distribute_rewards": {"amount": 10}})


def test_add_stakers_appends_in_order_and_requires_admin() -> None:
    store, proc = _setup(STAKING)
    proc.execute(store, _info("admin"), {"add_stakers": {"stakers": [{"address": "s1", "amount": 100}]}})
    proc.execute(store, _info("admin"), {"add_stakers": {"stakers": [{"address": "s2", "amount": "200"}]}})

    assert proc.query(store, {"get_stakers": {}}) == [
        {"address": "s1", "amount": "100"},
        {"address": "s2", "amount": "200"},
    ]

    with pytest.raises(Unauthorized):
        proc.execute(store, _info("s1"), {"add_stakers": {"stakers": []}})


def test_distribute_rewards_without_stakers_fails() -> None:
    store, proc = _setup(STAKING)
    with pytest.raises(NoStakers):
        proc.execute(store, _info("admin"), {"distribute_rewards": {"amount": 10}})


def test_distribute_rewards_smaller_than_staker_count_fails() -> None:
    store, proc = _setup(STAKING)
    stakers = [{"address": f"s{i}", "amount": 1} for i in range(3)]
    proc.execute(store, _info("admin"), {"add_stakers": {"stakers": stakers}})
    with pytest.raises(AmountTooSmall):
        proc.execute(store, _info("admin"), {"distribute_rewards": {"amount": 2}})


def test_distribute_rewards_emits_equal_transfers_and_drops_remainder() -> None:
    store, proc = _setup(STAKING, initial=(("x", 5),))
    stakers = [{"address": f"s{i}", "amount": 1} for i in range(3)]
    proc.execute(store, _info("admin"), {"add_stakers": {"stakers": stakers}})
    before = store.load()

    res = proc.execute(store, _info("admin"), {"distribute_rewards": {"amount": 10}})

    assert list(res.messages) == [Transfer(Identity(f"s{i}"), 3, "uscrt") for i in range(3)]
    assert res.attr("reward_per_staker") == "3"
    assert res.attr("remainder") == "1"
    # transfers are effects, not ledger credits
    assert store.load() == before


def test_distribute_rewards_requires_admin() -> None:
    store, proc = _setup(STAKING)
    proc.execute(store, _info("admin"), {"add_stakers": {"stakers": [{"address": "s1", "amount": 1}]}})
    with pytest.raises(Unauthorized):
        proc.execute(store, _info("s1"), {"distribute_rewards": {"amount": 10}})


# ---------------------------------------------------------------------------
# storage failure
# ---------------------------------------------------------------------------


class _FailingStore(MemoryLedgerStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def save(self, state: LedgerState) -> None:
        if self.fail:
            raise StorageWriteError("disk_full")
        super().save(state)


def test_storage_failure_surfaces_and_leaves_previous_state() -> None:
    store = _FailingStore()
    proc = CommandProcessor()
    proc.instantiate(store, _info("admin"), {"initial_balances": [["A", 1]]})
    before = store.load()

    store.fail = True
    with pytest.raises(StorageWriteError) as e:
        proc.execute(store, _info("admin"), {"distribute_funds": {"recipients": ["A"], "amounts": [5]}})
    assert e.value.fatal is True
    assert store.load() == before
