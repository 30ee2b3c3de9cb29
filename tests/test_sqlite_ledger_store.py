from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from fundledger.ledger.identity import Identity
from fundledger.ledger.state import LedgerState, Staker
from fundledger.runtime.errors import NotInitialized, StorageWriteError
from fundledger.runtime.sqlite_db import SqliteDB, SqliteLedgerStore
from fundledger.runtime.store import MemoryLedgerStore


def _pragma(con: sqlite3.Connection, name: str) -> int | str:
    row = con.execute(f"PRAGMA {name};").fetchone()
    if row is None:
        raise AssertionError(f"missing pragma: {name}")
    return row[0]


def _state() -> LedgerState:
    st = LedgerState.new(Identity("creator"), [(Identity("a"), 100), (Identity("b"), 2**100)])
    st.stakers.append(Staker(Identity("s1"), 9))
    return st


@pytest.fixture()
def store(tmp_path: Path) -> SqliteLedgerStore:
    return SqliteLedgerStore(db=SqliteDB(path=str(tmp_path / "ledger.db")))


def test_load_before_save_is_not_initialized(store: SqliteLedgerStore) -> None:
    assert store.exists() is False
    with pytest.raises(NotInitialized):
        store.load()
    with pytest.raises(NotInitialized):
        store.load_admin_only()


def test_save_then_load_round_trips(store: SqliteLedgerStore) -> None:
    st = _state()
    store.save(st)
    assert store.exists() is True
    assert store.load() == st
    assert store.load_admin_only() == Identity("creator")


def test_save_replaces_wholesale(store: SqliteLedgerStore) -> None:
    store.save(_state())
    nxt = LedgerState.new(Identity("n"), [(Identity("z"), 1)])
    store.save(nxt)
    assert store.load() == nxt
    assert store.load_admin_only() == Identity("n")


def test_memory_store_round_trips_and_does_not_alias() -> None:
    mem = MemoryLedgerStore()
    with pytest.raises(NotInitialized):
        mem.load()
    st = _state()
    mem.save(st)
    loaded = mem.load()
    assert loaded == st
    loaded.credit(Identity("a"), 1)
    assert mem.load().balance_of(Identity("a")) == 100


def test_write_failure_is_storage_write_error(store: SqliteLedgerStore, monkeypatch: pytest.MonkeyPatch) -> None:
    store.save(_state())

    def _boom(*_a, **_k):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(store.db, "write_tx", _boom)
    with pytest.raises(StorageWriteError):
        store.save(LedgerState.new(Identity("other")))
    monkeypatch.undo()

    assert store.load() == _state()


def test_schema_version_mismatch_refuses_to_open(tmp_path: Path) -> None:
    path = str(tmp_path / "ledger.db")
    db = SqliteDB(path=path)
    db.init_schema()
    with db.write_tx() as con:
        con.execute("UPDATE meta SET value='99' WHERE key='schema_version';")

    with pytest.raises(RuntimeError):
        SqliteLedgerStore(db=SqliteDB(path=path))


def test_sqlite_operational_pragmas_are_applied(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUNDLEDGER_MODE", "prod")
    monkeypatch.delenv("FUNDLEDGER_SQLITE_SYNCHRONOUS", raising=False)
    monkeypatch.setenv("FUNDLEDGER_SQLITE_BUSY_TIMEOUT_MS", "1234")
    monkeypatch.setenv("FUNDLEDGER_SQLITE_WAL_AUTOCHECKPOINT", "777")

    db = SqliteDB(path=str(tmp_path / "ledger.db"))
    db.init_schema()

    with db.connection() as con:
        assert str(_pragma(con, "journal_mode")).lower() == "wal"
        # FULL is the prod default.
        assert int(_pragma(con, "synchronous")) == 2
        assert int(_pragma(con, "foreign_keys")) == 1
        assert int(_pragma(con, "busy_timeout")) == 1234
        assert int(_pragma(con, "wal_autocheckpoint")) == 777
