from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Sequence

from fundledger.runtime.contract_config import ContractConfig, load_contract_config
from fundledger.runtime.invocation_types import MessageInfo, Response
from fundledger.runtime.processor import CommandProcessor, ProcessorPolicy
from fundledger.runtime.runtime_logging import log_event
from fundledger.runtime.single_writer import SingleWriterLock
from fundledger.runtime.sqlite_db import SqliteDB, SqliteLedgerStore
from fundledger.runtime.store import LedgerStore, MemoryLedgerStore

Json = Dict[str, Any]

MEMORY_DB_PATH = ":memory:"

log = logging.getLogger("fundledger.executor")


class LedgerExecutor:
    """Host glue around the CommandProcessor.

    The processor assumes invocations never interleave. This class provides
    that guarantee: one lock serializes every instantiate/execute/query, and
    for SQLite deployments a SingleWriterLock keeps other processes from
    writing the same database.
    """

    def __init__(
        self,
        *,
        store: LedgerStore,
        processor: CommandProcessor,
        contract_id: str = "fundledger",
        writer_lock: Optional[SingleWriterLock] = None,
    ) -> None:
        self.store = store
        self.processor = processor
        self.contract_id = contract_id
        self._lock = threading.Lock()
        self._writer_lock = writer_lock
        if self._writer_lock is not None:
            self._writer_lock.acquire()

    def close(self) -> None:
        if self._writer_lock is not None:
            self._writer_lock.release()

    def is_initialized(self) -> bool:
        with self._lock:
            return self.store.exists()

    def instantiate(self, sender: Any, msg: Any) -> Response:
        info = MessageInfo.of(sender)
        with self._lock:
            return self.processor.instantiate(self.store, info, msg)

    def execute(self, sender: Any, msg: Any, funds: Sequence[Any] = ()) -> Response:
        info = MessageInfo.of(sender, funds)
        with self._lock:
            return self.processor.execute(self.store, info, msg)

    def query(self, msg: Any) -> Any:
        with self._lock:
            return self.processor.query(self.store, msg)

    def read_state(self) -> Json:
        with self._lock:
            return self.store.load().to_json()


def build_store(cfg: ContractConfig) -> LedgerStore:
    if cfg.db_path == MEMORY_DB_PATH:
        return MemoryLedgerStore()
    return SqliteLedgerStore(db=SqliteDB(path=cfg.db_path))


def build_executor(cfg: Optional[ContractConfig] = None) -> LedgerExecutor:
    """Build a LedgerExecutor from an explicit config or, if omitted, from env/config file."""
    cfg = cfg or load_contract_config()
    store = build_store(cfg)
    writer_lock = None if cfg.db_path == MEMORY_DB_PATH else SingleWriterLock(cfg.db_path + ".lock")
    ex = LedgerExecutor(
        store=store,
        processor=CommandProcessor(ProcessorPolicy.from_config(cfg)),
        contract_id=cfg.contract_id,
        writer_lock=writer_lock,
    )
    log_event(
        log,
        "executor_built",
        contract_id=cfg.contract_id,
        db_path=cfg.db_path,
        denom=cfg.denom,
        distribution_policy=cfg.distribution_policy,
        stakers_enabled=cfg.stakers_enabled,
    )
    return ex
