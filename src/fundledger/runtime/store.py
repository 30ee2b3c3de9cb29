from __future__ import annotations

"""Ledger persistence seam.

A store is a dumb persistence layer: it never checks balances or admin rights.
The CommandProcessor always loads the full state, computes a new full state and
saves it back with one save() call per invocation.
"""

import json
import logging
from typing import Any, Optional, Protocol

from fundledger.ledger.identity import Identity
from fundledger.ledger.state import LedgerState
from fundledger.runtime.errors import NotInitialized, StorageWriteError
from fundledger.runtime.runtime_logging import log_event

log = logging.getLogger("fundledger.store")


def _canon_json(obj: Any) -> str:
    """Canonical JSON encoding.

    Do not coerce unknown types (no default=str): anything that is not plain
    JSON in a persisted structure is a bug and must fail here.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class LedgerStore(Protocol):
    def exists(self) -> bool: ...

    def load(self) -> LedgerState: ...

    def save(self, state: LedgerState) -> None: ...

    def load_admin_only(self) -> Identity: ...


class MemoryLedgerStore:
    """In-process store.

    Keeps the canonical JSON text rather than the object so that load() always
    returns a fresh copy and round-trips through the same encoding as SQLite.
    """

    def __init__(self) -> None:
        self._payload: Optional[str] = None

    def exists(self) -> bool:
        return self._payload is not None

    def load(self) -> LedgerState:
        if self._payload is None:
            raise NotInitialized()
        return LedgerState.from_json(json.loads(self._payload))

    def save(self, state: LedgerState) -> None:
        try:
            self._payload = _canon_json(state.to_json())
        except (TypeError, ValueError) as e:
            raise StorageWriteError("encode_failed", {"error": str(e)}) from e
        log_event(log, "ledger_saved", store="memory", admin=state.admin.value, accounts=len(state.balances))

    def load_admin_only(self) -> Identity:
        return self.load().admin


__all__ = ["LedgerStore", "MemoryLedgerStore", "_canon_json"]
