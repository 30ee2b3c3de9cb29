import fcntl
import logging
import os

from fundledger.runtime.runtime_logging import log_event

log = logging.getLogger("fundledger.store")


class SingleWriterLock:
    """
    Enforces a single-process writer for a ledger database.
    Uses a filesystem lock next to the database file. Safe for WSL + Linux.
    """

    def __init__(self, path: str):
        self.path = path
        self._fd = None

    def acquire(self) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        fd = open(self.path, "w")
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            fd.close()
            log_event(log, "single_writer_lock_busy", level=logging.ERROR, path=self.path)
            raise RuntimeError(f"single-writer lock already held: {self.path}")
        self._fd = fd

    def release(self) -> None:
        if self._fd:
            try:
                fcntl.flock(self._fd, fcntl.LOCK_UN)
            finally:
                self._fd.close()
                self._fd = None
