from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class LedgerError(Exception):
    """Canonical error type for command validation, authorization and storage failures."""

    code: str
    reason: str
    details: Any | None = None

    # Fatal errors abort the invocation; everything else is a clean rejection.
    fatal = False

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class Unauthorized(LedgerError):
    def __init__(self, reason: str = "caller_not_admin", details: Any | None = None) -> None:
        super().__init__("unauthorized", reason, details)


class InvalidAmount(LedgerError):
    def __init__(self, reason: str = "invalid_amount", details: Any | None = None) -> None:
        super().__init__("invalid_amount", reason, details)


class LengthMismatch(LedgerError):
    def __init__(self, reason: str = "recipients_amounts_length_mismatch", details: Any | None = None) -> None:
        super().__init__("length_mismatch", reason, details)


class NoStakers(LedgerError):
    def __init__(self, reason: str = "no_stakers_found", details: Any | None = None) -> None:
        super().__init__("no_stakers", reason, details)


class AmountTooSmall(LedgerError):
    def __init__(self, reason: str = "reward_amount_too_small", details: Any | None = None) -> None:
        super().__init__("amount_too_small", reason, details)


class NoFunds(LedgerError):
    def __init__(self, reason: str = "no_funds_sent", details: Any | None = None) -> None:
        super().__init__("no_funds", reason, details)


class InsufficientFunds(LedgerError):
    def __init__(self, reason: str = "admin_balance_too_low", details: Any | None = None) -> None:
        super().__init__("insufficient_funds", reason, details)


class InvalidIdentity(LedgerError):
    def __init__(self, reason: str = "invalid_identity", details: Any | None = None) -> None:
        super().__init__("invalid_identity", reason, details)


class InvalidMessage(LedgerError):
    def __init__(self, reason: str = "invalid_message", details: Any | None = None) -> None:
        super().__init__("invalid_message", reason, details)


class UnsupportedCommand(LedgerError):
    def __init__(self, reason: str = "command_not_enabled", details: Any | None = None) -> None:
        super().__init__("unsupported_command", reason, details)


class NotInitialized(LedgerError):
    def __init__(self, reason: str = "ledger_state_missing", details: Any | None = None) -> None:
        super().__init__("not_initialized", reason, details)


class AlreadyInitialized(LedgerError):
    def __init__(self, reason: str = "ledger_state_exists", details: Any | None = None) -> None:
        super().__init__("already_initialized", reason, details)


class StorageWriteError(LedgerError):
    fatal = True

    def __init__(self, reason: str = "ledger_write_failed", details: Any | None = None) -> None:
        super().__init__("storage_write_error", reason, details)


__all__ = [
    "LedgerError",
    "Unauthorized",
    "InvalidAmount",
    "LengthMismatch",
    "NoStakers",
    "AmountTooSmall",
    "NoFunds",
    "InsufficientFunds",
    "InvalidIdentity",
    "InvalidMessage",
    "UnsupportedCommand",
    "NotInitialized",
    "AlreadyInitialized",
    "StorageWriteError",
]
