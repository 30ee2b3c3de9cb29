# src/fundledger/__init__.py
"""FundLedger: an admin-gated balance ledger with a contract-style command processor."""

__version__ = "0.1.0"
