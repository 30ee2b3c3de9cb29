# src/fundledger/ledger/__init__.py
"""Ledger value types: identities, amounts and the persisted state."""
