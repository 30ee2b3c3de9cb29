# src/fundledger/api/__init__.py
"""HTTP surface (FastAPI). Run with `python -m fundledger.api`."""
