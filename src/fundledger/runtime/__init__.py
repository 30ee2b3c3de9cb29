# src/fundledger/runtime/__init__.py
"""Command processing, persistence and host glue.

NOTE: Keep this package import-safe (no imports of the API stack).
"""
