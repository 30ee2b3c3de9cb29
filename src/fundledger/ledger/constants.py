# src/fundledger/ledger/constants.py
from __future__ import annotations

"""Ledger constants.

The ledger tracks a single fungible balance per address. Deposits are only
recognized in one denomination; funds in any other denom are ignored.
"""

# Denomination recognized by Deposit (the host's native coin).
DEFAULT_DENOM: str = "uscrt"

# DistributeFunds funding policies.
#   credit  -> recipients are credited, nothing is debited (original behavior)
#   bounded -> the admin's own book funds the distribution and is debited
POLICY_CREDIT: str = "credit"
POLICY_BOUNDED: str = "bounded"
DISTRIBUTION_POLICIES = (POLICY_CREDIT, POLICY_BOUNDED)

# Identity format bounds.
MAX_IDENTITY_LEN: int = 128

# Amount and balance size bound, in decimal digits. Kept below the interpreter's
# int/str conversion limit (4300 digits) so every stored value stays encodable
# as a decimal string.
MAX_AMOUNT_DIGITS: int = 4000

# Persisted state layout version (bump together with SqliteDB.SCHEMA_VERSION
# if the JSON shape changes incompatibly).
STATE_VERSION: int = 1
