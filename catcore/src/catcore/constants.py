"""
CAT-20 protocol and orchestration constants.

Token amounts are carried as integers in base units (human amount scaled by
10^decimals).
"""

from __future__ import annotations

# A token output set larger than this is consolidated before it is spent
MERGE_THRESHOLD = 4

# The token guard contract accepts at most this many token inputs per transaction
MAX_TOKEN_INPUTS = 4

# Seconds to wait after a failed merge before handing control back to the caller
MERGE_BACKOFF_SECONDS = 6.0

# Token amounts are encoded as signed 64-bit integers in contract state
MAX_AMOUNT = 2**63 - 1

# Decimals accepted for a new token
MAX_DECIMALS = 18

# Genesis transaction output count when it also funds the premine mint
GENESIS_OUTPUTS_WITH_PREMINE = 3

# Output indexes inside the deploy transactions used by the premine mint
PREMINE_FEE_OUTPUT_INDEX = 2
MINTER_OUTPUT_INDEX = 1
