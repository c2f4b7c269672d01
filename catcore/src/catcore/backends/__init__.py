"""
Ledger backend implementations.

Available backends:
- TrackerBackend: CAT token tracker plus a mempool-style explorer over HTTP
"""

from catcore.backends.base import LedgerBackend
from catcore.backends.tracker import TrackerBackend

__all__ = [
    "LedgerBackend",
    "TrackerBackend",
]
