"""
catcore - CAT-20 token orchestration engine

Output selection, merging, minter quota enforcement and commit + reveal
broadcasting for deploy, mint and transfer.
"""

__version__ = "0.3.0"

from catcore.errors import (
    BroadcastError,
    CatError,
    InsufficientBalanceError,
    InsufficientFunds,
    InsufficientSatoshiBalance,
    InsufficientTokenBalance,
    InvalidAmount,
    InvalidReceiver,
    InvalidTokenMetadata,
    MergeFailure,
    MinterUnavailable,
    NetworkError,
    QuotaViolation,
    RevealBroadcastFailed,
    TokenNotFound,
    UnknownMinter,
    ValidationError,
)
from catcore.models import (
    DeployResult,
    MinterInstance,
    MinterState,
    MintResult,
    Output,
    TokenInfo,
    TokenMetadata,
    TokenOutput,
    TransferResult,
)
from catcore.service import TokenService
from catcore.spend import SpendTracker

__all__ = [
    "BroadcastError",
    "CatError",
    "DeployResult",
    "InsufficientBalanceError",
    "InsufficientFunds",
    "InsufficientSatoshiBalance",
    "InsufficientTokenBalance",
    "InvalidAmount",
    "InvalidReceiver",
    "InvalidTokenMetadata",
    "MergeFailure",
    "MintResult",
    "MinterInstance",
    "MinterState",
    "MinterUnavailable",
    "NetworkError",
    "Output",
    "QuotaViolation",
    "RevealBroadcastFailed",
    "SpendTracker",
    "TokenInfo",
    "TokenMetadata",
    "TokenNotFound",
    "TokenOutput",
    "TokenService",
    "TransferResult",
    "UnknownMinter",
    "ValidationError",
]
