"""
Exception hierarchy for the orchestration engine.

Every failing step raises one of these; nothing in the core signals failure
by returning None. ``retryable`` tells the caller whether a single retry
after backoff is meaningful.
"""

from __future__ import annotations


class CatError(Exception):
    """Base class for all token orchestration failures."""

    retryable = False


class ValidationError(CatError):
    """Bad caller input. Never retried."""


class InvalidTokenMetadata(ValidationError):
    pass


class InvalidReceiver(ValidationError):
    pass


class InvalidAmount(ValidationError):
    pass


class TokenNotFound(ValidationError):
    def __init__(self, token_id: str):
        super().__init__(f"No token metadata found for tokenId: {token_id}")
        self.token_id = token_id


class InsufficientBalanceError(CatError):
    """Not enough satoshis or tokens to build the transaction."""


class InsufficientFunds(InsufficientBalanceError):
    pass


class InsufficientSatoshiBalance(InsufficientFunds):
    pass


class InsufficientTokenBalance(InsufficientBalanceError):
    pass


class QuotaViolation(CatError):
    """Mint amount breaks the minter's premine or limit rules."""


class UnknownMinter(CatError):
    def __init__(self, minter_md5: str):
        super().__init__(f"Unknown minter: {minter_md5!r}")
        self.minter_md5 = minter_md5


class MinterUnavailable(CatError):
    """No spendable minter instance was found for the token."""


class MergeFailure(CatError):
    """
    Consolidation of token outputs failed part way.

    Steps broadcast before the failure are already on the network and stay
    recorded in the spend tracker.
    """

    retryable = True

    def __init__(self, message: str, completed_steps: int = 0):
        super().__init__(message)
        self.completed_steps = completed_steps


class NetworkError(CatError):
    """Transport failure talking to the tracker, mempool or broadcast endpoint."""


class BroadcastError(NetworkError):
    def __init__(self, message: str, stage: str = "commit"):
        super().__init__(message)
        self.stage = stage


class RevealBroadcastFailed(CatError):
    """
    The commit transaction is on the network but its reveal was rejected.

    This is a partial-success state and needs operator attention.
    """

    def __init__(self, commit_txid: str, reason: str):
        super().__init__(f"Reveal broadcast failed after commit {commit_txid}: {reason}")
        self.commit_txid = commit_txid
        self.reason = reason
