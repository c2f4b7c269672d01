"""
Ordered broadcast of commit + reveal transaction pairs.
"""

from __future__ import annotations

from loguru import logger

from catcore.backends.base import LedgerBackend
from catcore.builder import TransactionPair
from catcore.errors import BroadcastError, CatError, RevealBroadcastFailed
from catcore.spend import SpendTracker


async def broadcast_pair(
    backend: LedgerBackend, tracker: SpendTracker, pair: TransactionPair
) -> tuple[str, str]:
    """
    Broadcast the commit, then the reveal that spends it.

    The tracker learns about each transaction's inputs right after that
    transaction is accepted. A failed commit means the reveal is never sent;
    a failed reveal leaves the commit in place and is reported as
    RevealBroadcastFailed.

    Returns:
        (commit_txid, reveal_txid)
    """
    try:
        commit_txid = await backend.broadcast_transaction(pair.commit.raw)
    except CatError as e:
        raise BroadcastError(f"Commit broadcast failed: {e}", stage="commit") from e

    tracker.mark_transaction(pair.commit)
    logger.debug(f"Commit {commit_txid} broadcast")

    try:
        reveal_txid = await backend.broadcast_transaction(pair.reveal.raw)
    except CatError as e:
        logger.error(f"Reveal broadcast failed, commit {commit_txid} is already on the network")
        raise RevealBroadcastFailed(commit_txid, str(e)) from e

    tracker.mark_transaction(pair.reveal)
    logger.debug(f"Reveal {reveal_txid} broadcast")

    return commit_txid, reveal_txid
