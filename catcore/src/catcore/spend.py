"""
Session-scoped record of outputs consumed by locally built transactions.

The tracker is created once per wallet session and passed to every
orchestration call. Entries are never removed: reconciliation with confirmed
chain state happens when the backend is queried again after a restart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from catcore.models import Output

if TYPE_CHECKING:
    from catcore.builder import BuiltTransaction


class SpendTracker:
    def __init__(self) -> None:
        self._spent: set[tuple[str, int]] = set()

    def mark_spent(self, output: Output) -> None:
        self._spent.add(output.outpoint)

    def is_unspent(self, output: Output) -> bool:
        return output.outpoint not in self._spent

    def mark_transaction(self, tx: BuiltTransaction) -> None:
        """Record every input of a broadcast transaction as spent."""
        for output in tx.inputs:
            self.mark_spent(output)
        logger.debug(f"Marked {len(tx.inputs)} inputs of {tx.txid} as spent")

    def __contains__(self, output: object) -> bool:
        return isinstance(output, Output) and output.outpoint in self._spent

    def __len__(self) -> int:
        return len(self._spent)
