"""
Consolidation of fragmented token holdings.

A transfer can only spend a handful of token inputs at once, so a selection
spread over many small outputs is first merged into fewer, larger ones. Each
merge is its own commit + reveal pair paid from the fee output pool, and the
fee change of every step goes back into the pool for the next one.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from catcore.backends.base import LedgerBackend
from catcore.broadcast import broadcast_pair
from catcore.builder import TokenTxBuilder
from catcore.constants import MAX_TOKEN_INPUTS, MERGE_THRESHOLD
from catcore.errors import MergeFailure
from catcore.models import Output, TokenMetadata, TokenOutput
from catcore.selection import select_fee_output
from catcore.spend import SpendTracker


class MergeCoordinator:
    def __init__(
        self,
        backend: LedgerBackend,
        builder: TokenTxBuilder,
        tracker: SpendTracker,
        threshold: int = MERGE_THRESHOLD,
        batch_size: int = MAX_TOKEN_INPUTS,
    ):
        if batch_size < 2:
            raise ValueError(f"Merge batch size must be at least 2, got {batch_size}")
        if threshold < 1:
            raise ValueError(f"Merge threshold must be at least 1, got {threshold}")
        self.backend = backend
        self.builder = builder
        self.tracker = tracker
        self.threshold = threshold
        self.batch_size = batch_size

    def needs_merge(self, token_outputs: Sequence[TokenOutput]) -> bool:
        return len(token_outputs) > self.threshold

    async def merge(
        self,
        fee_outputs: Sequence[Output],
        fee_rate: float,
        metadata: TokenMetadata,
        token_outputs: Sequence[TokenOutput],
        owner_address: str,
    ) -> tuple[list[TokenOutput], list[Output]]:
        """
        Merge ``token_outputs`` until no more than ``threshold`` remain.

        Returns:
            (merged token outputs, updated fee output pool)

        Raises:
            MergeFailure: if any step fails to build or broadcast. Steps
                already broadcast stay recorded in the spend tracker.
        """
        pool = [o for o in fee_outputs if self.tracker.is_unspent(o)]
        current = list(token_outputs)
        total = sum(o.amount for o in current)
        steps = 0

        logger.info(
            f"Merging {len(current)} [{metadata.symbol}] token outputs owned by {owner_address}"
        )

        while len(current) > self.threshold:
            merged: list[TokenOutput] = []

            for start in range(0, len(current), self.batch_size):
                batch = current[start : start + self.batch_size]
                if len(batch) == 1:
                    merged.extend(batch)
                    continue

                try:
                    fee_output = select_fee_output(pool, self.tracker)
                    step = self.builder.build_merge(
                        fee_output, fee_rate, metadata, batch, owner_address
                    )
                    await broadcast_pair(self.backend, self.tracker, step.pair)
                except Exception as e:
                    logger.error(f"Merge step {steps + 1} failed: {e}")
                    raise MergeFailure(
                        f"Merge [{metadata.symbol}] tokens failed: {e}", completed_steps=steps
                    ) from e

                steps += 1
                pool = [o for o in pool if self.tracker.is_unspent(o)]
                if step.fee_change is not None:
                    pool.append(step.fee_change)
                merged.append(step.merged)
                logger.debug(
                    f"Merged {len(batch)} outputs into {step.merged.amount} "
                    f"in {step.pair.reveal.txid}"
                )

            current = merged

        merged_total = sum(o.amount for o in current)
        if merged_total != total:
            raise MergeFailure(
                f"Merged amount {merged_total} does not match input amount {total}",
                completed_steps=steps,
            )

        logger.info(f"Merged into {len(current)} outputs in {steps} steps")
        return current, pool
