"""
Token transfer pipeline.

validate -> select -> merge (if fragmented) -> build -> broadcast -> record.
Every step raises a typed CatError; there is no internal retry loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from decimal import Decimal

from loguru import logger

from catcore.address import validate_receiver
from catcore.amounts import scale_by_decimals, unscale_by_decimals
from catcore.backends.base import LedgerBackend
from catcore.broadcast import broadcast_pair
from catcore.builder import TokenTxBuilder
from catcore.constants import MERGE_BACKOFF_SECONDS
from catcore.errors import InsufficientTokenBalance, InvalidAmount, MergeFailure
from catcore.merge import MergeCoordinator
from catcore.models import TransferResult
from catcore.registry import TokenRegistry
from catcore.selection import (
    TokenOrdering,
    as_received,
    fetch_fee_outputs,
    select_fee_output,
    select_token_outputs,
)
from catcore.spend import SpendTracker


class TransferOrchestrator:
    def __init__(
        self,
        backend: LedgerBackend,
        builder: TokenTxBuilder,
        tracker: SpendTracker,
        registry: TokenRegistry,
        network: str = "mainnet",
        merger: MergeCoordinator | None = None,
        ordering: TokenOrdering = as_received,
        merge_backoff: float = MERGE_BACKOFF_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.backend = backend
        self.builder = builder
        self.tracker = tracker
        self.registry = registry
        self.network = network
        self.merger = merger or MergeCoordinator(backend, builder, tracker)
        self.ordering = ordering
        self.merge_backoff = merge_backoff
        self.sleep = sleep

    async def transfer(
        self,
        token_id: str,
        receiver: str,
        amount: str | int | Decimal,
        fee_rate: float,
    ) -> TransferResult:
        """
        Send ``amount`` human units of a token to a taproot ``receiver``.

        Raises:
            TokenNotFound, InvalidReceiver, InvalidAmount,
            InsufficientSatoshiBalance, InsufficientTokenBalance,
            MergeFailure (after the backoff sleep), BroadcastError,
            RevealBroadcastFailed
        """
        metadata = await self.registry.resolve(token_id, self.backend)
        validate_receiver(receiver, self.network)

        scaled = scale_by_decimals(amount, metadata.decimals)
        if scaled == 0:
            raise InvalidAmount(f'Invalid amount: "{amount}"')

        address = self.builder.address
        fee_outputs = await fetch_fee_outputs(self.backend, address, self.tracker)

        contracts = await self.backend.get_token_outputs(metadata, address) or []
        token_outputs = select_token_outputs(contracts, scaled, self.tracker, self.ordering)
        if not token_outputs:
            logger.warning("Insufficient token balance!")
            raise InsufficientTokenBalance(
                f"Insufficient [{metadata.symbol}] balance to send {amount}"
            )

        merged = False
        if self.merger.needs_merge(token_outputs):
            logger.info(f"Merging your [{metadata.symbol}] tokens ...")
            try:
                token_outputs, fee_outputs = await self.merger.merge(
                    fee_outputs, fee_rate, metadata, token_outputs, address
                )
            except MergeFailure as e:
                logger.error(f"Merge [{metadata.symbol}] tokens failed. {e}")
                logger.warning(
                    f"retry to merge [{metadata.symbol}] tokens in {self.merge_backoff}s ..."
                )
                await self.sleep(self.merge_backoff)
                raise
            merged = True

        fee_output = select_fee_output(fee_outputs, self.tracker)
        pair = self.builder.build_transfer(
            fee_output, fee_rate, metadata, token_outputs, address, receiver, scaled
        )
        commit_txid, reveal_txid = await broadcast_pair(self.backend, self.tracker, pair)

        display_amount = unscale_by_decimals(scaled, metadata.decimals)
        logger.info(
            f"Sending {display_amount} {metadata.symbol} tokens to {receiver} "
            f"in txid: {reveal_txid}"
        )
        return TransferResult(
            receiver=receiver,
            amount=display_amount,
            txid=reveal_txid,
            commit_txid=commit_txid,
            merged=merged,
        )
