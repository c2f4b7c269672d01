"""
Mint pipeline for open-minter tokens.

1. Resolve token metadata and its minter variant
2. Collect unspent fee outputs
3. Pick a minter shard and fetch its state
4. Apply the premine / limit quota rules
5. Build, then broadcast commit and reveal
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from loguru import logger

from catcore.amounts import parse_base_units
from catcore.backends.base import LedgerBackend
from catcore.broadcast import broadcast_pair
from catcore.builder import TokenTxBuilder
from catcore.errors import MinterUnavailable
from catcore.minter import MinterSelector, MintPolicy, QuotaEngine, policy_for
from catcore.models import MinterInstance, MintResult, Output, TokenMetadata
from catcore.registry import TokenRegistry
from catcore.selection import fetch_fee_outputs
from catcore.spend import SpendTracker


class MintOrchestrator:
    def __init__(
        self,
        backend: LedgerBackend,
        builder: TokenTxBuilder,
        tracker: SpendTracker,
        registry: TokenRegistry,
        selector: MinterSelector | None = None,
    ):
        self.backend = backend
        self.builder = builder
        self.tracker = tracker
        self.registry = registry
        self.selector = selector or MinterSelector()

    async def mint(
        self, token_id: str, amount: str | int | Decimal | None, fee_rate: float
    ) -> MintResult:
        """
        Mint ``amount`` base units of a token (None mints the default quota).

        Raises:
            TokenNotFound, UnknownMinter, InvalidAmount, InsufficientSatoshiBalance,
            MinterUnavailable, QuotaViolation, BroadcastError, RevealBroadcastFailed
        """
        metadata = await self.registry.resolve(token_id, self.backend)
        policy = policy_for(metadata.minter_md5)
        requested = None if amount is None else parse_base_units(amount)

        address = self.builder.address
        fee_outputs = await fetch_fee_outputs(self.backend, address, self.tracker)

        count = await self.backend.get_minter_count(metadata.token_id)
        offset = self.selector.pick_offset(count)
        logger.debug(f"Minting [{metadata.symbol}] on minter {offset} of {count}")

        minter = await self.backend.get_minter(metadata, offset)
        if minter is None:
            raise MinterUnavailable(f"No minter at offset {offset} for {metadata.token_id}")

        return await self.mint_with_minter(
            metadata, minter, fee_outputs, requested, fee_rate, policy=policy
        )

    async def mint_with_minter(
        self,
        metadata: TokenMetadata,
        minter: MinterInstance,
        fee_outputs: Sequence[Output],
        requested: int | None,
        fee_rate: float,
        policy: MintPolicy | None = None,
    ) -> MintResult:
        """Quota check, build and broadcast against a known minter. Amounts in base units."""
        policy = policy or policy_for(metadata.minter_md5)
        quota = QuotaEngine(policy, metadata.info.scaled()).check(minter.state, requested)

        pair = self.builder.build_mint(fee_rate, fee_outputs, metadata, minter, quota.amount)
        commit_txid, reveal_txid = await broadcast_pair(self.backend, self.tracker, pair)

        minter.state = policy.advance(minter.state, quota.amount, quota.premine)
        logger.info(
            f"Minted {quota.amount} base units of [{metadata.symbol}] in txid: {reveal_txid}"
        )
        return MintResult(
            txid=reveal_txid,
            commit_txid=commit_txid,
            amount=quota.amount,
            premine=quota.premine,
            minter_state=minter.state,
        )
