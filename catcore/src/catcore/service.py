"""
Wallet-level facade over the deploy, mint and transfer pipelines.
"""

from __future__ import annotations

import asyncio
import random
from decimal import Decimal
from typing import Any

from loguru import logger

from catcore.backends.base import LedgerBackend
from catcore.builder import TokenTxBuilder
from catcore.constants import MERGE_BACKOFF_SECONDS
from catcore.deploy import DeployOrchestrator
from catcore.minter import MinterSelector
from catcore.mint import MintOrchestrator
from catcore.models import DeployResult, MintResult, TokenInfo, TransferResult
from catcore.registry import TokenRegistry
from catcore.spend import SpendTracker
from catcore.transfer import TransferOrchestrator


class TokenService:
    """
    One wallet session.

    Owns the session's SpendTracker and runs one mutating call at a time, so
    two pipelines never select the same unconfirmed outputs.
    """

    def __init__(
        self,
        backend: LedgerBackend,
        builder: TokenTxBuilder,
        registry: TokenRegistry | None = None,
        network: str = "mainnet",
        merge_backoff: float = MERGE_BACKOFF_SECONDS,
        rng: random.Random | None = None,
    ):
        self.backend = backend
        self.builder = builder
        self.registry = registry or TokenRegistry()
        self.tracker = SpendTracker()
        self._lock = asyncio.Lock()

        self.minter = MintOrchestrator(
            backend, builder, self.tracker, self.registry, MinterSelector(rng)
        )
        self.deployer = DeployOrchestrator(
            backend, builder, self.tracker, self.registry, self.minter
        )
        self.sender = TransferOrchestrator(
            backend,
            builder,
            self.tracker,
            self.registry,
            network=network,
            merge_backoff=merge_backoff,
        )

        logger.info(f"Token service ready for wallet {builder.address} on {network}")

    async def deploy(self, token: TokenInfo | dict[str, Any], fee_rate: float) -> DeployResult:
        async with self._lock:
            return await self.deployer.deploy(token, fee_rate)

    async def mint(
        self, token_id: str, amount: str | int | Decimal | None, fee_rate: float
    ) -> MintResult:
        async with self._lock:
            return await self.minter.mint(token_id, amount, fee_rate)

    async def transfer(
        self, token_id: str, receiver: str, amount: str | int | Decimal, fee_rate: float
    ) -> TransferResult:
        async with self._lock:
            return await self.sender.transfer(token_id, receiver, amount, fee_rate)

    async def close(self) -> None:
        await self.backend.close()
