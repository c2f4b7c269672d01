"""
Token deployment: genesis + minter reveal, then the optional premine mint.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from catcore.backends.base import LedgerBackend
from catcore.broadcast import broadcast_pair
from catcore.builder import DeployTransactions, TokenTxBuilder
from catcore.constants import (
    GENESIS_OUTPUTS_WITH_PREMINE,
    MINTER_OUTPUT_INDEX,
    PREMINE_FEE_OUTPUT_INDEX,
)
from catcore.errors import InvalidTokenMetadata, UnknownMinter
from catcore.minter import MinterVariant, policy_for
from catcore.mint import MintOrchestrator
from catcore.models import DeployResult, MinterInstance, TokenInfo, TokenMetadata
from catcore.registry import TokenRegistry
from catcore.selection import fetch_fee_outputs
from catcore.spend import SpendTracker


def parse_token_info(raw: TokenInfo | dict[str, Any]) -> TokenInfo:
    """Validate a deploy request's token definition."""
    if isinstance(raw, TokenInfo):
        info = raw
    else:
        try:
            info = TokenInfo.model_validate(raw)
        except PydanticValidationError as e:
            raise InvalidTokenMetadata(f"Invalid token metadata: {e}") from e

    if not info.minter_md5:
        info = info.model_copy(update={"minter_md5": MinterVariant.OPEN_MINTER_V2.value})
    try:
        policy_for(info.minter_md5)
    except UnknownMinter as e:
        raise InvalidTokenMetadata(f"Unsupported minter artifact: {info.minter_md5}") from e
    return info


class DeployOrchestrator:
    def __init__(
        self,
        backend: LedgerBackend,
        builder: TokenTxBuilder,
        tracker: SpendTracker,
        registry: TokenRegistry,
        minter: MintOrchestrator,
    ):
        self.backend = backend
        self.builder = builder
        self.tracker = tracker
        self.registry = registry
        self.minter = minter

    async def deploy(self, token: TokenInfo | dict[str, Any], fee_rate: float) -> DeployResult:
        """
        Deploy a token and, when it has a premine, mint it straight away.

        A premine failure does not undo the deployment: the token is
        registered before the premine is attempted and the error propagates.
        """
        info = parse_token_info(token)
        logger.info(f"Deploying token [{info.symbol}] at fee rate {fee_rate}")

        address = self.builder.address
        fee_outputs = await fetch_fee_outputs(self.backend, address, self.tracker)

        txs = self.builder.build_deploy(info, fee_rate, fee_outputs)
        genesis_txid, reveal_txid = await broadcast_pair(self.backend, self.tracker, txs.pair)

        metadata = self.registry.add(
            TokenMetadata(
                token_id=txs.token_id,
                info=info,
                token_address=txs.token_address,
                minter_address=txs.minter_address,
                genesis_txid=genesis_txid,
                reveal_txid=reveal_txid,
            )
        )
        logger.info(f"Token {info.symbol} has been deployed.")
        logger.info(f"TokenId: {txs.token_id}")
        logger.info(f"Genesis txid: {genesis_txid}")
        logger.info(f"Reveal txid: {reveal_txid}")

        result = DeployResult(
            genesis_txid=genesis_txid,
            reveal_txid=reveal_txid,
            token_id=txs.token_id,
            token_address=txs.token_address,
            minter_address=txs.minter_address,
        )

        if info.premine > 0:
            result.premine_txid = await self._premine(metadata, txs, fee_rate)

        return result

    async def _premine(
        self, metadata: TokenMetadata, txs: DeployTransactions, fee_rate: float
    ) -> str | None:
        if (
            len(txs.genesis.outputs) != GENESIS_OUTPUTS_WITH_PREMINE
            or len(txs.reveal.outputs) <= MINTER_OUTPUT_INDEX
        ):
            logger.warning(
                f"Insufficient satoshis to premine: genesis has {len(txs.genesis.outputs)} "
                f"outputs, expected {GENESIS_OUTPUTS_WITH_PREMINE}"
            )
            return None

        minter = MinterInstance(
            output=txs.reveal.outputs[MINTER_OUTPUT_INDEX], state=txs.minter_state
        )
        fee_output = txs.genesis.outputs[PREMINE_FEE_OUTPUT_INDEX]
        premine = metadata.info.scaled().premine

        mint = await self.minter.mint_with_minter(
            metadata, minter, [fee_output], premine, fee_rate
        )
        logger.info(
            f"Minting {metadata.premine} {metadata.symbol} as premine in txId: {mint.txid}"
        )
        return mint.txid
