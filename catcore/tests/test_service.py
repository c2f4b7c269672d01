"""
Tests for the wallet-level token service.
"""

from __future__ import annotations

import asyncio

import pytest

from catcore.service import TokenService

RECEIVER = "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqzk5jj0"


@pytest.fixture
def service(ledger, builder, registry, make_fee_outputs) -> TokenService:
    ledger.utxos = make_fee_outputs(100_000, 90_000, 80_000)
    return TokenService(ledger, builder, registry)


class TestTokenService:
    """Tests for TokenService."""

    def test_components_share_tracker(self, service) -> None:
        assert service.minter.tracker is service.tracker
        assert service.deployer.tracker is service.tracker
        assert service.sender.tracker is service.tracker
        assert service.sender.merger.tracker is service.tracker

    @pytest.mark.asyncio
    async def test_concurrent_transfers_never_share_outputs(
        self, service, ledger, builder, metadata, make_token_outputs
    ) -> None:
        ledger.token_outputs = make_token_outputs(100, 100, 100)

        await asyncio.gather(
            *(service.transfer(metadata.token_id, RECEIVER, "100", 1.0) for _ in range(3))
        )

        spent_tokens = [o for call in builder.transfer_calls for o in call["inputs"]]
        spent_fees = [call["fee"] for call in builder.transfer_calls]
        assert len(set(spent_tokens)) == 3
        assert len(set(spent_fees)) == 3

    @pytest.mark.asyncio
    async def test_deploy_then_mint(self, service, ledger, builder, make_minter) -> None:
        token = {"name": "kit", "symbol": "KIT", "decimals": 0, "max": 1000, "limit": 10}

        deployed = await service.deploy(token, 1.0)
        ledger.minters = [make_minter(remaining_count=100)]
        minted = await service.mint(deployed.token_id, None, 1.0)

        assert minted.amount == 10
        assert service.registry.find(deployed.token_id).symbol == "KIT"

    @pytest.mark.asyncio
    async def test_close(self, service, ledger) -> None:
        await service.close()
        assert ledger.closed
