"""
Ledger backend interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from catcore.models import MinterInstance, Output, TokenMetadata, TokenOutput


class LedgerBackend(ABC):
    """
    Read and broadcast access to the ledger and the token tracker.

    Implementations raise NetworkError on transport failure. An empty result
    means "nothing found", never an error.
    """

    @abstractmethod
    async def get_utxos(self, address: str) -> list[Output]:
        """Plain (fee-paying) outputs held by an address"""

    @abstractmethod
    async def get_token_outputs(
        self, metadata: TokenMetadata, address: str
    ) -> list[TokenOutput] | None:
        """Token outputs of ``metadata`` held by ``address``, None when there are no holdings"""

    @abstractmethod
    async def get_minter_count(self, token_id: str) -> int:
        """Number of spendable minter instances for a token"""

    @abstractmethod
    async def get_minter(self, metadata: TokenMetadata, offset: int) -> MinterInstance | None:
        """Minter instance at ``offset`` with its decoded state"""

    @abstractmethod
    async def broadcast_transaction(self, raw: str) -> str:
        """Broadcast a raw transaction (hex), returns txid"""

    async def get_token_metadata(self, token_id: str) -> TokenMetadata | None:
        """Look a token up by id. Backends without a token index return None."""
        return None

    async def close(self) -> None:
        """Close backend connection"""
        pass
