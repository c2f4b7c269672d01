"""
Boundary with the covenant/signing SDK.

The core never constructs locking scripts or signatures itself. It hands
inputs and policy to a ``TokenTxBuilder`` and gets back signed transactions
whose inputs and outputs it can track.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from catcore.models import (
    MinterInstance,
    MinterState,
    Output,
    TokenInfo,
    TokenMetadata,
    TokenOutput,
)


@dataclass
class BuiltTransaction:
    """A signed transaction ready for broadcast."""

    txid: str
    raw: str
    inputs: list[Output] = field(default_factory=list)
    outputs: list[Output] = field(default_factory=list)


@dataclass
class TransactionPair:
    """Commit and reveal transactions; the reveal spends a commit output."""

    commit: BuiltTransaction
    reveal: BuiltTransaction


@dataclass
class MergeStep:
    pair: TransactionPair
    merged: TokenOutput
    fee_change: Output | None = None


@dataclass
class DeployTransactions:
    genesis: BuiltTransaction
    reveal: BuiltTransaction
    token_id: str
    token_address: str
    minter_address: str
    minter_state: MinterState = field(default_factory=MinterState)

    @property
    def pair(self) -> TransactionPair:
        return TransactionPair(commit=self.genesis, reveal=self.reveal)


class TokenTxBuilder(ABC):
    """Builds and signs CAT-20 transactions for one wallet."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Wallet address that pays fees and owns token outputs"""

    @abstractmethod
    def build_deploy(
        self, info: TokenInfo, fee_rate: float, fee_outputs: Sequence[Output]
    ) -> DeployTransactions:
        """Genesis transaction establishing the token plus the reveal creating its minter"""

    @abstractmethod
    def build_mint(
        self,
        fee_rate: float,
        fee_outputs: Sequence[Output],
        metadata: TokenMetadata,
        minter: MinterInstance,
        amount: int,
    ) -> TransactionPair:
        """Mint ``amount`` base units against ``minter``"""

    @abstractmethod
    def build_transfer(
        self,
        fee_output: Output,
        fee_rate: float,
        metadata: TokenMetadata,
        token_outputs: Sequence[TokenOutput],
        change_address: str,
        receiver: str,
        amount: int,
    ) -> TransactionPair:
        """Send ``amount`` to ``receiver``; the surplus goes back to ``change_address``"""

    @abstractmethod
    def build_merge(
        self,
        fee_output: Output,
        fee_rate: float,
        metadata: TokenMetadata,
        token_outputs: Sequence[TokenOutput],
        owner_address: str,
    ) -> MergeStep:
        """Combine ``token_outputs`` into a single output owned by ``owner_address``"""
