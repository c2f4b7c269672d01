"""
Core data models.

Ledger-facing values (outputs, minter state) are plain dataclasses like the
backend records they come from; token definitions and results exchanged with
callers are pydantic models.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, model_validator

from catcore.amounts import scale_by_decimals
from catcore.constants import MAX_DECIMALS
from catcore.errors import InvalidAmount


@dataclass(frozen=True)
class Output:
    """A spendable output on the ledger."""

    txid: str
    vout: int
    script: str
    value: int

    @property
    def outpoint(self) -> tuple[str, int]:
        return (self.txid, self.vout)


@dataclass(frozen=True)
class TokenOutput(Output):
    """An output that also carries a CAT-20 balance."""

    token_id: str
    owner_address: str
    amount: int


@dataclass
class MinterState:
    """
    On-chain state of one minter instance.

    remaining_supply is tracked by decaying-supply minters, remaining_count by
    fixed-slice minters; the other field stays None.
    """

    is_premined: bool = False
    remaining_supply: int | None = None
    remaining_count: int | None = None
    token_script: str = ""


@dataclass
class MinterInstance:
    output: Output
    state: MinterState = field(default_factory=MinterState)


class ScaledTokenInfo(BaseModel):
    """Token amounts in base units."""

    decimals: int
    max: int
    premine: int
    limit: int


class TokenInfo(BaseModel):
    """Token definition supplied at deploy time. Amounts are whole human units."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=64)
    symbol: str = Field(..., min_length=1, max_length=16)
    decimals: int = Field(..., ge=0, le=MAX_DECIMALS)
    max: int = Field(..., gt=0)
    premine: int = Field(default=0, ge=0)
    limit: int = Field(..., gt=0)
    minter_md5: str = Field(default="", alias="minterMd5")

    @model_validator(mode="after")
    def check_supply(self) -> TokenInfo:
        if self.premine > self.max:
            raise ValueError(f"premine {self.premine} exceeds max supply {self.max}")
        if self.limit > self.max:
            raise ValueError(f"limit {self.limit} exceeds max supply {self.max}")
        try:
            scale_by_decimals(self.max, self.decimals)
        except InvalidAmount as e:
            raise ValueError(str(e)) from e
        return self

    def scaled(self) -> ScaledTokenInfo:
        return ScaledTokenInfo(
            decimals=self.decimals,
            max=scale_by_decimals(self.max, self.decimals),
            premine=scale_by_decimals(self.premine, self.decimals),
            limit=scale_by_decimals(self.limit, self.decimals),
        )


class TokenMetadata(BaseModel):
    """A deployed token as recorded in the registry."""

    model_config = ConfigDict(populate_by_name=True)

    token_id: str = Field(..., alias="tokenId")
    info: TokenInfo
    token_address: str = Field(..., alias="tokenAddr")
    minter_address: str = Field(..., alias="minterAddr")
    genesis_txid: str = Field(default="", alias="genesisTxid")
    reveal_txid: str = Field(default="", alias="revealTxid")
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))

    @property
    def symbol(self) -> str:
        return self.info.symbol

    @property
    def decimals(self) -> int:
        return self.info.decimals

    @property
    def premine(self) -> int:
        return self.info.premine

    @property
    def limit(self) -> int:
        return self.info.limit

    @property
    def minter_md5(self) -> str:
        return self.info.minter_md5


class DeployResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    genesis_txid: str = Field(..., serialization_alias="genesisTxId")
    reveal_txid: str = Field(..., serialization_alias="revealTxId")
    token_id: str = Field(..., serialization_alias="tokenId")
    token_address: str = Field(..., serialization_alias="tokenAddress")
    minter_address: str = Field(..., serialization_alias="minterAddress")
    premine_txid: str | None = Field(default=None, serialization_alias="premineTxId")


class MintResult(BaseModel):
    txid: str
    commit_txid: str
    amount: int
    premine: bool = False
    minter_state: MinterState | None = None


class TransferResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    receiver: str
    amount: str
    txid: str = Field(..., serialization_alias="txId")
    commit_txid: str = Field(..., serialization_alias="commitTxId")
    merged: bool = False
