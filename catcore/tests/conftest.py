"""
Test configuration for catcore tests.

FakeLedger and FakeBuilder stand in for the tracker/mempool backend and the
signing SDK. Transactions are identified by readable txids and their raw
payload is the txid itself, so broadcast order can be asserted directly.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from catcore.backends.base import LedgerBackend
from catcore.builder import (
    BuiltTransaction,
    DeployTransactions,
    MergeStep,
    TokenTxBuilder,
    TransactionPair,
)
from catcore.errors import NetworkError
from catcore.minter import MinterVariant
from catcore.models import (
    MinterInstance,
    MinterState,
    Output,
    TokenInfo,
    TokenMetadata,
    TokenOutput,
)
from catcore.registry import TokenRegistry
from catcore.spend import SpendTracker

WALLET_ADDRESS = "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqzk5jj0"
WALLET_SCRIPT = "512079be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
TOKEN_ID = "deadbeef" * 8 + "_0"
COIN = 10**8


class FakeLedger(LedgerBackend):
    """In-memory ledger that records every call and broadcast."""

    def __init__(self) -> None:
        self.utxos: list[Output] = []
        self.token_outputs: list[TokenOutput] = []
        self.minters: list[MinterInstance] = []
        self.metadata: dict[str, TokenMetadata] = {}
        self.broadcasts: list[str] = []
        self.rejected: set[str] = set()
        self.calls: list[str] = []
        self.closed = False

    async def get_utxos(self, address: str) -> list[Output]:
        self.calls.append("get_utxos")
        return list(self.utxos)

    async def get_token_outputs(
        self, metadata: TokenMetadata, address: str
    ) -> list[TokenOutput] | None:
        self.calls.append("get_token_outputs")
        return list(self.token_outputs) or None

    async def get_minter_count(self, token_id: str) -> int:
        self.calls.append("get_minter_count")
        return len(self.minters)

    async def get_minter(self, metadata: TokenMetadata, offset: int) -> MinterInstance | None:
        self.calls.append("get_minter")
        if offset >= len(self.minters):
            return None
        return self.minters[offset]

    async def broadcast_transaction(self, raw: str) -> str:
        self.calls.append("broadcast_transaction")
        if raw in self.rejected:
            raise NetworkError(f"bad-txns-inputs-missingorspent: {raw}")
        self.broadcasts.append(raw)
        return raw

    async def get_token_metadata(self, token_id: str) -> TokenMetadata | None:
        self.calls.append("get_token_metadata")
        return self.metadata.get(token_id)

    async def close(self) -> None:
        self.closed = True


class FakeBuilder(TokenTxBuilder):
    """
    Deterministic transaction builder.

    Every built pair is appended to ``pairs``. ``fail_merge_at`` makes the
    n-th merge (1-based) raise, ``genesis_outputs`` overrides how many outputs
    the genesis transaction has.
    """

    def __init__(self, address: str = WALLET_ADDRESS) -> None:
        self._address = address
        self._counter = 0
        self.pairs: list[TransactionPair] = []
        self.mint_calls: list[dict] = []
        self.transfer_calls: list[dict] = []
        self.merge_calls: list[list[TokenOutput]] = []
        self.fail_merge_at: int | None = None
        self.genesis_outputs: int | None = None

    @property
    def address(self) -> str:
        return self._address

    def _txid(self, kind: str) -> str:
        self._counter += 1
        return f"{kind}-{self._counter}"

    def _tx(self, kind: str, inputs: Sequence[Output], n_outputs: int = 1) -> BuiltTransaction:
        txid = self._txid(kind)
        outputs = [Output(txid, i, WALLET_SCRIPT, 1000) for i in range(n_outputs)]
        return BuiltTransaction(txid=txid, raw=txid, inputs=list(inputs), outputs=outputs)

    def _pair(self, kind: str, commit_inputs: Sequence[Output], reveal_inputs: Sequence[Output]):
        commit = self._tx(f"{kind}-commit", commit_inputs, n_outputs=2)
        reveal = self._tx(f"{kind}-reveal", [commit.outputs[0], *reveal_inputs])
        pair = TransactionPair(commit=commit, reveal=reveal)
        self.pairs.append(pair)
        return pair

    def build_deploy(
        self, info: TokenInfo, fee_rate: float, fee_outputs: Sequence[Output]
    ) -> DeployTransactions:
        fee = max(fee_outputs, key=lambda o: o.value)
        n_outputs = self.genesis_outputs or (3 if info.premine > 0 else 2)
        genesis = self._tx("genesis", [fee], n_outputs=n_outputs)
        reveal = self._tx("deploy-reveal", [genesis.outputs[0]], n_outputs=2)
        self.pairs.append(TransactionPair(commit=genesis, reveal=reveal))
        return DeployTransactions(
            genesis=genesis,
            reveal=reveal,
            token_id=f"{genesis.txid}_0",
            token_address="bc1ptokenaddress",
            minter_address="bc1pminteraddress",
        )

    def build_mint(
        self,
        fee_rate: float,
        fee_outputs: Sequence[Output],
        metadata: TokenMetadata,
        minter: MinterInstance,
        amount: int,
    ) -> TransactionPair:
        fee = max(fee_outputs, key=lambda o: o.value)
        self.mint_calls.append({"amount": amount, "minter": minter.output, "fee": fee})
        return self._pair("mint", [fee], [minter.output])

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
        self.transfer_calls.append(
            {
                "fee": fee_output,
                "inputs": list(token_outputs),
                "receiver": receiver,
                "amount": amount,
            }
        )
        return self._pair("transfer", [fee_output], token_outputs)

    def build_merge(
        self,
        fee_output: Output,
        fee_rate: float,
        metadata: TokenMetadata,
        token_outputs: Sequence[TokenOutput],
        owner_address: str,
    ) -> MergeStep:
        self.merge_calls.append(list(token_outputs))
        if self.fail_merge_at == len(self.merge_calls):
            raise RuntimeError("signer unavailable")

        pair = self._pair("merge", [fee_output], token_outputs)
        merged = TokenOutput(
            txid=pair.reveal.txid,
            vout=0,
            script=WALLET_SCRIPT,
            value=330,
            token_id=metadata.token_id,
            owner_address=owner_address,
            amount=sum(o.amount for o in token_outputs),
        )
        fee_change = Output(pair.commit.txid, 1, WALLET_SCRIPT, fee_output.value - 500)
        return MergeStep(pair=pair, merged=merged, fee_change=fee_change)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def builder() -> FakeBuilder:
    return FakeBuilder()


@pytest.fixture
def tracker() -> SpendTracker:
    return SpendTracker()


@pytest.fixture
def make_metadata() -> Callable[..., TokenMetadata]:
    """Factory for token metadata; amounts are whole human units."""

    def _make(
        minter_md5: str = MinterVariant.OPEN_MINTER_V1.value,
        premine: int = 1000,
        limit: int = 500,
        max_supply: int = 21_000_000,
        decimals: int = 8,
        token_id: str = TOKEN_ID,
    ) -> TokenMetadata:
        return TokenMetadata(
            token_id=token_id,
            info=TokenInfo(
                name="cat",
                symbol="CAT",
                decimals=decimals,
                max=max_supply,
                premine=premine,
                limit=limit,
                minter_md5=minter_md5,
            ),
            token_address="bc1ptokenaddress",
            minter_address="bc1pminteraddress",
        )

    return _make


@pytest.fixture
def metadata(make_metadata) -> TokenMetadata:
    return make_metadata()


@pytest.fixture
def registry(metadata: TokenMetadata) -> TokenRegistry:
    reg = TokenRegistry()
    reg.add(metadata)
    return reg


@pytest.fixture
def make_fee_outputs() -> Callable[..., list[Output]]:
    def _make(*values: int) -> list[Output]:
        return [Output(f"fee{i}", 0, WALLET_SCRIPT, value) for i, value in enumerate(values)]

    return _make


@pytest.fixture
def make_token_outputs() -> Callable[..., list[TokenOutput]]:
    """Token outputs with the given amounts in whole tokens (8 decimals)."""

    def _make(*amounts: int, token_id: str = TOKEN_ID) -> list[TokenOutput]:
        return [
            TokenOutput(
                txid=f"tok{i}",
                vout=0,
                script=WALLET_SCRIPT,
                value=330,
                token_id=token_id,
                owner_address=WALLET_ADDRESS,
                amount=amount * COIN,
            )
            for i, amount in enumerate(amounts)
        ]

    return _make


@pytest.fixture
def make_minter() -> Callable[..., MinterInstance]:
    def _make(txid: str = "minter0", **state) -> MinterInstance:
        return MinterInstance(
            output=Output(txid, 1, "5120" + "ab" * 32, 331), state=MinterState(**state)
        )

    return _make
