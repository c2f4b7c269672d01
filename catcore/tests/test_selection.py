"""
Tests for fee and token output selection.
"""

from __future__ import annotations

import pytest

from catcore.errors import InsufficientFunds, InsufficientSatoshiBalance
from catcore.selection import (
    fetch_fee_outputs,
    largest_first,
    select_fee_output,
    select_token_outputs,
)

COIN = 10**8


class TestSelectFeeOutput:
    """Tests for select_fee_output."""

    def test_picks_largest(self, make_fee_outputs) -> None:
        outputs = make_fee_outputs(1000, 50_000, 20_000)
        assert select_fee_output(outputs).value == 50_000

    def test_skips_spent(self, make_fee_outputs, tracker) -> None:
        outputs = make_fee_outputs(1000, 50_000, 20_000)
        tracker.mark_spent(outputs[1])
        assert select_fee_output(outputs, tracker).value == 20_000

    def test_empty_raises(self) -> None:
        with pytest.raises(InsufficientFunds, match="Insufficient satoshis balance!"):
            select_fee_output([])

    def test_all_spent_raises(self, make_fee_outputs, tracker) -> None:
        outputs = make_fee_outputs(1000)
        tracker.mark_spent(outputs[0])
        with pytest.raises(InsufficientFunds):
            select_fee_output(outputs, tracker)


class TestSelectTokenOutputs:
    """Tests for select_token_outputs."""

    def test_greedy_prefix(self, make_token_outputs) -> None:
        outputs = make_token_outputs(100, 100, 100, 100)
        selected = select_token_outputs(outputs, 250 * COIN)
        assert selected == outputs[:3]

    def test_exact_cover(self, make_token_outputs) -> None:
        outputs = make_token_outputs(100, 50)
        assert select_token_outputs(outputs, 150 * COIN) == outputs

    def test_short_total_returns_empty(self, make_token_outputs) -> None:
        outputs = make_token_outputs(100, 100)
        assert select_token_outputs(outputs, 201 * COIN) == []

    def test_selection_covers_target(self, make_token_outputs) -> None:
        outputs = make_token_outputs(3, 9, 1, 27, 4)
        for target in range(1, sum((3, 9, 1, 27, 4)) + 1):
            selected = select_token_outputs(outputs, target * COIN)
            assert sum(o.amount for o in selected) >= target * COIN

    def test_never_selects_spent(self, make_token_outputs, tracker) -> None:
        outputs = make_token_outputs(100, 100, 100)
        tracker.mark_spent(outputs[0])
        selected = select_token_outputs(outputs, 150 * COIN, tracker)
        assert selected == outputs[1:]
        assert all(tracker.is_unspent(o) for o in selected)

    def test_largest_first_ordering(self, make_token_outputs) -> None:
        outputs = make_token_outputs(10, 500, 20)
        selected = select_token_outputs(outputs, 100 * COIN, ordering=largest_first)
        assert selected == [outputs[1]]


class TestFetchFeeOutputs:
    """Tests for fetch_fee_outputs."""

    @pytest.mark.asyncio
    async def test_filters_spent(self, ledger, tracker, make_fee_outputs) -> None:
        ledger.utxos = make_fee_outputs(1000, 2000)
        tracker.mark_spent(ledger.utxos[0])

        outputs = await fetch_fee_outputs(ledger, "bc1p...", tracker)

        assert outputs == [ledger.utxos[1]]

    @pytest.mark.asyncio
    async def test_none_left_raises(self, ledger, tracker, make_fee_outputs) -> None:
        ledger.utxos = make_fee_outputs(1000)
        tracker.mark_spent(ledger.utxos[0])

        with pytest.raises(InsufficientSatoshiBalance):
            await fetch_fee_outputs(ledger, "bc1p...", tracker)
