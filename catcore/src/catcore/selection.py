"""
Output selection for fees and token balances.

Token selection is a plain greedy prefix over the outputs in the order it is
given. The packing behaviour is chosen by the ordering strategy passed in,
not by a heuristic hidden in the selector.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from loguru import logger

from catcore.backends.base import LedgerBackend
from catcore.errors import InsufficientFunds, InsufficientSatoshiBalance
from catcore.models import Output, TokenOutput
from catcore.spend import SpendTracker

TokenOrdering = Callable[[Sequence[TokenOutput]], list[TokenOutput]]


def as_received(outputs: Sequence[TokenOutput]) -> list[TokenOutput]:
    return list(outputs)


def largest_first(outputs: Sequence[TokenOutput]) -> list[TokenOutput]:
    return sorted(outputs, key=lambda o: o.amount, reverse=True)


def filter_unspent(outputs: Sequence[Output], tracker: SpendTracker | None) -> list:
    if tracker is None:
        return list(outputs)
    return [o for o in outputs if tracker.is_unspent(o)]


def select_fee_output(
    outputs: Sequence[Output], tracker: SpendTracker | None = None
) -> Output:
    """Pick the largest-value output to pay fees from."""
    candidates = filter_unspent(outputs, tracker)
    if not candidates:
        raise InsufficientFunds("Insufficient satoshis balance!")
    return max(candidates, key=lambda o: o.value)


def select_token_outputs(
    outputs: Sequence[TokenOutput],
    target_amount: int,
    tracker: SpendTracker | None = None,
    ordering: TokenOrdering = as_received,
) -> list[TokenOutput]:
    """
    Accumulate token outputs until their amounts cover target_amount.

    Returns the prefix used, or an empty list if every candidate together is
    still short of the target.
    """
    candidates = ordering(filter_unspent(outputs, tracker))

    selected: list[TokenOutput] = []
    total = 0
    for output in candidates:
        selected.append(output)
        total += output.amount
        if total >= target_amount:
            return selected

    return []


async def fetch_fee_outputs(
    backend: LedgerBackend, address: str, tracker: SpendTracker
) -> list[Output]:
    """Plain outputs of ``address`` that no local transaction has spent yet."""
    outputs = filter_unspent(await backend.get_utxos(address), tracker)
    if not outputs:
        logger.warning("Insufficient satoshis balance!")
        raise InsufficientSatoshiBalance(f"Insufficient satoshis balance for {address}")
    logger.debug(f"{len(outputs)} unspent fee outputs for {address}")
    return outputs
