"""
Minter variants, mint quota rules and minter shard selection.

Each minter contract artifact is identified by the md5 of its compiled
script. The variant is resolved once from the token metadata and its policy
object decides how a requested amount turns into the amount actually minted:

- OPEN_MINTER_V1 (decaying supply): mints up to the minter's remaining supply.
- OPEN_MINTER_V2 (fixed slice): every open mint withdraws exactly ``limit``.

Both share the premine rule: while a premine-enabled minter is unprimed, the
only accepted mint is the premine itself.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum

from loguru import logger

from catcore.errors import MinterUnavailable, QuotaViolation, UnknownMinter
from catcore.models import MinterState, ScaledTokenInfo


class MinterVariant(str, Enum):
    OPEN_MINTER_V1 = "21cbd2e538f2b6cc40ee180e174f1e25"
    OPEN_MINTER_V2 = "a6c2e92d74a23c07bb6220b676c6cb9b"


def classify_minter_variant(minter_md5: str) -> MinterVariant:
    try:
        return MinterVariant(minter_md5)
    except ValueError as e:
        raise UnknownMinter(minter_md5) from e


class MintPolicy:
    """Per-variant amount rules applied once a minter is primed."""

    variant: MinterVariant

    def remaining_supply(self, state: MinterState, info: ScaledTokenInfo) -> int:
        raise NotImplementedError

    def adjust_amount(self, requested: int, state: MinterState, info: ScaledTokenInfo) -> int:
        raise NotImplementedError

    def advance(self, state: MinterState, amount: int, premine: bool) -> MinterState:
        """State of the minter after a successful mint of ``amount``."""
        if premine:
            return replace(state, is_premined=True)
        return self._advance_open_mint(state, amount)

    def _advance_open_mint(self, state: MinterState, amount: int) -> MinterState:
        raise NotImplementedError


class DecayingSupplyPolicy(MintPolicy):
    variant = MinterVariant.OPEN_MINTER_V1

    def remaining_supply(self, state: MinterState, info: ScaledTokenInfo) -> int:
        if state.remaining_supply is None:
            return info.max - info.premine
        return state.remaining_supply

    def adjust_amount(self, requested: int, state: MinterState, info: ScaledTokenInfo) -> int:
        remaining = self.remaining_supply(state, info)
        if remaining < info.limit:
            logger.warning(
                f"Minter supply is running out: {remaining} left, limit is {info.limit}"
            )
        return min(requested, remaining)

    def _advance_open_mint(self, state: MinterState, amount: int) -> MinterState:
        if state.remaining_supply is None:
            return state
        return replace(state, remaining_supply=max(state.remaining_supply - amount, 0))


class FixedSlicePolicy(MintPolicy):
    variant = MinterVariant.OPEN_MINTER_V2

    def remaining_supply(self, state: MinterState, info: ScaledTokenInfo) -> int:
        if state.remaining_count is None:
            return info.max - info.premine
        return state.remaining_count * info.limit

    def adjust_amount(self, requested: int, state: MinterState, info: ScaledTokenInfo) -> int:
        if state.remaining_count == 0:
            return 0
        # Any request is coerced to exactly one slice
        if requested != info.limit:
            logger.warning(f"can only mint at the exactly amount of {info.limit} at once")
        return info.limit

    def _advance_open_mint(self, state: MinterState, amount: int) -> MinterState:
        if state.remaining_count is None:
            return state
        return replace(state, remaining_count=max(state.remaining_count - 1, 0))


MINT_POLICIES: dict[MinterVariant, MintPolicy] = {
    MinterVariant.OPEN_MINTER_V1: DecayingSupplyPolicy(),
    MinterVariant.OPEN_MINTER_V2: FixedSlicePolicy(),
}


def policy_for(minter_md5: str) -> MintPolicy:
    return MINT_POLICIES[classify_minter_variant(minter_md5)]


@dataclass
class MintQuota:
    amount: int
    premine: bool


class QuotaEngine:
    """
    Premine / limit state machine for one mint call.

    A minter is primed when its on-chain state says so or when the token has
    no premine at all. Amounts are in base units.
    """

    def __init__(self, policy: MintPolicy, info: ScaledTokenInfo):
        self.policy = policy
        self.info = info

    def is_primed(self, state: MinterState) -> bool:
        return state.is_premined or self.info.premine == 0

    def check(self, state: MinterState, requested: int | None) -> MintQuota:
        info = self.info

        if not self.is_primed(state):
            if requested is None:
                requested = info.premine
            if requested != info.premine:
                raise QuotaViolation(
                    f"first mint amount should equal to premine {info.premine}, got {requested}"
                )
            return MintQuota(amount=info.premine, premine=True)

        if requested is None:
            requested = info.limit
        if requested > info.limit:
            raise QuotaViolation(
                f"The number of minted tokens exceeds the limit! {requested} > {info.limit}"
            )

        amount = self.policy.adjust_amount(requested, state, info)
        if amount <= 0:
            raise QuotaViolation("Minter has no remaining supply")
        return MintQuota(amount=amount, premine=False)


class MinterSelector:
    """Picks which of a token's parallel minter instances to mint against."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def pick_offset(self, count: int) -> int:
        """Uniform offset in [0, count - 1); a single minter is always offset 0."""
        if count <= 0:
            raise MinterUnavailable("No minter found for token")
        if count <= 2:
            return 0
        return self.rng.randrange(count - 1)
