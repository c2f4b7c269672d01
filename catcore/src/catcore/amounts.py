"""
Conversion between human-readable token amounts and integer base units.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

from catcore.constants import MAX_AMOUNT
from catcore.errors import InvalidAmount

# Enough digits that scaling never rounds an in-range amount
_PRECISION = 80


def scale_by_decimals(value: str | int | Decimal, decimals: int) -> int:
    """
    Scale a human amount by 10^decimals into base units.

    Floats are refused outright; they must be formatted to a string by the
    caller so no binary rounding leaks into the result.
    """
    if isinstance(value, (bool, float)):
        raise InvalidAmount(f"Invalid amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            amount = value if isinstance(value, Decimal) else Decimal(value)
        except (InvalidOperation, ValueError, TypeError) as e:
            raise InvalidAmount(f"Invalid amount: {value!r}") from e

        if not amount.is_finite():
            raise InvalidAmount(f"Invalid amount: {value!r}")
        if amount < 0:
            raise InvalidAmount(f"Amount must not be negative: {value!r}")

        scaled = amount.scaleb(decimals)
        if scaled > MAX_AMOUNT:
            raise InvalidAmount(f"Amount {value!r} overflows")
        if scaled != scaled.to_integral_value():
            raise InvalidAmount(f"Amount {value!r} has more than {decimals} decimal places")

        return int(scaled)


def unscale_by_decimals(amount: int, decimals: int) -> str:
    """Render base units as a plain decimal string (no exponent)."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        text = format(Decimal(amount).scaleb(-decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def parse_base_units(value: str | int | Decimal) -> int:
    """Parse an amount that is already in base units (no decimals allowed)."""
    return scale_by_decimals(value, 0)
