"""Money helpers shared by the pricing services."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Any) -> Decimal:
    """Coerce floats, ints and strings to Decimal without binary float noise."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(amount: Any) -> Decimal:
    """Round to 2 decimal places for currency (half-up)."""
    return to_decimal(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
