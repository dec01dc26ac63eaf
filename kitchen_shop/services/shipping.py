"""
Shipping cost calculation.

UK shipping:
- Free delivery on orders of £50 or more
- £5.99 standard delivery below that

International shipping:
- Flat rate £15.99 for every destination outside the UK

There is no weight or dimension logic; the rules are flat constants from
config.DEFAULT_SHIPPING_RULES.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from ..config import DEFAULT_SHIPPING_RULES, ShippingRules
from ..money import ZERO, round_money, to_decimal
from .tax import is_uk_country


@dataclass
class ShippingResult:
    """Shipping cost for one subtotal/destination pair."""

    cost: Decimal
    is_free: bool
    reason: Optional[str] = None


def calculate_shipping(
    subtotal: Any,
    country: Optional[str],
    rules: ShippingRules = DEFAULT_SHIPPING_RULES,
) -> ShippingResult:
    """
    Calculate shipping cost based on order subtotal and destination country.

    Args:
        subtotal: Order subtotal (ex VAT, ex shipping)
        country: ISO country code of the destination
        rules: Shipping rules to apply

    Returns:
        ShippingResult with cost, free flag and a customer-facing reason
    """
    amount = to_decimal(subtotal)

    if is_uk_country(country):
        if amount >= rules.uk_free_threshold:
            return ShippingResult(
                cost=ZERO,
                is_free=True,
                reason=f"Free UK delivery on orders over £{rules.uk_free_threshold:.0f}",
            )
        remaining = round_money(rules.uk_free_threshold - amount)
        return ShippingResult(
            cost=rules.uk_standard_cost,
            is_free=False,
            reason=f"Add £{remaining:.2f} more for free UK delivery",
        )

    return ShippingResult(
        cost=rules.international_cost,
        is_free=False,
        reason="International shipping",
    )


def format_shipping_cost(cost: Any, is_free: bool) -> str:
    """Format shipping cost for display ("FREE" or "£5.99")."""
    amount = to_decimal(cost)
    if is_free or amount == 0:
        return "FREE"
    return f"£{round_money(amount):.2f}"


def amount_until_free_shipping(
    subtotal: Any,
    country: Optional[str],
    rules: ShippingRules = DEFAULT_SHIPPING_RULES,
) -> Decimal:
    """Amount still needed to reach free UK shipping (0 for international)."""
    if not is_uk_country(country):
        return ZERO
    remaining = rules.uk_free_threshold - to_decimal(subtotal)
    return round_money(remaining) if remaining > 0 else ZERO


def qualifies_for_free_shipping(
    subtotal: Any,
    country: Optional[str],
    rules: ShippingRules = DEFAULT_SHIPPING_RULES,
) -> bool:
    """Check if an order qualifies for free shipping."""
    return is_uk_country(country) and to_decimal(subtotal) >= rules.uk_free_threshold
