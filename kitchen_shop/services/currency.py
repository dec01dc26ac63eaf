"""
Currency Utilities
==================

Converts canonical GBP prices into the visitor's display currency and rounds
the result to a "friendly" psychological price (.99 endings, clean whole
numbers). Exchange rates are always supplied by the caller; fetching and
caching them is the job of exchange_rates.py, so conversion never blocks on
the network and tolerates stale or empty rate maps.

Friendly Price Buckets (evaluated in order):
--------------------------------------------
- amount < 5               -> ceil(amount) - 0.01
- fraction > 0.95          -> ceil(amount) - 0.01
- 0.45 < fraction < 0.95   -> floor(amount) + 0.99
- fraction < 0.05          -> nearest whole number
- anything else            -> floor(amount) + 0.99

Usage:
------
    from kitchen_shop.services.currency import convert_price, format_price

    usd = convert_price(Decimal("49.00"), "USD", {"USD": 1.27})  # Decimal("62.99")
    format_price(usd, "USD")  # "$62.99"
"""

import logging
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from ..config import CANONICAL_CURRENCY, SUPPORTED_CURRENCIES
from ..money import TWOPLACES, ZERO, round_money, to_decimal

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
NINETY_NINE = Decimal("0.99")
SMALL_AMOUNT_LIMIT = Decimal("5")

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
    "CAD": "CAD$",
    "AUD": "AUD$",
    "NZD": "NZD$",
}

CURRENCY_NAMES = {
    "GBP": "British Pound",
    "USD": "US Dollar",
    "EUR": "Euro",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "NZD": "New Zealand Dollar",
}


def round_to_friendly_price(amount: Any) -> Decimal:
    """
    Round a converted amount to a psychological price.

    Non-positive amounts come back as 0.00 instead of -0.01.
    """
    value = to_decimal(amount)
    if value <= 0:
        return ZERO

    ceiling = value.to_integral_value(rounding=ROUND_CEILING)
    floor = value.to_integral_value(rounding=ROUND_FLOOR)

    if value < SMALL_AMOUNT_LIMIT:
        return (ceiling - CENT).quantize(TWOPLACES)

    fraction = value - floor
    if fraction > Decimal("0.95"):
        return (ceiling - CENT).quantize(TWOPLACES)

    if Decimal("0.45") < fraction < Decimal("0.95"):
        return (floor + NINETY_NINE).quantize(TWOPLACES)

    if fraction < Decimal("0.05"):
        return value.to_integral_value(rounding=ROUND_HALF_UP).quantize(TWOPLACES)

    return (floor + NINETY_NINE).quantize(TWOPLACES)


def convert_price(
    gbp_price: Any,
    target_currency: str,
    rates: Optional[Mapping[str, Any]],
) -> Decimal:
    """
    Convert a GBP price to the target currency using the supplied rates.

    GBP is returned unchanged (no rounding pass). A missing rate is logged
    and the GBP price is returned as a safe fallback.

    Args:
        gbp_price: Canonical price in GBP
        target_currency: ISO currency code to display
        rates: Mapping of currency code -> rate against GBP

    Returns:
        Converted, friendly-rounded price (or the GBP price on fallback)
    """
    price = to_decimal(gbp_price)
    currency = (target_currency or "").upper()

    if currency == CANONICAL_CURRENCY:
        return price

    rate = (rates or {}).get(currency)
    if not rate:
        logger.warning("Exchange rate not found for %s, using %s", currency, CANONICAL_CURRENCY)
        return price

    converted = price * to_decimal(rate)
    return round_to_friendly_price(converted)


def format_price(amount: Any, currency: str) -> str:
    """
    Format a price with its currency symbol.

    Shows up to two decimals and drops trailing zeros ("£49", "$62.99", "€12.5").
    """
    value = round_money(amount)
    formatted = f"{abs(value):,.2f}"
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    sign = "-" if value < 0 else ""
    return f"{sign}{get_currency_symbol(currency)}{formatted}"


def get_currency_symbol(currency: str) -> str:
    """Get currency symbol for display (falls back to the code itself)."""
    return CURRENCY_SYMBOLS.get((currency or "").upper(), currency)


def get_currency_name(currency: str) -> str:
    """Get currency name for display (falls back to the code itself)."""
    return CURRENCY_NAMES.get((currency or "").upper(), currency)


def is_currency_supported(currency: str) -> bool:
    """Check if a currency can be selected in the storefront."""
    return (currency or "").upper() in SUPPORTED_CURRENCIES
