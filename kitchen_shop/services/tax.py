"""
Tax calculation utilities.

Handles UK VAT and international tax treatment:
- UK customers: 20% VAT
- Non-UK customers: 0% VAT (zero-rated export)
- Non-UK companies with a VAT number: 0% VAT (reverse charge)

The VAT number is only checked for presence here. Format checks live in
vat.py and nothing in this module talks to a VAT registry.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from ..config import UK_COUNTRY_CODES, UK_VAT_RATE
from ..money import ZERO, round_money, to_decimal

REVERSE_CHARGE_REASON = "Reverse charge - Non-UK company with VAT number"
ZERO_RATED_EXPORT_REASON = "Zero-rated export - Non-UK customer"


@dataclass
class TaxResult:
    """Outcome of a tax calculation for one subtotal."""

    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    is_vat_exempt: bool
    exemption_reason: Optional[str] = None


def is_uk_country(country: Optional[str]) -> bool:
    """True for GB and the non-ISO "UK" alias."""
    return (country or "").strip().upper() in UK_COUNTRY_CODES


def calculate_tax(
    subtotal: Any,
    country: Optional[str],
    vat_number: Optional[str] = None,
) -> TaxResult:
    """
    Calculate tax for an order based on customer location and VAT status.

    The first matching rule wins:
    1. UK customer: 20% VAT.
    2. Non-UK customer with a VAT number: reverse charge, no VAT.
    3. Any other non-UK customer: zero-rated export, no VAT.

    Tax amount and total are each rounded half-up from the subtotal, so
    total - subtotal can differ from tax_amount by a penny.

    Args:
        subtotal: Taxable amount (ex VAT)
        country: ISO country code of the customer
        vat_number: Optional VAT/tax registration number

    Returns:
        TaxResult for the subtotal
    """
    amount = to_decimal(subtotal)

    if is_uk_country(country):
        return TaxResult(
            tax_rate=UK_VAT_RATE,
            tax_amount=round_money(amount * UK_VAT_RATE),
            total=round_money(amount * (1 + UK_VAT_RATE)),
            is_vat_exempt=False,
        )

    if vat_number and vat_number.strip():
        return TaxResult(
            tax_rate=ZERO,
            tax_amount=ZERO,
            total=amount,
            is_vat_exempt=True,
            exemption_reason=REVERSE_CHARGE_REASON,
        )

    return TaxResult(
        tax_rate=ZERO,
        tax_amount=ZERO,
        total=amount,
        is_vat_exempt=True,
        exemption_reason=ZERO_RATED_EXPORT_REASON,
    )


def format_tax_amount(amount: Any) -> str:
    """Format tax amount for display, e.g. "£10.00"."""
    return f"£{round_money(amount):.2f}"


def format_tax_rate(rate: Any) -> str:
    """Format tax rate as a whole percentage, e.g. "20%"."""
    return f"{to_decimal(rate) * 100:.0f}%"


def calculate_vat_inclusive(ex_vat_price: Any, vat_rate: Any = UK_VAT_RATE) -> Decimal:
    """Calculate VAT-inclusive price from VAT-exclusive price."""
    return round_money(to_decimal(ex_vat_price) * (1 + to_decimal(vat_rate)))


def calculate_vat_exclusive(inc_vat_price: Any, vat_rate: Any = UK_VAT_RATE) -> Decimal:
    """Calculate VAT-exclusive price from VAT-inclusive price."""
    return round_money(to_decimal(inc_vat_price) / (1 + to_decimal(vat_rate)))


def extract_vat_amount(inc_vat_price: Any, vat_rate: Any = UK_VAT_RATE) -> Decimal:
    """Extract the VAT portion of a VAT-inclusive price."""
    ex_vat = calculate_vat_exclusive(inc_vat_price, vat_rate)
    return round_money(to_decimal(inc_vat_price) - ex_vat)
