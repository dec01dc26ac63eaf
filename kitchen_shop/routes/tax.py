"""
Tax Routes for Kitchen Shop
===========================

- POST /tax/vat-number/validate: Local VAT number format check
- GET /tax/quote: Shipping + VAT preview for a subtotal and destination

VAT numbers are checked against per-country formats only; nothing is sent to
VIES or HMRC.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Query

from ..config import DEFAULT_MARKET
from ..money import round_money
from ..schemas.tax import TaxQuoteOut, VatNumberCheckOut, VatNumberCheckRequest
from ..services.shipping import calculate_shipping
from ..services.tax import calculate_tax
from ..services.vat import format_vat_number, validate_vat_number

tax_router = APIRouter(prefix="/tax", tags=["Tax"])


@tax_router.post("/vat-number/validate", response_model=VatNumberCheckOut)
def validate_vat(body: VatNumberCheckRequest) -> VatNumberCheckOut:
    result = validate_vat_number(body.vat_number)
    return VatNumberCheckOut(
        is_valid=result.is_valid,
        country=result.country,
        error=result.error,
        formatted=format_vat_number(body.vat_number) if result.is_valid else None,
    )


@tax_router.get("/quote", response_model=TaxQuoteOut)
def tax_quote(
    subtotal: Decimal = Query(..., ge=0, description="Cart subtotal in GBP, ex VAT"),
    country: str = Query(DEFAULT_MARKET, min_length=2, max_length=2),
    vat_number: Optional[str] = Query(None),
) -> TaxQuoteOut:
    """Price a subtotal the same way the cart does: shipping first, then VAT on both."""
    country = country.upper()
    shipping = calculate_shipping(subtotal, country)
    tax = calculate_tax(subtotal + shipping.cost, country, vat_number)

    return TaxQuoteOut(
        subtotal=round_money(subtotal),
        country=country,
        shipping_cost=shipping.cost,
        is_free_shipping=shipping.is_free,
        shipping_reason=shipping.reason,
        tax_rate=tax.tax_rate,
        tax_amount=tax.tax_amount,
        total=round_money(subtotal + shipping.cost + tax.tax_amount),
        is_vat_exempt=tax.is_vat_exempt,
        exemption_reason=tax.exemption_reason,
    )
