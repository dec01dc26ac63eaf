"""
Tax Schemas for Kitchen Shop
============================

Pydantic models for the VAT number check and the tax/shipping preview shown
on the cart and checkout pages.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class VatNumberCheckRequest(BaseModel):
    vat_number: Optional[str] = None


class VatNumberCheckOut(BaseModel):
    """
    Result of a local VAT number format check.

    Attributes:
        is_valid: Whether the number matches its country's format
        country: Two-letter prefix of the number, when it had one
        error: Human-readable reason when invalid
        formatted: Display form of the number (e.g. "GB 123 456 789")
    """
    is_valid: bool
    country: Optional[str] = None
    error: Optional[str] = None
    formatted: Optional[str] = None


class TaxQuoteOut(BaseModel):
    """Tax and shipping preview for a subtotal and destination."""
    subtotal: Decimal
    country: str
    shipping_cost: Decimal
    is_free_shipping: bool
    shipping_reason: Optional[str] = None
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    is_vat_exempt: bool
    exemption_reason: Optional[str] = None
