"""
Currency Schemas for Kitchen Shop
=================================

Pydantic models for exchange rate snapshots and price conversion responses.
"""

from decimal import Decimal
from typing import Dict

from pydantic import BaseModel, Field


class ExchangeRates(BaseModel):
    """
    Exchange rate snapshot as returned by the rate provider.

    Attributes:
        base: Currency the rates are quoted against (always GBP)
        date: Date the rates were published (YYYY-MM-DD)
        rates: Currency code -> units of that currency per 1 GBP
        is_fallback: True when the snapshot is the built-in fallback table
    """
    base: str
    date: str
    rates: Dict[str, float] = Field(default_factory=dict)
    is_fallback: bool = False


class PriceConversionOut(BaseModel):
    """Response model for a single price conversion."""
    gbp_price: Decimal
    currency: str
    price: Decimal
    formatted: str
    rate_date: str
