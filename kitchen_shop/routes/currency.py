"""
Currency Routes for Kitchen Shop
================================

Display-currency helpers for the storefront. Prices are always stored and
charged in GBP; these endpoints only convert for display.

Endpoints:
----------
- GET /currency/rates: Current exchange rate snapshot
- GET /currency/convert: Convert one GBP price to a display currency
- GET /currency/market/{country}: Display currency and locale for a country
"""

from decimal import Decimal

from fastapi import APIRouter, HTTPException, Query

from ..schemas.currency import ExchangeRates, PriceConversionOut
from ..services.currency import convert_price, format_price, is_currency_supported
from ..services.exchange_rates import get_exchange_rates
from ..services.geolocation import (
    get_currency_from_country,
    get_locale_from_country,
    is_supported_market,
)

currency_router = APIRouter(prefix="/currency", tags=["Currency"])


@currency_router.get("/rates", response_model=ExchangeRates)
def get_rates() -> ExchangeRates:
    return get_exchange_rates()


@currency_router.get("/convert", response_model=PriceConversionOut)
def convert(
    price: Decimal = Query(..., ge=0, description="Price in GBP"),
    currency: str = Query(..., min_length=3, max_length=3, description="Target currency code"),
) -> PriceConversionOut:
    """Convert a GBP price using the cached rates, rounded to a friendly price."""
    code = currency.upper()
    if not is_currency_supported(code):
        raise HTTPException(status_code=400, detail=f"Unsupported currency: {code}")

    snapshot = get_exchange_rates()
    converted = convert_price(price, code, snapshot.rates)
    return PriceConversionOut(
        gbp_price=price,
        currency=code,
        price=converted,
        formatted=format_price(converted, code),
        rate_date=snapshot.date,
    )


@currency_router.get("/market/{country}")
def get_market(country: str) -> dict:
    """Display currency and locale for a visitor's country (from the geo header)."""
    code = country.strip().upper()
    return {
        "country": code,
        "currency": get_currency_from_country(code),
        "locale": get_locale_from_country(code),
        "is_supported_market": is_supported_market(code),
    }
