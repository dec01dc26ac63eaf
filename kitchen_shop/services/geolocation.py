"""
Geolocation helpers.

Maps a visitor's country code (from the CDN/geo header) to a display
currency and locale. Anything outside the supported markets falls back to
the UK defaults.
"""

from typing import List

from ..config import CANONICAL_CURRENCY, SUPPORTED_CURRENCIES

# Euro zone members with a dedicated storefront currency
EURO_ZONE = frozenset([
    "AT", "BE", "CY", "EE", "FI", "FR", "DE", "GR", "IE", "IT",
    "LV", "LT", "LU", "MT", "NL", "PT", "SK", "SI", "ES",
])

COUNTRY_CURRENCIES = {
    "GB": "GBP",
    "US": "USD",
    "CA": "CAD",
    "AU": "AUD",
    "NZ": "NZD",
}

COUNTRY_LOCALES = {
    "GB": "en-GB",
    "US": "en-US",
    "CA": "en-CA",
    "AU": "en-AU",
    "NZ": "en-NZ",
    "IE": "en-IE",
    "DE": "de-DE",
    "FR": "fr-FR",
    "ES": "es-ES",
    "IT": "it-IT",
    "NL": "nl-NL",
    "PT": "pt-PT",
}

DEFAULT_LOCALE = "en-GB"


def get_currency_from_country(country_code: str) -> str:
    """Map a country code to the currency shown to that visitor."""
    country = (country_code or "").upper()
    if country in COUNTRY_CURRENCIES:
        return COUNTRY_CURRENCIES[country]
    if country in EURO_ZONE:
        return "EUR"
    return CANONICAL_CURRENCY


def get_locale_from_country(country_code: str) -> str:
    """Locale used for number and date formatting."""
    return COUNTRY_LOCALES.get((country_code or "").upper(), DEFAULT_LOCALE)


def is_supported_market(country_code: str) -> bool:
    """English-speaking markets plus the euro zone."""
    country = (country_code or "").upper()
    return country in COUNTRY_CURRENCIES or country in EURO_ZONE


def get_supported_currencies() -> List[str]:
    return list(SUPPORTED_CURRENCIES)
