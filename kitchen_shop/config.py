"""
Configuration Module for Kitchen Shop
=====================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the Kitchen OS shop backend. By consolidating
configuration in one place, we achieve:

1. **Single Source of Truth**: All environment variables and defaults are defined
   here, making it easy to see what configuration options exist.

2. **Easy Environment Management**: Different environments (dev, staging, prod)
   can override settings via environment variables without code changes.

3. **Type Safety**: Configuration values are parsed and typed at module load time,
   catching configuration errors early.

Configuration Categories:
-------------------------
- **Market Defaults**: The home market (UK), the canonical currency every price
  is stored in (GBP), and the UK VAT rate.

- **Shipping Rules**: Free-delivery threshold and flat rates for UK and
  international orders.

- **Currencies**: Display currencies, the exchange rate API and the fallback
  rates used when the API is unreachable.

- **Cart Sessions**: TTL and cache size for the in-memory per-session carts.

- **Orders & Payments**: Order number prefix and Revolut merchant API settings.

- **Rate Limiting**: Throttling for order creation and contact submissions.

- **CORS Settings**: Cross-Origin Resource Sharing configuration for the
  storefront.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy database URL (default: "sqlite:///./kitchen_shop.db")
- UK_FREE_SHIPPING_THRESHOLD: Free UK delivery threshold (default: 50.00)
- UK_STANDARD_SHIPPING: UK delivery charge below threshold (default: 5.99)
- INTERNATIONAL_SHIPPING: Flat international rate (default: 15.99)
- EXCHANGE_RATE_API_URL: Exchange rate endpoint (default: Frankfurter)
- EXCHANGE_RATE_TTL_SECONDS: Rate cache lifetime (default: 86400)
- CART_SESSION_TTL_SECONDS: Cart cache TTL (default: 7200)
- CART_MAX_CACHE_SIZE: Max cached carts (default: 5000)
- REVOLUT_API_URL / REVOLUT_SECRET_KEY / REVOLUT_PUBLIC_KEY: Payment provider
- RATE_LIMIT_ORDERS: Order endpoint rate limit (default: "10 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")

Usage:
------
    from kitchen_shop.config import (
        DEFAULT_MARKET,
        CANONICAL_CURRENCY,
        DEFAULT_SHIPPING_RULES,
        UK_VAT_RATE,
    )
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Tuple


# =============================================================================
# Market Defaults
# =============================================================================
# The shop is UK-based: all catalog prices are stored ex-VAT in GBP and the
# UK is assumed whenever the customer has not chosen a country.

DEFAULT_MARKET: str = "GB"
CANONICAL_CURRENCY: str = "GBP"

# "UK" is not an ISO code but shows up in user-entered addresses
UK_COUNTRY_CODES: Tuple[str, ...] = ("GB", "UK")

UK_VAT_RATE: Decimal = Decimal("0.20")


# =============================================================================
# Shipping Rules
# =============================================================================

@dataclass(frozen=True)
class ShippingRules:
    """Flat-rate shipping configuration."""

    uk_free_threshold: Decimal
    uk_standard_cost: Decimal
    international_cost: Decimal


UK_FREE_SHIPPING_THRESHOLD: Decimal = Decimal(os.getenv("UK_FREE_SHIPPING_THRESHOLD", "50.00"))
UK_STANDARD_SHIPPING: Decimal = Decimal(os.getenv("UK_STANDARD_SHIPPING", "5.99"))
INTERNATIONAL_SHIPPING: Decimal = Decimal(os.getenv("INTERNATIONAL_SHIPPING", "15.99"))

DEFAULT_SHIPPING_RULES = ShippingRules(
    uk_free_threshold=UK_FREE_SHIPPING_THRESHOLD,
    uk_standard_cost=UK_STANDARD_SHIPPING,
    international_cost=INTERNATIONAL_SHIPPING,
)


# =============================================================================
# Currency Configuration
# =============================================================================
# Prices are displayed in the visitor's currency but always charged in GBP.
# Rates come from the Frankfurter API (ECB data) and are cached for a day.

SUPPORTED_CURRENCIES: Tuple[str, ...] = ("GBP", "USD", "EUR", "CAD", "AUD", "NZD")

EXCHANGE_RATE_API_URL: str = os.getenv(
    "EXCHANGE_RATE_API_URL", "https://api.frankfurter.app/latest"
)
EXCHANGE_RATE_TTL_SECONDS: int = int(os.getenv("EXCHANGE_RATE_TTL_SECONDS", "86400"))
EXCHANGE_RATE_TIMEOUT: int = int(os.getenv("EXCHANGE_RATE_TIMEOUT", "10"))

# Approximate rates used when the API cannot be reached
FALLBACK_EXCHANGE_RATES: Dict[str, float] = {
    "USD": 1.27,
    "EUR": 1.17,
    "CAD": 1.76,
    "AUD": 1.95,
    "NZD": 2.12,
}


# =============================================================================
# Cart Session Configuration
# =============================================================================
# Carts are session-only. They live in memory and are evicted after TTL or
# when the cache is full (oldest first).

CART_SESSION_TTL_SECONDS: int = int(os.getenv("CART_SESSION_TTL_SECONDS", "7200"))  # 2 hours
CART_MAX_CACHE_SIZE: int = int(os.getenv("CART_MAX_CACHE_SIZE", "5000"))


# =============================================================================
# Orders & Payments
# =============================================================================

ORDER_NUMBER_PREFIX: str = os.getenv("ORDER_NUMBER_PREFIX", "KOS")

REVOLUT_API_URL: str = os.getenv("REVOLUT_API_URL", "https://sandbox-merchant.revolut.com/api")
REVOLUT_SECRET_KEY: str = os.getenv("REVOLUT_SECRET_KEY", "")
REVOLUT_PUBLIC_KEY: str = os.getenv("REVOLUT_PUBLIC_KEY", "")
REVOLUT_API_VERSION: str = os.getenv("REVOLUT_API_VERSION", "2024-09-01")
REVOLUT_TIMEOUT: int = int(os.getenv("REVOLUT_TIMEOUT", "15"))


def is_payment_configured() -> bool:
    """Check if both Revolut keys are present."""
    return bool(REVOLUT_SECRET_KEY and REVOLUT_PUBLIC_KEY)


# =============================================================================
# Database
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./kitchen_shop.db")


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Rate limit format: "X per Y" where Y is second, minute, hour, or day

RATE_LIMIT_ORDERS: str = os.getenv("RATE_LIMIT_ORDERS", "10 per minute")
RATE_LIMIT_CONTACT: str = os.getenv("RATE_LIMIT_CONTACT", "5 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_orders() -> str:
    """
    Return the current order creation rate limit.

    Allows dynamic override in tests without modifying the module-level constant.
    """
    return RATE_LIMIT_ORDERS


def get_rate_limit_contact() -> str:
    """Return the current contact form rate limit."""
    return RATE_LIMIT_CONTACT


# =============================================================================
# CORS Configuration
# =============================================================================
# Format: comma-separated list of origins, e.g., "https://kitchen-os.com,https://www.kitchen-os.com"
# Default "*" allows all origins (suitable for development only)

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]


# =============================================================================
# Notifications
# =============================================================================

SHOP_NAME: str = os.getenv("SHOP_NAME", "Kitchen OS")
SALES_NOTIFICATION_EMAIL: str = os.getenv("SALES_NOTIFICATION_EMAIL", "")
