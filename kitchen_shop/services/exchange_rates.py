"""
Exchange Rate Provider
======================

Fetches GBP exchange rates from the Frankfurter API (European Central Bank
data) and keeps the latest snapshot in memory for EXCHANGE_RATE_TTL_SECONDS
(24 hours by default).

Failure Handling:
-----------------
Any network, HTTP or parse error is logged and answered with the fallback
rates from config.py. The provider never raises, so pages and the currency
converter can always render a price.

Thread Safety:
--------------
The cached snapshot is replaced under a lock and handed out as an immutable
copy, so readers never observe a half-updated rate map.

Usage:
------
    from kitchen_shop.services.exchange_rates import exchange_rate_provider

    snapshot = exchange_rate_provider.get_rates()
    convert_price(price, "EUR", snapshot.rates)
"""

import logging
import threading
import time
from datetime import date
from typing import Optional

import requests

from ..config import (
    CANONICAL_CURRENCY,
    EXCHANGE_RATE_API_URL,
    EXCHANGE_RATE_TIMEOUT,
    EXCHANGE_RATE_TTL_SECONDS,
    FALLBACK_EXCHANGE_RATES,
    SUPPORTED_CURRENCIES,
)
from ..schemas.currency import ExchangeRates

logger = logging.getLogger(__name__)

# Retry the API sooner when we are serving fallback rates
FALLBACK_RETRY_SECONDS = 300


def fallback_rates() -> ExchangeRates:
    """Build the fallback snapshot dated today."""
    return ExchangeRates(
        base=CANONICAL_CURRENCY,
        date=date.today().isoformat(),
        rates=dict(FALLBACK_EXCHANGE_RATES),
        is_fallback=True,
    )


class ExchangeRateProvider:
    """
    Cached exchange rate fetcher.

    Args:
        api_url: Rate endpoint (Frankfurter compatible)
        ttl_seconds: How long a fetched snapshot is served from memory
        timeout: HTTP timeout in seconds
        session: Optional requests session (injected in tests)
    """

    def __init__(
        self,
        api_url: str = EXCHANGE_RATE_API_URL,
        ttl_seconds: int = EXCHANGE_RATE_TTL_SECONDS,
        timeout: int = EXCHANGE_RATE_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._session = session or requests.Session()
        self._snapshot: Optional[ExchangeRates] = None
        self._expires_at: float = 0.0
        self._lock = threading.Lock()

    def get_rates(self) -> ExchangeRates:
        """Return the cached snapshot, refreshing it when expired."""
        with self._lock:
            if self._snapshot is not None and time.time() < self._expires_at:
                return self._snapshot.model_copy(deep=True)

        snapshot = self._fetch()
        ttl = FALLBACK_RETRY_SECONDS if snapshot.is_fallback else self.ttl_seconds

        with self._lock:
            self._snapshot = snapshot
            self._expires_at = time.time() + ttl
            return snapshot.model_copy(deep=True)

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next read refetches."""
        with self._lock:
            self._snapshot = None
            self._expires_at = 0.0

    def _fetch(self) -> ExchangeRates:
        targets = [c for c in SUPPORTED_CURRENCIES if c != CANONICAL_CURRENCY]
        try:
            response = self._session.get(
                self.api_url,
                params={"from": CANONICAL_CURRENCY, "to": ",".join(targets)},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            snapshot = ExchangeRates(
                base=data.get("base", CANONICAL_CURRENCY),
                date=data.get("date") or date.today().isoformat(),
                rates=data.get("rates") or {},
            )
        except (requests.RequestException, ValueError) as e:
            logger.error("Error fetching exchange rates: %s", e)
            return fallback_rates()

        if not snapshot.rates:
            logger.warning("Exchange rate API returned no rates, using fallback")
            return fallback_rates()

        logger.info("Fetched exchange rates for %s (%d currencies)", snapshot.date, len(snapshot.rates))
        return snapshot


exchange_rate_provider = ExchangeRateProvider()


def get_exchange_rates() -> ExchangeRates:
    """FastAPI-friendly accessor for the shared provider."""
    return exchange_rate_provider.get_rates()
