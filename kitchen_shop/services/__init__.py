"""
Services Package for Kitchen Shop
=================================

This package contains service modules that encapsulate business logic.
Pricing modules are pure functions; state lives only where it is explicitly
managed and documented (per-session carts, the exchange rate cache).

Available Services:
-------------------
- **tax**: UK VAT, reverse charge and zero-rated exports
- **shipping**: UK free-delivery threshold and flat international rate
- **vat**: VAT number format validation and display formatting
- **currency**: GBP to display-currency conversion with friendly rounding
- **exchange_rates**: Cached exchange rate snapshot with fallback rates
- **geolocation**: Country to currency/locale mapping
- **cart**: CartStore, the authoritative cart with full recomputation
- **cart_sessions**: One CartStore per session, with per-session locking
- **order**: Order creation, payment webhook handling, contact submissions

Usage:
------
Import services directly from the package:

    from kitchen_shop.services.cart import CartStore
    from kitchen_shop.services.tax import calculate_tax
    from kitchen_shop.services.order import create_order

Or import the entire module:

    from kitchen_shop.services import tax, shipping, cart
"""

from . import tax
from . import shipping
from . import vat
from . import currency
from . import exchange_rates
from . import geolocation
from . import cart
from . import cart_sessions
from . import order

__all__ = [
    "tax",
    "shipping",
    "vat",
    "currency",
    "exchange_rates",
    "geolocation",
    "cart",
    "cart_sessions",
    "order",
]
