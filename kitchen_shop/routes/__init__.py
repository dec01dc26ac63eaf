"""
Routes Package for Kitchen Shop
===============================

This package contains all API route definitions organized by domain. Each module
defines a FastAPI APIRouter with related endpoints grouped together.

Storefront Routes:
------------------
- cart.py: Per-session cart mutations and totals
- orders.py: Checkout and the Revolut payment webhook
- currency.py: Exchange rates and display-price conversion
- tax.py: VAT number check and tax/shipping preview
- contact.py: Contact form submissions

Router Registration:
--------------------
All routers are registered in app_factory.py under two prefixes:
1. /api/v1/* - Versioned API (recommended)
2. /* - Root paths for backward compatibility

Error Handling:
---------------
Routes raise HTTPException for error conditions:
- 400: Bad request (invalid VAT number, empty order)
- 404: Not found (unknown order)
- 429: Too many requests (rate limited)
- 502: Payment provider error
- 503: Service unavailable (payments not configured)
"""

from .cart import cart_router
from .orders import orders_router, limiter
from .currency import currency_router
from .tax import tax_router
from .contact import contact_router

__all__ = [
    "cart_router",
    "orders_router",
    "currency_router",
    "tax_router",
    "contact_router",
    "limiter",
]
