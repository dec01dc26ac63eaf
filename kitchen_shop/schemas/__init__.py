"""
Schemas Package for Kitchen Shop
================================

Pydantic models used for API request validation and response serialization.
Schemas never import from the services package, so services can depend on
them freely.

Schema Organization:
--------------------
- **cart.py**: Cart line items, cart state and cart update bodies
- **currency.py**: Exchange rate snapshots and price conversions
- **orders.py**: Checkout customer details, orders, webhooks, contact form
- **tax.py**: VAT number check and tax quote responses

Naming Conventions:
-------------------
- *Out: Response models (e.g., OrderOut)
- *Update: Request bodies for PUT/PATCH (e.g., CartQuantityUpdate)
- *Request / *Response: Complex request and response bodies

Money fields are Decimal, in GBP, rounded half-up to 2 decimal places.
"""

from .cart import (
    CartCountryUpdate,
    CartItemInput,
    CartLineItem,
    CartQuantityUpdate,
    CartState,
    CartVatNumberUpdate,
)
from .currency import ExchangeRates, PriceConversionOut
from .orders import (
    ContactSubmissionRequest,
    ContactSubmissionResponse,
    CustomerDetails,
    OrderCreateRequest,
    OrderCreateResponse,
    OrderItemOut,
    OrderOut,
    OrderSummary,
    PaymentWebhookEvent,
    WebhookAck,
)
from .tax import TaxQuoteOut, VatNumberCheckOut, VatNumberCheckRequest

__all__ = [
    "CartCountryUpdate",
    "CartItemInput",
    "CartLineItem",
    "CartQuantityUpdate",
    "CartState",
    "CartVatNumberUpdate",
    "ExchangeRates",
    "PriceConversionOut",
    "ContactSubmissionRequest",
    "ContactSubmissionResponse",
    "CustomerDetails",
    "OrderCreateRequest",
    "OrderCreateResponse",
    "OrderItemOut",
    "OrderOut",
    "OrderSummary",
    "PaymentWebhookEvent",
    "WebhookAck",
    "TaxQuoteOut",
    "VatNumberCheckOut",
    "VatNumberCheckRequest",
]
