"""
Order Schemas for Kitchen Shop
==============================

This module defines Pydantic models for checkout: the customer details form,
the priced order summary, the order creation request/response, payment
webhook events, and the contact form.

Endpoint Coverage:
------------------
- POST /orders: Create an order and its payment-provider order
- POST /webhooks/revolut: Payment status updates
- POST /contact: Website enquiry form

Order Lifecycle:
----------------
1. **pending**: Order saved, waiting for payment
2. **authorised**: Payment authorised, capture pending
3. **paid**: Payment captured
4. **failed**: Payment attempt failed
5. **cancelled**: Order cancelled before payment

Pricing:
--------
All amounts are GBP. The summary sent by the browser is informational only:
the server re-prices the items with the customer's country and VAT number
before anything is saved or charged.

Usage:
------
    request = OrderCreateRequest.model_validate(payload)
    order = create_order(db, request)
    return OrderOut.model_validate(order)
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..validators import validate_email_address, validate_phone_number
from .cart import CartLineItem


class CustomerDetails(BaseModel):
    """
    Contact, billing address and tax details captured at checkout.

    Email is normalised with email-validator. Phone numbers are parsed in the
    region of the billing country and stored in E.164 form.

    Attributes:
        email: Customer email address
        phone: Customer phone number
        first_name: Billing first name
        last_name: Billing last name
        company: Optional company name
        address_line1: Billing address line 1
        address_line2: Optional billing address line 2
        city: Billing city
        county: Optional county/region
        postcode: Billing postcode
        country: ISO 3166-1 alpha-2 country code (e.g. "GB", "FR")
        vat_number: Optional VAT/tax registration number
    """
    email: str
    phone: str
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    company: Optional[str] = None
    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1)
    county: Optional[str] = None
    postcode: str = Field(min_length=1)
    country: str = Field(min_length=2, max_length=2)
    vat_number: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        normalized, error = validate_email_address(v)
        if error:
            raise ValueError(error)
        return normalized

    @field_validator("country")
    @classmethod
    def upper_country(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("vat_number")
    @classmethod
    def blank_vat_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def check_phone(self) -> "CustomerDetails":
        phone, error = validate_phone_number(self.phone, self.country)
        if error:
            raise ValueError(error)
        self.phone = phone
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class OrderSummary(BaseModel):
    """Priced totals for an order (GBP)."""
    subtotal: Decimal
    shipping_cost: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    currency: Literal["GBP"] = "GBP"
    is_vat_exempt: bool = False


class OrderCreateRequest(BaseModel):
    """
    Request body for POST /orders.

    Either send the cart items directly, or send session_id to check out the
    server-side cart for that session. The server-side cart is discarded once
    the order is saved.
    """
    customer: CustomerDetails
    items: List[CartLineItem] = Field(default_factory=list)
    summary: Optional[OrderSummary] = None
    session_id: Optional[str] = None


class OrderCreateResponse(BaseModel):
    """Response for POST /orders."""
    success: bool
    order_id: Optional[str] = None
    revolut_order_id: Optional[str] = None
    revolut_order_token: Optional[str] = None
    checkout_url: Optional[str] = None
    summary: Optional[OrderSummary] = None
    error: Optional[str] = None


class OrderItemOut(BaseModel):
    """Response model for an order line item."""
    id: int
    product_id: str
    product_name: str
    product_image: Optional[str] = None
    variant_id: str
    variant_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Response model for a saved order."""
    id: int
    order_number: str
    status: str
    customer_email: str
    customer_name: str
    billing_country: str
    vat_number: Optional[str] = None
    subtotal: Decimal
    shipping_cost: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    is_vat_exempt: bool = False
    payment_method: Optional[str] = None
    revolut_order_id: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    items: List[OrderItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PaymentMethodInfo(BaseModel):
    type: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class PaymentWebhookEvent(BaseModel):
    """
    Payment provider webhook payload.

    Only the fields the shop acts on are declared; anything else the provider
    sends is kept but ignored.
    """
    event: str
    order_id: Optional[str] = None
    merchant_order_ext_ref: Optional[str] = None
    payment_method: Optional[PaymentMethodInfo] = None

    model_config = ConfigDict(extra="allow")


class WebhookAck(BaseModel):
    received: bool = True
    status: Optional[str] = None


class ContactSubmissionRequest(BaseModel):
    """
    Request body for POST /contact.

    Attributes:
        sites: Free-text number of sites from the form ("1", "2-5", "20+")
        interest: Product the enquiry is about
    """
    name: str = Field(min_length=1)
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    sites: Optional[str] = None
    interest: Optional[str] = None
    message: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        normalized, error = validate_email_address(v)
        if error:
            raise ValueError(error)
        return normalized


class ContactSubmissionResponse(BaseModel):
    success: bool
    message: str
