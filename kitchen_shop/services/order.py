"""
Order Service for Kitchen Shop
==============================

This module turns a cart into a saved order, keeps the order status in step
with payment webhooks, and stores contact form enquiries.

Key Functions:
--------------
- generate_order_number: Human-readable order number (KOS-2025-123456)
- price_items: Re-price cart lines with the customer's country and VAT number
- build_order_summary: OrderSummary from a priced CartState
- create_order: Save Order + OrderItem rows in "pending" status
- attach_payment_order: Store the Revolut order id on a saved order
- apply_payment_event: Update status from a payment webhook
- reconcile_payment_status: Catch a pending order up with Revolut's order state
- save_contact_submission: Store a contact form enquiry

Order Lifecycle:
----------------
1. Customer builds a cart in their session (not persisted)
2. Checkout -> create_order (status: pending) -> payment order at Revolut
   (the session cart is dropped only once the payment order exists)
3. Webhook ORDER_AUTHORISED -> authorised
4. Webhook ORDER_COMPLETED -> paid (paid_at stamped)
5. Webhook ORDER_CANCELLED -> cancelled (cancelled_at stamped)
6. Webhook ORDER_PAYMENT_FAILED / ORDER_FAILED -> failed

Pricing:
--------
The browser's own summary is never trusted. Items are re-priced through a
fresh CartStore so orders use exactly the same tax and shipping rules as the
cart drawer.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from .. import email_service
from ..config import ORDER_NUMBER_PREFIX
from ..models import ContactSubmission, Order, OrderItem
from ..payments import PaymentNotConfiguredError, PaymentProviderError, get_payment_order
from ..schemas.cart import CartLineItem, CartState
from ..schemas.orders import (
    ContactSubmissionRequest,
    CustomerDetails,
    OrderCreateRequest,
    OrderSummary,
    PaymentWebhookEvent,
)
from .cart import CartStore
from .cart_sessions import peek_cart
from .vat import validate_vat_number


logger = logging.getLogger(__name__)


class OrderValidationError(ValueError):
    """Raised when an order or webhook request cannot be processed as sent."""


class OrderNotFoundError(LookupError):
    """Raised when a webhook references an order we don't have."""


# Revolut webhook event -> order status
PAYMENT_EVENT_STATUS: Dict[str, str] = {
    "ORDER_COMPLETED": "paid",
    "ORDER_AUTHORISED": "authorised",
    "ORDER_CANCELLED": "cancelled",
    "ORDER_PAYMENT_FAILED": "failed",
    "ORDER_FAILED": "failed",
}

# Revolut order state -> webhook event that reports it
PAYMENT_STATE_EVENT: Dict[str, str] = {
    "COMPLETED": "ORDER_COMPLETED",
    "AUTHORISED": "ORDER_AUTHORISED",
    "CANCELLED": "ORDER_CANCELLED",
    "FAILED": "ORDER_FAILED",
}


def generate_order_number(now: Optional[datetime] = None) -> str:
    """
    Build an order number from the current year and epoch milliseconds.

    Format: <prefix>-<year>-<last 6 digits of epoch ms>, e.g. KOS-2025-481516.
    """
    now = now or datetime.now(timezone.utc)
    epoch_ms = int(now.timestamp() * 1000)
    return f"{ORDER_NUMBER_PREFIX}-{now.year}-{str(epoch_ms)[-6:]}"


def price_items(
    items: Iterable[CartLineItem],
    country: Optional[str],
    vat_number: Optional[str] = None,
) -> CartState:
    """
    Price a list of cart lines for a destination.

    Lines that share a variant_id are merged and their quantities summed.
    """
    quantities: Dict[str, int] = {}
    first_seen: Dict[str, CartLineItem] = {}
    for item in items:
        if item.variant_id not in first_seen:
            first_seen[item.variant_id] = item
        quantities[item.variant_id] = quantities.get(item.variant_id, 0) + item.quantity

    store = CartStore()
    store.set_country(country)
    store.set_vat_number(vat_number)
    for variant_id, item in first_seen.items():
        store.add_item(item)
        store.update_quantity(variant_id, quantities[variant_id])
    return store.snapshot()


def build_order_summary(cart_state: CartState) -> OrderSummary:
    return OrderSummary(
        subtotal=cart_state.subtotal,
        shipping_cost=cart_state.shipping_cost,
        tax_rate=cart_state.tax_rate,
        tax_amount=cart_state.tax_amount,
        total=cart_state.total,
        currency=cart_state.currency,
        is_vat_exempt=cart_state.is_vat_exempt,
    )


def summary_from_order(order: Order) -> OrderSummary:
    """Rebuild the OrderSummary of a saved order."""
    return OrderSummary(
        subtotal=order.subtotal,
        shipping_cost=order.shipping_cost,
        tax_rate=order.tax_rate,
        tax_amount=order.tax,
        total=order.total,
        currency=order.currency,
        is_vat_exempt=order.is_vat_exempt,
    )


def _resolve_items(request: OrderCreateRequest) -> List[CartLineItem]:
    if request.items:
        return list(request.items)
    if request.session_id:
        cart = peek_cart(request.session_id)
        if cart is not None:
            return list(cart.snapshot().items)
    return []


def create_order(db: Session, request: OrderCreateRequest) -> Order:
    """
    Price and save a new order in "pending" status.

    Args:
        db: Database session
        request: Validated order creation request

    Returns:
        The saved Order with items loaded

    Raises:
        OrderValidationError: If there are no items or the VAT number is
            not in a valid format
    """
    customer: CustomerDetails = request.customer
    items = _resolve_items(request)
    if not items:
        raise OrderValidationError("Order must contain at least one item")

    if customer.vat_number:
        vat_result = validate_vat_number(customer.vat_number)
        if not vat_result.is_valid:
            raise OrderValidationError(vat_result.error)

    priced = price_items(items, customer.country, customer.vat_number)
    summary = build_order_summary(priced)

    if request.summary is not None and request.summary.total != summary.total:
        logger.warning(
            "Client order total %s differs from server total %s; using server total",
            request.summary.total,
            summary.total,
        )

    order = Order(
        order_number=generate_order_number(),
        status="pending",
        customer_email=customer.email,
        customer_name=customer.full_name,
        customer_phone=customer.phone,
        customer_company=customer.company,
        billing_address_line1=customer.address_line1,
        billing_address_line2=customer.address_line2,
        billing_city=customer.city,
        billing_county=customer.county,
        billing_postcode=customer.postcode,
        billing_country=customer.country,
        shipping_address_line1=customer.address_line1,
        shipping_address_line2=customer.address_line2,
        shipping_city=customer.city,
        shipping_county=customer.county,
        shipping_postcode=customer.postcode,
        shipping_country=customer.country,
        vat_number=customer.vat_number,
        vat_country=customer.country if customer.vat_number else None,
        subtotal=summary.subtotal,
        shipping_cost=summary.shipping_cost,
        tax_rate=summary.tax_rate,
        tax=summary.tax_amount,
        total=summary.total,
        currency=summary.currency,
        is_vat_exempt=summary.is_vat_exempt,
    )

    for item in priced.items:
        order.items.append(
            OrderItem(
                product_id=item.product_id,
                product_name=item.product_name,
                product_image=item.product_image or None,
                variant_id=item.variant_id,
                variant_name=item.variant_name,
                quantity=item.quantity,
                unit_price=item.price,
                line_total=item.line_total,
            )
        )

    db.add(order)
    db.commit()
    db.refresh(order)

    logger.info("Order created: %s (id=%s, total=%s)", order.order_number, order.id, order.total)

    return order


def attach_payment_order(db: Session, order: Order, revolut_order_id: str) -> Order:
    """Store the payment provider's order id on a saved order."""
    order.revolut_order_id = revolut_order_id
    db.commit()
    db.refresh(order)
    return order


def get_order_by_number(db: Session, order_number: str) -> Optional[Order]:
    return db.query(Order).filter(Order.order_number == order_number).first()


def apply_payment_event(db: Session, event: PaymentWebhookEvent) -> Order:
    """
    Update an order from a payment webhook event.

    Unknown events are logged and leave the order untouched. Repeated events
    for a status the order already has are ignored, so retried webhooks don't
    send duplicate emails.

    Raises:
        OrderValidationError: If the event has no merchant_order_ext_ref
        OrderNotFoundError: If no order has that number
    """
    order_number = event.merchant_order_ext_ref
    if not order_number:
        raise OrderValidationError("Missing order reference")

    order = get_order_by_number(db, order_number)
    if order is None:
        raise OrderNotFoundError(f"Order not found: {order_number}")

    new_status = PAYMENT_EVENT_STATUS.get(event.event)
    if new_status is None:
        logger.warning("Unhandled webhook event: %s", event.event)
        return order

    if order.status == new_status:
        logger.info("Order %s already %s, ignoring %s", order_number, new_status, event.event)
        return order

    now = datetime.now(timezone.utc)
    payment_type = event.payment_method.type if event.payment_method else None

    order.status = new_status
    if new_status in ("paid", "authorised"):
        order.payment_method = payment_type or "CARD"
    if new_status == "paid":
        order.paid_at = now
    elif new_status == "cancelled":
        order.cancelled_at = now

    db.commit()
    db.refresh(order)

    logger.info("Order %s -> %s (%s)", order_number, new_status, event.event)

    if new_status == "paid":
        email_service.send_payment_confirmation_email(order, payment_type)
    elif new_status == "cancelled":
        email_service.send_order_cancelled_email(order)
    elif new_status == "failed":
        email_service.send_payment_failed_email(order)

    return order


def reconcile_payment_status(
    db: Session,
    order: Order,
    lookup: Optional[Callable[[str], Dict[str, Any]]] = None,
) -> Order:
    """
    Bring a pending order up to date with the state of its Revolut order.

    The success page can load before the webhook arrives, and webhooks can be
    lost. The Revolut state is applied as if its webhook had been received.
    If the provider can't be asked, the stored status is returned unchanged.
    """
    if order.status != "pending" or not order.revolut_order_id:
        return order

    lookup = lookup or get_payment_order
    try:
        data = lookup(order.revolut_order_id)
    except (PaymentNotConfiguredError, PaymentProviderError) as e:
        logger.warning("Could not check payment state for %s: %s", order.order_number, e)
        return order

    event_name = PAYMENT_STATE_EVENT.get(str(data.get("state") or "").upper())
    if event_name is None:
        return order

    payment_method = None
    payments = data.get("payments") or []
    if payments and isinstance(payments[0], dict) and isinstance(payments[0].get("payment_method"), dict):
        payment_method = payments[0]["payment_method"]

    logger.info("Order %s reconciled from Revolut state %s", order.order_number, data.get("state"))
    event = PaymentWebhookEvent(
        event=event_name,
        order_id=order.revolut_order_id,
        merchant_order_ext_ref=order.order_number,
        payment_method=payment_method,
    )
    return apply_payment_event(db, event)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_leading_int(value: str) -> Optional[int]:
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_number_of_sites(sites: Optional[str]) -> Optional[int]:
    """
    Parse the "number of sites" dropdown value.

    "3" -> 3, "2-5" -> 2 (lower bound), "20+" -> 20, anything else -> None.
    """
    if not sites:
        return None
    if "-" in sites:
        return _parse_leading_int(sites.split("-")[0])
    if "+" in sites:
        return _parse_leading_int(sites.replace("+", ""))
    return _parse_leading_int(sites)


def save_contact_submission(db: Session, data: ContactSubmissionRequest) -> ContactSubmission:
    """Store a contact form enquiry and notify the sales inbox."""
    submission = ContactSubmission(
        name=data.name,
        email=data.email,
        phone=data.phone or None,
        company=data.company or None,
        number_of_sites=parse_number_of_sites(data.sites),
        product_interest=data.interest or None,
        message=data.message,
        status="new",
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)

    logger.info("Contact form submission saved (id=%s)", submission.id)

    email_service.send_contact_notification_email(submission)
    return submission
