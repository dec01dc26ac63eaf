"""
Order Routes for Kitchen Shop
=============================

Checkout and payment webhook endpoints.

Endpoints:
----------
- POST /orders: Save the order and create the Revolut payment order
- GET /orders/{order_number}: Order status for the success/failed pages
- POST /webhooks/revolut: Payment status updates from Revolut

Error Mapping:
--------------
- OrderValidationError -> 400
- OrderNotFoundError -> 404
- PaymentProviderError -> 502
- PaymentNotConfiguredError -> 503

The order is saved before the payment order is requested, so a payment
provider failure still leaves a "pending" order behind for follow-up. The
session cart is only dropped once the payment order exists, so the customer
can retry after a 502/503.

GET /orders/{order_number} asks Revolut for the state of a still-pending
order, so the success page is right even if the webhook is late.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..config import RATE_LIMIT_ENABLED, get_rate_limit_orders
from ..db import get_db
from ..email_service import send_order_confirmation_email
from ..payments import (
    PaymentNotConfiguredError,
    PaymentProviderError,
    create_payment_order,
)
from ..schemas.orders import (
    OrderCreateRequest,
    OrderCreateResponse,
    OrderOut,
    PaymentWebhookEvent,
    WebhookAck,
)
from ..services.cart_sessions import discard_cart
from ..services.order import (
    OrderNotFoundError,
    OrderValidationError,
    apply_payment_event,
    attach_payment_order,
    create_order,
    get_order_by_number,
    reconcile_payment_status,
    summary_from_order,
)

logger = logging.getLogger(__name__)

# Uses in-memory storage; multiple workers would need a shared storage_uri
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

orders_router = APIRouter(tags=["Orders"])


@orders_router.post("/orders", response_model=OrderCreateResponse)
@limiter.limit(get_rate_limit_orders)
def create_order_endpoint(
    request: Request,
    body: OrderCreateRequest,
    db: Session = Depends(get_db),
) -> OrderCreateResponse:
    """
    Create an order and its payment order.

    Returns the order number and the Revolut public token used to initialise
    the payment widget.
    """
    try:
        order = create_order(db, body)
    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    summary = summary_from_order(order)
    webhook_url = str(request.url_for("revolut_webhook"))

    try:
        payment_order = create_payment_order(
            order.order_number,
            summary,
            body.customer,
            webhook_url=webhook_url,
        )
    except PaymentNotConfiguredError:
        logger.error("Order %s saved but payments are not configured", order.order_number)
        raise HTTPException(
            status_code=503,
            detail="Payment provider not configured. Please contact support.",
        )
    except PaymentProviderError as e:
        logger.error("Payment order failed for %s: %s", order.order_number, e)
        raise HTTPException(status_code=502, detail=str(e))

    attach_payment_order(db, order, payment_order.id)
    if body.session_id:
        discard_cart(body.session_id)
    send_order_confirmation_email(order)

    return OrderCreateResponse(
        success=True,
        order_id=order.order_number,
        revolut_order_id=payment_order.id,
        revolut_order_token=payment_order.token,
        checkout_url=payment_order.checkout_url,
        summary=summary,
    )


@orders_router.get("/orders/{order_number}", response_model=OrderOut)
def get_order_endpoint(order_number: str, db: Session = Depends(get_db)) -> OrderOut:
    order = get_order_by_number(db, order_number)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    order = reconcile_payment_status(db, order)
    return OrderOut.model_validate(order)


@orders_router.post("/webhooks/revolut", response_model=WebhookAck, name="revolut_webhook")
def revolut_webhook(event: PaymentWebhookEvent, db: Session = Depends(get_db)) -> WebhookAck:
    """
    Handle a Revolut payment status webhook.

    Always answers 200 once the order is found so Revolut stops retrying,
    including for event types the shop doesn't act on.
    """
    logger.info("Received Revolut webhook: event=%s order_id=%s", event.event, event.order_id)

    try:
        order = apply_payment_event(db, event)
    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderNotFoundError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=404, detail="Order not found")

    return WebhookAck(received=True, status=order.status)
