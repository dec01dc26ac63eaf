"""
Revolut Merchant API client.

Creates payment orders for checkout and looks them up again. The public
token in the response initialises the payment widget in the browser.

Required headers on every call:
- Authorization: Bearer {REVOLUT_SECRET_KEY}
- Revolut-Api-Version: YYYY-MM-DD (REVOLUT_API_VERSION)

Amounts are sent in minor units (pence). API version 2024-09-01 returns the
widget token as 'token'; older versions return 'public_id', and both are
accepted.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import requests

from . import config
from .schemas.orders import CustomerDetails, OrderSummary

logger = logging.getLogger(__name__)


class PaymentNotConfiguredError(RuntimeError):
    """Raised when the Revolut API keys are not set."""


class PaymentProviderError(RuntimeError):
    """Raised when Revolut rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class PaymentOrder:
    """Payment order created at Revolut."""

    id: str
    token: str
    state: Optional[str] = None
    checkout_url: Optional[str] = None


def to_minor_units(amount: Any) -> int:
    """Convert a GBP amount to pence (half-up)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _address_payload(customer: CustomerDetails) -> Dict[str, str]:
    address = {
        "street_line_1": customer.address_line1,
        "city": customer.city,
        "postcode": customer.postcode,
        "country_code": customer.country,
    }
    if customer.address_line2:
        address["street_line_2"] = customer.address_line2
    if customer.county:
        address["region"] = customer.county
    return address


def build_payment_order_payload(
    order_number: str,
    summary: OrderSummary,
    customer: CustomerDetails,
    webhook_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the JSON body for POST /orders."""
    payload: Dict[str, Any] = {
        "amount": to_minor_units(summary.total),
        "currency": summary.currency,
        "capture_mode": "AUTOMATIC",
        "description": f"{config.SHOP_NAME} Order {order_number}",
        "merchant_order_ext_ref": order_number,
        "customer_email": customer.email,
        "customer_phone": customer.phone,
        "billing_address": _address_payload(customer),
        "shipping_address": _address_payload(customer),
    }
    if webhook_url:
        payload["webhook_url"] = webhook_url
    return payload


def _headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {config.REVOLUT_SECRET_KEY}",
        "Content-Type": "application/json",
        "Revolut-Api-Version": config.REVOLUT_API_VERSION,
    }


def _raise_for_response(response: requests.Response) -> None:
    if response.ok:
        return

    try:
        error_data = response.json()
    except ValueError:
        error_data = {"error": "Parse error", "message": response.text}
    if not isinstance(error_data, dict):
        error_data = {"error": "Unexpected body", "message": None, "body": error_data}

    logger.error(
        "Revolut API error: status=%s url=%s error=%s",
        response.status_code,
        response.url,
        error_data,
    )

    if response.status_code == 401:
        message = "API authentication failed. Check your secret key in the Revolut Business dashboard."
    else:
        message = error_data.get("message") or "Unknown error from payment provider"
    raise PaymentProviderError(message, status_code=response.status_code)


def _json_object(response: requests.Response) -> Dict[str, Any]:
    """Body of a successful response, which must be a JSON object."""
    try:
        data = response.json()
    except ValueError as e:
        logger.error("Revolut returned a non-JSON body: status=%s url=%s", response.status_code, response.url)
        raise PaymentProviderError("Invalid response from payment provider", status_code=response.status_code) from e
    if not isinstance(data, dict):
        logger.error("Revolut returned an unexpected body: %s", data)
        raise PaymentProviderError("Invalid response from payment provider", status_code=response.status_code)
    return data


def create_payment_order(
    order_number: str,
    summary: OrderSummary,
    customer: CustomerDetails,
    webhook_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> PaymentOrder:
    """
    Create a Revolut order for a saved shop order.

    Args:
        order_number: Our order number, sent as merchant_order_ext_ref
        summary: Server-priced order totals
        customer: Checkout customer details
        webhook_url: Optional URL Revolut should notify
        session: Optional requests session (tests inject a mock)

    Returns:
        PaymentOrder with the Revolut id and public widget token

    Raises:
        PaymentNotConfiguredError: If the API keys are missing
        PaymentProviderError: On transport errors, HTTP errors, or a response
            without a public token
    """
    if not config.is_payment_configured():
        raise PaymentNotConfiguredError("Payment provider not configured")

    http = session or requests
    url = f"{config.REVOLUT_API_URL}/orders"
    payload = build_payment_order_payload(order_number, summary, customer, webhook_url)

    try:
        response = http.post(url, json=payload, headers=_headers(), timeout=config.REVOLUT_TIMEOUT)
    except requests.RequestException as e:
        logger.error("Revolut request failed for order %s: %s", order_number, e)
        raise PaymentProviderError("Payment provider unreachable") from e

    _raise_for_response(response)

    data = _json_object(response)
    public_token = data.get("token") or data.get("public_id")
    if not public_token:
        logger.error("Revolut order created but no public token in response: %s", data)
        raise PaymentProviderError("Payment initialization failed - no public token received")

    logger.info("Revolut order created: id=%s state=%s", data.get("id"), data.get("state"))

    return PaymentOrder(
        id=data.get("id"),
        token=public_token,
        state=data.get("state"),
        checkout_url=data.get("checkout_url"),
    )


def get_payment_order(
    revolut_order_id: str,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """Retrieve a Revolut order by id (raw response JSON), e.g. to check its state."""
    if not config.REVOLUT_SECRET_KEY:
        raise PaymentNotConfiguredError("Payment provider not configured")

    http = session or requests
    url = f"{config.REVOLUT_API_URL}/orders/{revolut_order_id}"

    try:
        response = http.get(url, headers=_headers(), timeout=config.REVOLUT_TIMEOUT)
    except requests.RequestException as e:
        logger.error("Revolut lookup failed for %s: %s", revolut_order_id, e)
        raise PaymentProviderError("Payment provider unreachable") from e

    _raise_for_response(response)
    return _json_object(response)
