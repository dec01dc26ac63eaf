from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from kitchen_shop.models import Order
from kitchen_shop.payments import PaymentOrder, PaymentProviderError
from kitchen_shop.services.cart_sessions import peek_cart

from conftest import make_customer, make_item


@pytest.fixture
def fake_payments(monkeypatch):
    """Stand in for the Revolut API; records what the route asked for."""
    calls = []

    def fake_create_payment_order(order_number, summary, customer, webhook_url=None, session=None):
        calls.append({
            "order_number": order_number,
            "summary": summary,
            "customer": customer,
            "webhook_url": webhook_url,
        })
        return PaymentOrder(
            id="rev-order-1",
            token="tok-abc",
            state="PENDING",
            checkout_url="https://checkout.revolut.test/tok-abc",
        )

    monkeypatch.setattr("kitchen_shop.routes.orders.create_payment_order", fake_create_payment_order)
    return calls


@pytest.fixture
def mock_emails(monkeypatch):
    confirmation = MagicMock()
    service_emails = MagicMock()
    monkeypatch.setattr("kitchen_shop.routes.orders.send_order_confirmation_email", confirmation)
    monkeypatch.setattr("kitchen_shop.services.order.email_service", service_emails)
    return confirmation, service_emails


def order_payload(**customer_overrides):
    return {
        "customer": make_customer(**customer_overrides),
        "items": [dict(make_item(price="45.00"), quantity=1)],
    }


def test_create_order_returns_payment_token(client, fake_payments, mock_emails):
    resp = client.post("/orders", json=order_payload())
    assert resp.status_code == 200
    data = resp.json()

    assert data["success"] is True
    assert data["order_id"].startswith("KOS-")
    assert data["revolut_order_id"] == "rev-order-1"
    assert data["revolut_order_token"] == "tok-abc"
    assert Decimal(data["summary"]["total"]) == Decimal("61.19")
    assert Decimal(data["summary"]["shipping_cost"]) == Decimal("5.99")

    call = fake_payments[0]
    assert call["order_number"] == data["order_id"]
    assert call["summary"].total == Decimal("61.19")
    assert call["webhook_url"].endswith("/webhooks/revolut")

    confirmation, _ = mock_emails
    confirmation.assert_called_once()


def test_create_order_saves_pending_order(client, fake_payments, mock_emails):
    data = client.post("/orders", json=order_payload()).json()

    db = client.session_factory()
    try:
        order = db.query(Order).filter(Order.order_number == data["order_id"]).one()
        assert order.status == "pending"
        assert order.revolut_order_id == "rev-order-1"
        assert order.total == Decimal("61.19")
        assert len(order.items) == 1
    finally:
        db.close()


def test_create_order_ignores_client_totals(client, fake_payments, mock_emails):
    payload = order_payload()
    payload["summary"] = {
        "subtotal": "1.00",
        "shipping_cost": "0.00",
        "tax_rate": "0",
        "tax_amount": "0.00",
        "total": "1.00",
    }
    data = client.post("/orders", json=payload).json()
    assert Decimal(data["summary"]["total"]) == Decimal("61.19")


def test_create_order_from_session_cart(client, fake_payments, mock_emails):
    client.post("/cart/checkout-session/items", json=make_item(price="25.00"))
    client.post("/cart/checkout-session/items", json=make_item(price="25.00"))

    resp = client.post("/orders", json={
        "customer": make_customer(),
        "session_id": "checkout-session",
    })
    assert resp.status_code == 200
    assert Decimal(resp.json()["summary"]["total"]) == Decimal("60.00")

    assert client.get("/cart/checkout-session").json()["items"] == []


def test_create_order_with_no_items(client, fake_payments, mock_emails):
    resp = client.post("/orders", json={"customer": make_customer(), "items": []})
    assert resp.status_code == 400
    assert "at least one item" in resp.json()["detail"]
    assert fake_payments == []


def test_create_order_invalid_email(client, fake_payments):
    resp = client.post("/orders", json=order_payload(email="not-an-email"))
    assert resp.status_code == 422


def test_create_order_invalid_phone(client, fake_payments):
    resp = client.post("/orders", json=order_payload(phone="12"))
    assert resp.status_code == 422


def test_create_order_invalid_vat_number(client, fake_payments, mock_emails):
    resp = client.post("/orders", json=order_payload(vat_number="GB12345"))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid GB VAT number format"


def test_create_order_payments_not_configured(client, mock_emails):
    resp = client.post("/orders", json=order_payload())
    assert resp.status_code == 503
    assert "not configured" in resp.json()["detail"]

    db = client.session_factory()
    try:
        assert db.query(Order).filter(Order.status == "pending").count() == 1
    finally:
        db.close()


def test_create_order_payment_provider_error(client, monkeypatch, mock_emails):
    def failing_create(*args, **kwargs):
        raise PaymentProviderError("Invalid amount", status_code=422)

    monkeypatch.setattr("kitchen_shop.routes.orders.create_payment_order", failing_create)

    resp = client.post("/orders", json=order_payload())
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Invalid amount"


def test_cart_survives_payment_provider_error(client, monkeypatch, mock_emails):
    def failing_create(*args, **kwargs):
        raise PaymentProviderError("Payment provider unreachable")

    monkeypatch.setattr("kitchen_shop.routes.orders.create_payment_order", failing_create)
    client.post("/cart/retry-session/items", json=make_item(price="45.00"))

    resp = client.post("/orders", json={"customer": make_customer(), "session_id": "retry-session"})
    assert resp.status_code == 502

    cart = peek_cart("retry-session")
    assert cart is not None
    assert cart.snapshot().item_count == 1


def test_cart_survives_missing_payment_config_and_retry_succeeds(client, monkeypatch, mock_emails):
    numbers = iter(["KOS-2025-000101", "KOS-2025-000102"])
    monkeypatch.setattr("kitchen_shop.services.order.generate_order_number", lambda: next(numbers))
    client.post("/cart/retry-session/items", json=make_item(price="45.00"))

    resp = client.post("/orders", json={"customer": make_customer(), "session_id": "retry-session"})
    assert resp.status_code == 503
    assert peek_cart("retry-session") is not None

    monkeypatch.setattr(
        "kitchen_shop.routes.orders.create_payment_order",
        lambda *args, **kwargs: PaymentOrder(id="rev-order-9", token="tok-retry"),
    )
    resp = client.post("/orders", json={"customer": make_customer(), "session_id": "retry-session"})
    assert resp.status_code == 200
    assert Decimal(resp.json()["summary"]["total"]) == Decimal("61.19")
    assert peek_cart("retry-session") is None


def test_get_order(client, fake_payments, mock_emails):
    order_number = client.post("/orders", json=order_payload()).json()["order_id"]

    resp = client.get(f"/orders/{order_number}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["order_number"] == order_number
    assert data["status"] == "pending"
    assert data["items"][0]["variant_id"] == "fls-500"
    assert Decimal(data["tax"]) == Decimal("10.20")


def test_get_order_picks_up_missed_payment(client, monkeypatch, fake_payments, mock_emails):
    order_number = client.post("/orders", json=order_payload()).json()["order_id"]
    monkeypatch.setattr(
        "kitchen_shop.services.order.get_payment_order",
        lambda revolut_order_id: {"id": revolut_order_id, "state": "COMPLETED"},
    )

    data = client.get(f"/orders/{order_number}").json()
    assert data["status"] == "paid"
    assert data["payment_method"] == "CARD"

    _, service_emails = mock_emails
    service_emails.send_payment_confirmation_email.assert_called_once()


def test_get_unknown_order(client):
    resp = client.get("/orders/KOS-2025-000000")
    assert resp.status_code == 404


def test_webhook_marks_order_paid(client, fake_payments, mock_emails):
    order_number = client.post("/orders", json=order_payload()).json()["order_id"]

    resp = client.post("/webhooks/revolut", json={
        "event": "ORDER_COMPLETED",
        "order_id": "rev-order-1",
        "merchant_order_ext_ref": order_number,
        "payment_method": {"type": "CARD", "card_brand": "VISA"},
    })
    assert resp.status_code == 200
    assert resp.json() == {"received": True, "status": "paid"}

    data = client.get(f"/orders/{order_number}").json()
    assert data["status"] == "paid"
    assert data["paid_at"] is not None
    assert data["payment_method"] == "CARD"

    _, service_emails = mock_emails
    service_emails.send_payment_confirmation_email.assert_called_once()


def test_webhook_unhandled_event_is_acknowledged(client, fake_payments, mock_emails):
    order_number = client.post("/orders", json=order_payload()).json()["order_id"]

    resp = client.post("/webhooks/revolut", json={
        "event": "ORDER_SOMETHING_NEW",
        "merchant_order_ext_ref": order_number,
    })
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"


def test_webhook_missing_reference(client):
    resp = client.post("/webhooks/revolut", json={"event": "ORDER_COMPLETED"})
    assert resp.status_code == 400


def test_webhook_unknown_order(client):
    resp = client.post("/webhooks/revolut", json={
        "event": "ORDER_COMPLETED",
        "merchant_order_ext_ref": "KOS-2025-000000",
    })
    assert resp.status_code == 404


def test_order_rate_limit_returns_429_when_exceeded(client, monkeypatch, fake_payments, mock_emails):
    """Test that rate limiting returns 429 when limit is exceeded."""
    import kitchen_shop.config as config_mod
    from kitchen_shop.routes import limiter

    monkeypatch.setattr(config_mod, "RATE_LIMIT_ORDERS", "1 per minute")

    original_enabled = limiter.enabled
    limiter.enabled = True
    limiter.reset()

    try:
        resp1 = client.post("/orders", json={"customer": make_customer(), "items": []})
        assert resp1.status_code == 400

        resp2 = client.post("/orders", json={"customer": make_customer(), "items": []})
        assert resp2.status_code == 429
    finally:
        limiter.enabled = original_enabled
        limiter.reset()
