import pytest
import stripe
from fastapi.testclient import TestClient

from printbay.main import create_app
from printbay.services.payments import DEFAULT_AMOUNT_CENTS, PAYMENT_SOURCE

from conftest import MEMORY_DB


@pytest.fixture()
def stripe_client(make_settings):
    app = create_app(make_settings(DATABASE_URL=MEMORY_DB, STRIPE_SECRET_KEY="sk_test_4eC39HqLyjWDarjtT1zdp7dc"))
    with TestClient(app) as c:
        yield c


def test_mock_intent_when_unconfigured(mock_client):
    r = mock_client.post("/api/payments-create-intent", json={"orderId": "TPB-1"})
    assert r.status_code == 200
    body = r.json()
    assert body["paymentIntentId"].startswith("pi_mock_")
    assert body["clientSecret"] == body["paymentIntentId"] + "_secret"
    assert body["amount"] == DEFAULT_AMOUNT_CENTS
    assert body["currency"] == "usd"


def test_mock_payment_when_unconfigured(mock_client):
    r = mock_client.post("/api/payments-process", json={"orderId": "TPB-1"})
    assert r.status_code == 200
    body = r.json()
    assert body["paymentId"].startswith("pay_")
    assert body["status"] == "succeeded"
    assert body["amount"] == DEFAULT_AMOUNT_CENTS


def test_create_intent_calls_stripe(stripe_client, monkeypatch):
    seen = {}

    def fake_create(**kwargs):
        seen.update(kwargs)
        return {"id": "pi_123", "client_secret": "pi_123_secret_abc", "amount": kwargs["amount"], "currency": "usd"}

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    r = stripe_client.post("/api/payments-create-intent", json={"orderId": "TPB-9", "amount": 5000})
    assert r.status_code == 200
    assert r.json()["paymentIntentId"] == "pi_123"
    assert r.json()["clientSecret"] == "pi_123_secret_abc"
    assert seen["metadata"] == {"orderId": "TPB-9", "source": PAYMENT_SOURCE}
    assert seen["automatic_payment_methods"] == {"enabled": True}
    assert seen["api_key"].startswith("sk_test_")


def test_stripe_failure_is_500(stripe_client, monkeypatch):
    def boom(**kwargs):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.PaymentIntent, "create", boom)
    r = stripe_client.post("/api/payments-create-intent", json={"orderId": "TPB-9"})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body == {"success": False, "error": "Failed to create payment intent"}
    assert "card network down" not in r.text


def test_process_payment_confirms_order(stripe_client, monkeypatch):
    order_id = stripe_client.post("/api/orders-create", json={}).json()["orderId"]

    def fake_retrieve(intent_id, **kwargs):
        return {"id": intent_id, "amount": 2425, "currency": "usd", "status": "succeeded"}

    monkeypatch.setattr(stripe.PaymentIntent, "retrieve", fake_retrieve)
    r = stripe_client.post("/api/payments-process", json={"paymentIntentId": "pi_777", "orderId": order_id})
    assert r.status_code == 200
    body = r.json()
    assert body["stripePaymentIntentId"] == "pi_777"
    assert body["status"] == "succeeded"
    assert body["paymentId"].startswith("pay_")

    status = stripe_client.get(f"/api/orders-status/{order_id}").json()
    assert status["status"] == "payment_confirmed"


def test_incomplete_payment_leaves_order_alone(stripe_client, monkeypatch):
    order_id = stripe_client.post("/api/orders-create", json={}).json()["orderId"]
    monkeypatch.setattr(
        stripe.PaymentIntent,
        "retrieve",
        lambda intent_id, **kw: {"id": intent_id, "amount": 2425, "currency": "usd", "status": "requires_action"},
    )
    body = stripe_client.post("/api/payments-process", json={"paymentIntentId": "pi_8", "orderId": order_id}).json()
    assert body["status"] == "requires_action"
    assert stripe_client.get(f"/api/orders-status/{order_id}").json()["status"] == "pending_payment"


def test_process_payment_requires_intent_id(stripe_client):
    r = stripe_client.post("/api/payments-process", json={"orderId": "TPB-1"})
    assert r.status_code == 400
    assert r.json()["error"] == "paymentIntentId is required"
