import json

import httpx
import pytest

from printbay.core.exceptions import IntegrationError
from printbay.services.email import NotificationService, render_email, strip_tags


def sendgrid(make_settings, handler):
    return NotificationService(
        make_settings(SENDGRID_API_KEY="SG.test-key"),
        transport=httpx.MockTransport(handler),
    )


def test_order_confirmation_template():
    subject, body = render_email("order_confirmation", "ignored", "", "TPB-42")
    assert subject == "Order Confirmation - TPB-42"
    assert "<strong>Order ID:</strong> TPB-42" in body
    assert "The Printed Bay Team" in body


def test_caller_text_is_escaped():
    _, body = render_email("shipping_notification", "", "<script>alert(1)</script>", "TPB-<b>")
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "TPB-&lt;b&gt;" in body


def test_no_order_id_passes_subject_through():
    subject, body = render_email("order_status_update", "Hello", "Your print is ready", None)
    assert subject == "Hello"
    assert body == "<p>Your print is ready</p>"
    assert strip_tags(body) == "Your print is ready"


def test_mock_send(mock_client):
    r = mock_client.post(
        "/api/notifications-send",
        json={"to": "maker@example.com", "subject": "Hi", "type": "order_confirmation", "orderId": "TPB-1"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["sent"] is True
    assert body["notificationId"].startswith("notif_")
    assert body["type"] == "order_confirmation"


def test_untemplated_type_is_accepted(mock_client):
    r = mock_client.post(
        "/api/notifications-send",
        json={"to": "maker@example.com", "subject": "Spring sale", "type": "promo"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["type"] == "promo"
    assert body["subject"] == "Spring sale"


def test_untemplated_type_sends_caller_text():
    subject, body = render_email("promo", "Spring sale", "20% off <resin>", "TPB-1")
    assert subject == "Spring sale"
    assert body == "<p>20% off &lt;resin&gt;</p>"


@pytest.mark.asyncio
async def test_sendgrid_payload_and_message_id(make_settings):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["authorization"]
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(202, headers={"X-Message-Id": "msg-123"})

    svc = sendgrid(make_settings, handler)
    result = await svc.send("maker@example.com", "x", "Out the door", "shipping_notification", "TPB-7")
    await svc.close()

    assert captured["auth"] == "Bearer SG.test-key"
    assert captured["path"] == "/v3/mail/send"
    body = captured["body"]
    assert body["personalizations"] == [{"to": [{"email": "maker@example.com"}]}]
    assert body["from"] == {"email": "noreply@theprintedbay.com"}
    assert body["subject"] == "Your Order Has Shipped - TPB-7"
    assert [c["type"] for c in body["content"]] == ["text/plain", "text/html"]
    assert "<" not in body["content"][0]["value"]

    assert result.message_id == "msg-123"
    assert result.subject == "Your Order Has Shipped - TPB-7"


@pytest.mark.asyncio
async def test_sendgrid_rejection_raises(make_settings):
    svc = sendgrid(make_settings, lambda request: httpx.Response(401, json={"errors": [{"message": "bad key"}]}))
    with pytest.raises(IntegrationError) as exc:
        await svc.send("maker@example.com", "Hi", "Body")
    await svc.close()
    assert exc.value.details == {"status": 401}


@pytest.mark.asyncio
async def test_untemplated_type_through_sendgrid(make_settings):
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(202)

    svc = sendgrid(make_settings, handler)
    result = await svc.send("maker@example.com", "Spring sale", "New colors in stock", "promo", "TPB-3")
    await svc.close()
    assert captured["body"]["subject"] == "Spring sale"
    assert captured["body"]["content"][0]["value"] == "New colors in stock"
    assert result.type == "promo"
