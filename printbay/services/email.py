# printbay/services/email.py

import asyncio
import html
import logging
import re
from datetime import datetime, timezone
from typing import Optional, Tuple

import httpx

from printbay.config.settings import Settings
from printbay.core.exceptions import IntegrationError
from printbay.schemas.notifications import NotificationResult
from printbay.utils.hashing import now_ms

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")

TEMPLATED_KINDS = ("order_confirmation", "order_status_update", "shipping_notification")

_FRAME = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
    '<h2 style="color: #2563eb;">{title}</h2>{body}'
    '<hr style="margin: 20px 0;"><p style="color: #666;">The Printed Bay Team</p></div>'
)


def strip_tags(markup: str) -> str:
    return _TAG_RE.sub("", markup)


def render_email(kind: str, subject: str, message: str, order_id: Optional[str]) -> Tuple[str, str]:
    """
    (subject, html) for a notification. Caller text is escaped. Without an
    order id, or for a kind with no template, the caller's subject and
    message go out as given.
    """
    safe_msg = html.escape(message or "")
    if not order_id or kind not in TEMPLATED_KINDS:
        return subject, f"<p>{safe_msg}</p>" if safe_msg else ""

    oid = html.escape(order_id)
    if kind == "order_confirmation":
        body = (
            "<p>Thank you for your order!</p>"
            f"<p><strong>Order ID:</strong> {oid}</p>"
            "<p>We've received your 3D printing request and will begin processing it shortly.</p>"
            "<p>You'll receive updates as your order progresses through production.</p>"
        )
        return f"Order Confirmation - {order_id}", _FRAME.format(title="Order Confirmation", body=body)

    if kind == "shipping_notification":
        body = (
            f"<p>Great news! Your order {oid} has been shipped.</p>"
            + (f"<p>{safe_msg}</p>" if safe_msg else "")
            + "<p>You should receive it within the estimated delivery timeframe.</p>"
        )
        return f"Your Order Has Shipped - {order_id}", _FRAME.format(title="Your Order Has Shipped!", body=body)

    body = (
        f"<p>Your order {oid} has been updated.</p>"
        f"<p>{safe_msg or 'Please check your order status for the latest information.'}</p>"
    )
    return f"Order Update - {order_id}", _FRAME.format(title="Order Status Update", body=body)


class NotificationService:
    """Transactional email through SendGrid's v3 mail API."""

    name = "email"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = settings.sendgrid_api_key
        self._configured = settings.sendgrid_configured
        self._from_email = settings.sendgrid_from_email
        self._base_url = settings.sendgrid_base_url.rstrip("/")
        self._timeout = settings.vendor_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return self._configured

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return
            self._initialized = True
            if not self._configured:
                logger.warning("⚠️ SendGrid not configured, using mock email sending")
                return
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
                transport=self._transport,
            )
            logger.info("✅ SendGrid client ready")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
        self._client = None
        self._initialized = False

    async def send(
        self,
        to: str,
        subject: str = "",
        message: str = "",
        type: str = "order_status_update",
        order_id: Optional[str] = None,
    ) -> NotificationResult:
        if not self._configured:
            logger.warning("⚠️ SendGrid not configured, mock %s to %s", type, to)
            return NotificationResult(
                notification_id=f"notif_{now_ms()}",
                type=type,
                sent=True,
                to=to,
                subject=subject,
                timestamp=datetime.now(timezone.utc),
            )

        await self.initialize()
        email_subject, body_html = render_email(type, subject, message, order_id)
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self._from_email},
            "subject": email_subject,
            "content": [
                {"type": "text/plain", "value": strip_tags(body_html) or " "},
                {"type": "text/html", "value": body_html or " "},
            ],
        }
        try:
            resp = await self._client.post("/v3/mail/send", json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("❌ SendGrid rejected mail to %s: HTTP %s %s", to, e.response.status_code, e.response.text)
            raise IntegrationError(self.name, "email send failed", {"status": e.response.status_code}) from e
        except httpx.RequestError as e:
            logger.error("❌ SendGrid unreachable: %s", e)
            raise IntegrationError(self.name, "email send failed", {"error": str(e)}) from e

        logger.info("✅ Email sent successfully to %s", to)
        return NotificationResult(
            notification_id=f"notif_{now_ms()}",
            type=type,
            sent=True,
            to=to,
            subject=email_subject,
            message_id=resp.headers.get("x-message-id"),
            timestamp=datetime.now(timezone.utc),
        )
