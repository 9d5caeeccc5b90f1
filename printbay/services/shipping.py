# printbay/services/shipping.py

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from printbay.config.settings import Settings
from printbay.core.exceptions import IntegrationError
from printbay.schemas.shipping import (
    Address,
    LabelResult,
    ServiceLevel,
    ShippingItem,
    ShippingRate,
    TrackingEvent,
    TrackingInfo,
)
from printbay.utils.hashing import now_ms

logger = logging.getLogger(__name__)

# Parcel defaults, inches
DEFAULT_LENGTH = 6
DEFAULT_WIDTH = 4
DEFAULT_HEIGHT = 3
MIN_WEIGHT_OZ = 1
DEFAULT_ESTIMATED_DAYS = 7

USPS_IMAGE_75 = "https://shippo-static.s3.amazonaws.com/providers/75/USPS.png"
USPS_IMAGE_200 = "https://shippo-static.s3.amazonaws.com/providers/200/USPS.png"


def _num(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def build_parcel(items: List[ShippingItem]) -> Dict[str, str]:
    """Largest item dimensions, summed weight (never under 1 oz)."""
    weight = sum(i.weight * i.quantity for i in items)
    return {
        "length": _num(max([i.length or DEFAULT_LENGTH for i in items] or [DEFAULT_LENGTH])),
        "width": _num(max([i.width or DEFAULT_WIDTH for i in items] or [DEFAULT_WIDTH])),
        "height": _num(max([i.height or DEFAULT_HEIGHT for i in items] or [DEFAULT_HEIGHT])),
        "distance_unit": "in",
        "weight": _num(max(weight, MIN_WEIGHT_OZ)),
        "mass_unit": "oz",
    }


def insured_value(items: List[ShippingItem]) -> float:
    return sum(i.value * i.quantity for i in items)


def mock_rates() -> List[ShippingRate]:
    def _rate(rate_id, name, token, amount, days):
        return ShippingRate(
            rate_id=rate_id,
            servicelevel=ServiceLevel(name=name, token=token),
            amount=amount,
            currency="USD",
            estimated_days=days,
            provider="USPS",
            provider_image_75=USPS_IMAGE_75,
            provider_image_200=USPS_IMAGE_200,
        )

    return [
        _rate("mock_ground", "Ground", "GROUND", "8.99", 5),
        _rate("mock_priority", "Priority Mail", "PRIORITY", "14.99", 3),
        _rate("mock_express", "Priority Express", "EXPRESS", "24.99", 1),
    ]


class ShippingService:
    """Shippo rates, label purchase and tracking over its REST API."""

    name = "shipping"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = settings.shippo_api_key
        self._configured = settings.shippo_configured
        self._base_url = settings.shippo_base_url.rstrip("/")
        self._timeout = settings.vendor_timeout_seconds
        self._from_address = settings.ship_from_address
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
                logger.warning("⚠️ Shippo not configured, using mock shipping data")
                return
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Authorization": f"ShippoToken {self._api_key}"},
                timeout=self._timeout,
                transport=self._transport,
            )
            logger.info("✅ Shippo client ready")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
        self._client = None
        self._initialized = False

    async def _request(self, method: str, path: str, action: str, **kwargs) -> Dict[str, Any]:
        await self.initialize()
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("❌ Shippo %s failed: HTTP %s %s", action, e.response.status_code, e.response.text)
            raise IntegrationError(self.name, f"{action} failed", {"status": e.response.status_code}) from e
        except (httpx.RequestError, ValueError) as e:
            logger.error("❌ Shippo %s failed: %s", action, e)
            raise IntegrationError(self.name, f"{action} failed", {"error": str(e)}) from e

    # ─── Rates ────────────────────────────────────────────────

    async def get_rates(self, to_address: Address, items: List[ShippingItem]) -> List[ShippingRate]:
        if not self._configured:
            logger.warning("⚠️ Shippo not configured, returning mock shipping rates")
            return mock_rates()

        payload = {
            "address_from": self._from_address,
            "address_to": to_address.model_dump(exclude_none=True),
            "parcels": [build_parcel(items)],
            "extra": {"insurance": {"amount": _num(insured_value(items)), "currency": "USD"}},
            "async": False,
        }
        shipment = await self._request("POST", "/shipments/", "rate lookup", json=payload)
        rates = [
            ShippingRate(
                rate_id=r["object_id"],
                servicelevel=ServiceLevel(
                    name=(r.get("servicelevel") or {}).get("name", ""),
                    token=(r.get("servicelevel") or {}).get("token", ""),
                ),
                amount=str(r.get("amount", "")),
                currency=r.get("currency", "USD"),
                estimated_days=r.get("estimated_days") or DEFAULT_ESTIMATED_DAYS,
                provider=r.get("provider", ""),
                provider_image_75=r.get("provider_image_75"),
                provider_image_200=r.get("provider_image_200"),
            )
            for r in shipment.get("rates", [])
        ]
        logger.info("✅ Retrieved %d shipping rates from Shippo", len(rates))
        return rates

    # ─── Labels ───────────────────────────────────────────────

    async def create_label(self, rate_id: str, order_id: str) -> LabelResult:
        if not self._configured:
            logger.warning("⚠️ Shippo not configured, returning mock shipping label")
            return LabelResult(
                label_url=f"https://mock-label.theprintedbay.com/{order_id}.pdf",
                tracking_number=f"TPB{now_ms()}",
                tracking_url=f"https://mock-tracking.theprintedbay.com/{order_id}",
                cost="8.99",
                currency="USD",
            )

        payload = {
            "rate": rate_id,
            "label_file_type": "PDF",
            "metadata": f"Order: {order_id}",
            "async": False,
        }
        tx = await self._request("POST", "/transactions/", "label purchase", json=payload)
        if tx.get("status") != "SUCCESS":
            messages = [m.get("text", "") for m in tx.get("messages") or []]
            logger.error("❌ Shippo transaction for order %s: %s %s", order_id, tx.get("status"), messages)
            raise IntegrationError(
                self.name,
                f"Transaction failed with status: {tx.get('status')}",
                {"messages": messages},
            )

        rate = tx.get("rate")
        if isinstance(rate, str):
            rate = await self._request("GET", f"/rates/{rate}", "rate lookup")
        rate = rate or {}

        logger.info("✅ Shipping label created for order %s", order_id)
        return LabelResult(
            label_url=tx.get("label_url"),
            tracking_number=tx.get("tracking_number"),
            tracking_url=tx.get("tracking_url_provider"),
            cost=str(rate.get("amount", "0")),
            currency=rate.get("currency", "USD"),
            transaction_id=tx.get("object_id"),
        )

    # ─── Tracking ─────────────────────────────────────────────

    async def get_tracking_info(self, tracking_number: str, carrier: str = "usps") -> TrackingInfo:
        if not self._configured:
            logger.warning("⚠️ Shippo not configured, returning mock tracking info")
            now = datetime.now(timezone.utc)
            return TrackingInfo(
                tracking_number=tracking_number,
                status="TRANSIT",
                status_date=now.isoformat(),
                status_details="Package is in transit",
                eta=(now + timedelta(days=3)).isoformat(),
                tracking_history=[
                    TrackingEvent(
                        status="PRE_TRANSIT",
                        status_date=(now - timedelta(days=1)).isoformat(),
                        status_details="Label created",
                        location="Austin, TX",
                    ),
                    TrackingEvent(
                        status="TRANSIT",
                        status_date=now.isoformat(),
                        status_details="Package picked up and in transit",
                        location="Austin, TX",
                    ),
                ],
            )

        track = await self._request("GET", f"/tracks/{carrier}/{tracking_number}", "tracking lookup")
        current = track.get("tracking_status") or {}
        return TrackingInfo(
            tracking_number=track.get("tracking_number") or tracking_number,
            status=current.get("status") or "UNKNOWN",
            status_date=current.get("status_date"),
            status_details=current.get("status_details"),
            eta=track.get("eta"),
            tracking_history=[
                TrackingEvent(
                    status=event.get("status") or "UNKNOWN",
                    status_date=event.get("status_date"),
                    status_details=event.get("status_details"),
                    location=_location(event.get("location")),
                )
                for event in track.get("tracking_history") or []
            ],
        )


def _location(loc: Optional[Dict[str, Any]]) -> Optional[str]:
    """`City, ST`; Shippo sends null for parts it does not know."""
    if not loc:
        return None
    parts = [p for p in (loc.get("city"), loc.get("state")) if p]
    return ", ".join(parts) or None
