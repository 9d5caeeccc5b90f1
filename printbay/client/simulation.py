# printbay/client/simulation.py

"""
Offline stand-in for every backend operation.

Used by ApiService when the API is unreachable. Pricing goes through the
same deterministic engine as the server, so a quote made offline matches
the one the API would have made; ids, geometry and order numbers are random.
"""

import asyncio
import logging
import os
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from printbay.core.exceptions import SimulationDisabledError
from printbay.schemas.analysis import Dimensions
from printbay.schemas.orders import OrderRecord, status_display
from printbay.services.orders import order_progress, tracking_steps
from printbay.services.pricing import calculate_quote, pricing_options
from printbay.utils.hashing import generate_id, now_ms

logger = logging.getLogger(__name__)

# Seconds, before SIMULATION_DELAY_SCALE
NETWORK_DELAYS = {
    "fileUpload": 1.5,
    "modelAnalysis": 3.0,
    "pricingCalculation": 0.8,
    "orderCreation": 1.2,
    "paymentProcessing": 2.0,
}


def _iso(dt: datetime) -> str:
    return dt.isoformat()


# ─── Generators ───────────────────────────────────────────────

def generate_warnings(complexity: float, rng: random.Random) -> List[str]:
    warnings = []
    if complexity > 3:
        warnings.append("High complexity model - longer print time expected")
    if rng.random() > 0.7:
        warnings.append("Thin walls detected - may require support")
    if rng.random() > 0.8:
        warnings.append("Overhangs detected - supports recommended")
    if rng.random() > 0.9:
        warnings.append("Model may require scaling for optimal print quality")
    return warnings


def generate_recommendations(complexity: float, rng: random.Random) -> List[str]:
    recs = []
    if complexity > 2:
        recs.append("Consider using higher quality settings for better detail")
    if rng.random() > 0.6:
        recs.append("PLA material recommended for this model")
    if rng.random() > 0.7:
        recs.append("0.2mm layer height optimal for this model")
    recs.append("Ensure proper bed adhesion for successful print")
    return recs


def generate_model_analysis(file_name: str, file_size: int, rng: random.Random) -> Dict[str, Any]:
    # File size in MB drives complexity, capped at 5
    complexity = min(file_size / 1_000_000, 5)
    ext = Path(file_name).suffix.lstrip(".").lower() or "unknown"

    if complexity > 3:
        label = "complex"
    elif complexity > 1.5:
        label = "moderate"
    else:
        label = "simple"

    return {
        "id": generate_id("sim", rng),
        "fileName": file_name,
        "fileSize": file_size,
        "format": ext,
        "vertices": int(10000 + complexity * 20000 + rng.random() * 15000),
        "faces": int(5000 + complexity * 10000 + rng.random() * 8000),
        "edges": int(15000 + complexity * 30000 + rng.random() * 12000),
        "volume": round(5 + complexity * 20 + rng.random() * 15, 2),
        "surfaceArea": round(50 + complexity * 200 + rng.random() * 100, 2),
        "dimensions": {
            "x": round(20 + rng.random() * 80, 1),
            "y": round(15 + rng.random() * 60, 1),
            "z": round(10 + rng.random() * 40, 1),
        },
        "complexity": label,
        "supportNeeded": rng.random() > 0.6,
        "overhangs": rng.randrange(15),
        "bridging": rng.randrange(8),
        "hollowPercentage": round(rng.random() * 30),
        "printable": rng.random() > 0.05,
        "warnings": generate_warnings(complexity, rng),
        "recommendations": generate_recommendations(complexity, rng),
        "processingTime": int(NETWORK_DELAYS["modelAnalysis"] * 1000),
        "timestamp": _iso(datetime.now(timezone.utc)),
    }


def generate_order(
    analysis: Dict[str, Any],
    pricing: Dict[str, Any],
    customer: Dict[str, Any],
    rng: random.Random,
) -> Dict[str, Any]:
    order_number = f"PB{str(now_ms())[-8:]}"
    now = datetime.now(timezone.utc)
    material = pricing.get("material") or {}
    delivery = pricing.get("delivery") or {}
    days = delivery.get("estimatedDays", 7)

    return {
        "id": generate_id("sim", rng),
        "orderNumber": order_number,
        "status": "pending_payment",
        "customer": {
            "email": customer.get("email"),
            "name": customer.get("name") or "Customer",
            "phone": customer.get("phone"),
        },
        "model": {
            "fileName": analysis.get("fileName"),
            "analysis": analysis,
            "specifications": {
                "material": material.get("name"),
                "color": material.get("color"),
                "quality": material.get("quality"),
            },
        },
        "pricing": pricing.get("breakdown"),
        "delivery": delivery,
        "timeline": {
            "ordered": _iso(now),
            "estimatedCompletion": _iso(now + timedelta(days=days)),
            "estimatedShipping": _iso(now + timedelta(days=days + 2)),
        },
        "paymentUrl": f"https://checkout.stripe.com/c/pay/sim_payment_{generate_id('sim', rng)}",
        "trackingUrl": f"https://theprintedbay.com/track#{order_number}",
        "timestamp": _iso(now),
    }


# ─── Service ──────────────────────────────────────────────────

class SimulationService:
    def __init__(
        self,
        delay_scale: float = 1.0,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.enabled = True
        self.delay_scale = delay_scale
        self.rng = rng or random.Random()
        self._sleep = sleep

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        logger.info("🎭 Simulation %s", "enabled" if enabled else "disabled")

    def get_status(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "environment": os.getenv("ENV", "development"),
            "delays": {k: v * self.delay_scale for k, v in NETWORK_DELAYS.items()},
        }

    async def _enter(self, operation: str, delay_key: Optional[str] = None) -> None:
        if not self.enabled:
            raise SimulationDisabledError(f"Simulation disabled: {operation} needs the real API")
        if delay_key:
            await self._sleep(NETWORK_DELAYS[delay_key] * self.delay_scale)

    async def upload_file(self, file_name: str, file_size: int, content_type: str = "") -> Dict[str, Any]:
        await self._enter("file upload", "fileUpload")
        file_id = generate_id("sim", self.rng)
        return {
            "success": True,
            "fileId": file_id,
            "uploadUrl": f"https://api.theprintedbay.com/files/{file_id}",
            "fileName": file_name,
            "fileSize": file_size,
            "fileType": content_type,
            "simulated": True,
        }

    async def analyze_model(self, file_name: str, file_size: int) -> Dict[str, Any]:
        await self._enter("model analysis", "modelAnalysis")
        return generate_model_analysis(file_name, file_size, self.rng)

    async def calculate_pricing(
        self,
        analysis: Optional[Dict[str, Any]],
        material: str,
        quality: str,
        color: str,
    ) -> Dict[str, Any]:
        await self._enter("pricing", "pricingCalculation")
        analysis = analysis or {}
        dims = analysis.get("dimensions")
        quote = calculate_quote(
            volume=analysis.get("volume"),
            material=material,
            quality=quality,
            color=color,
            dimensions=Dimensions(**dims) if dims else None,
            support_needed=bool(analysis.get("supportNeeded")),
        )
        return {**quote.to_json(), "simulated": True}

    async def create_order(
        self,
        analysis: Dict[str, Any],
        pricing: Dict[str, Any],
        customer: Dict[str, Any],
    ) -> Dict[str, Any]:
        await self._enter("order creation", "orderCreation")
        return generate_order(analysis, pricing, customer, self.rng)

    async def create_payment_intent(
        self, order_id: Optional[str], amount: Optional[int], currency: str = "usd"
    ) -> Dict[str, Any]:
        await self._enter("payment intent")
        pi = f"pi_sim_{generate_id('sim', self.rng)}"
        return {
            "clientSecret": f"{pi}_secret",
            "paymentIntentId": pi,
            "amount": amount or 2425,
            "currency": currency,
            "orderId": order_id,
            "simulated": True,
        }

    async def process_payment(self, order_id: str, amount: Optional[int] = None) -> Dict[str, Any]:
        await self._enter("payment processing", "paymentProcessing")
        return {
            "id": generate_id("sim", self.rng),
            "orderId": order_id,
            "status": "succeeded",
            "paymentIntentId": f"pi_sim_{generate_id('sim', self.rng)}",
            "amount": amount,
            "currency": "usd",
            "receiptUrl": f"https://pay.stripe.com/receipts/sim_{generate_id('sim', self.rng)}",
            "timestamp": _iso(datetime.now(timezone.utc)),
        }

    async def track_order(self, order_id: str) -> Dict[str, Any]:
        await self._enter("order tracking")
        now = datetime.now(timezone.utc)
        order = OrderRecord(order_id=order_id, status="in_production", created=now - timedelta(hours=1))
        return {
            **order.to_json(),
            "statusDisplay": status_display(order.status),
            "progress": order_progress(order.status),
            "estimatedCompletion": _iso(now + timedelta(days=7)),
            "trackingSteps": [s.to_json() for s in tracking_steps(order, now)],
            "simulated": True,
        }

    async def pricing_options(self) -> Dict[str, Any]:
        await self._enter("pricing options")
        return pricing_options().to_json()

    async def send_notification(self, to: str, subject: str, type: str = "order_status_update") -> Dict[str, Any]:
        await self._enter("notification")
        return {
            "notificationId": f"notif_{now_ms()}",
            "type": type,
            "sent": True,
            "to": to,
            "subject": subject,
            "timestamp": _iso(datetime.now(timezone.utc)),
            "simulated": True,
        }
