# printbay/client/api_service.py

import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from printbay.client.file_cache import FileCache
from printbay.client.geometry import MeshLoadError, measure_mesh
from printbay.client.simulation import SimulationService
from printbay.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class ApiService:
    """
    Storefront client: real API first, local simulation when the call fails
    (network error, non-2xx, or a body that is not JSON) and fallback is on.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[FileCache] = None,
        simulation: Optional[SimulationService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.base_url = settings.api_base_url.rstrip("/")
        self.use_simulation_fallback = settings.simulation_fallback
        self.cache = cache or FileCache(settings=settings)
        self.simulation = simulation or SimulationService(delay_scale=settings.simulation_delay_scale)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.vendor_timeout_seconds,
            transport=transport,
        )
        logger.info("🚀 API Service initialized: %s (fallback=%s)", self.base_url, self.use_simulation_fallback)

    async def start(self) -> int:
        """Open the file cache and sweep stale entries once."""
        await self.cache.init()
        removed = await self.cache.cleanup_old_files()
        if removed:
            logger.info("🧹 Cleaned up %d old cached files", removed)
        return removed

    async def close(self) -> None:
        await self._client.aclose()
        await self.cache.close()

    async def __aenter__(self) -> "ApiService":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def set_simulation_fallback(self, enabled: bool) -> None:
        self.use_simulation_fallback = enabled

    def get_status(self) -> Dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "simulationFallback": self.use_simulation_fallback,
            "simulation": self.simulation.get_status(),
        }

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        fallback: Callable[[], Awaitable[Dict[str, Any]]],
        **kwargs: Any,
    ) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            if not self.use_simulation_fallback:
                logger.error("❌ %s failed and simulation fallback is disabled: %s", operation, e)
                raise
            logger.warning("🔄 %s failed (%s), falling back to simulation", operation, e)
            return await fallback()

        logger.info("✅ %s ok (%.0f ms)", operation, (time.perf_counter() - start) * 1000)
        return data

    # ─── Files ────────────────────────────────────────────────

    async def upload_file(self, file_name: str, data: bytes, content_type: str = "") -> Dict[str, Any]:
        """Cache the bytes locally, then upload. The result carries `cacheId`."""
        cache_id = await self.cache.store_file(file_name, data, content_type)
        result = await self._request(
            "FileUpload",
            "POST",
            "/files-upload",
            lambda: self.simulation.upload_file(file_name, len(data), content_type),
            files={"file": (file_name, data, content_type or "application/octet-stream")},
        )
        return {**result, "cacheId": cache_id}

    async def measure_cached_file(self, cache_id: str) -> Optional[Dict[str, Any]]:
        """Real geometry for a cached upload; None when missing or unparseable."""
        cached = await self.cache.get_file(cache_id)
        if cached is None:
            return None
        try:
            return measure_mesh(cached.data, cached.name).to_json()
        except MeshLoadError as e:
            logger.warning("⚠️ %s", e)
            return None

    # ─── Analysis / pricing ───────────────────────────────────

    async def analyze_model(
        self,
        file_name: str,
        file_size: int,
        file_type: str = "",
        analysis_level: str = "detailed",
    ) -> Dict[str, Any]:
        body = {
            "fileName": file_name,
            "fileSize": file_size,
            "fileType": file_type.lower(),
            "analysisLevel": analysis_level,
        }
        return await self._request(
            "ModelAnalysis",
            "POST",
            "/models-analyze",
            lambda: self.simulation.analyze_model(file_name, file_size),
            json=body,
        )

    async def calculate_pricing(
        self,
        material: str,
        quality: str,
        color: str,
        analysis: Optional[Dict[str, Any]] = None,
        delivery_option: str = "standard",
    ) -> Dict[str, Any]:
        analysis = analysis or {}
        body = {
            "volume": analysis.get("volume"),
            "dimensions": analysis.get("dimensions"),
            "supportNeeded": bool(analysis.get("supportNeeded")),
            "modelAnalysisId": analysis.get("id") or analysis.get("analysisId"),
            "material": material,
            "quality": quality,
            "color": color,
            "deliveryOption": delivery_option,
        }
        return await self._request(
            "PricingCalculation",
            "POST",
            "/pricing-calculate",
            lambda: self.simulation.calculate_pricing(analysis, material, quality, color),
            json=body,
        )

    async def get_pricing_options(self) -> Dict[str, Any]:
        return await self._request(
            "GetPricingOptions", "GET", "/pricing-calculate", self.simulation.pricing_options
        )

    # ─── Orders / payments ────────────────────────────────────

    async def create_order(
        self,
        analysis: Dict[str, Any],
        pricing: Dict[str, Any],
        customer: Dict[str, Any],
        file_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {
            "customerEmail": customer.get("email"),
            "customerName": customer.get("name"),
            "customerPhone": customer.get("phone"),
            "total": (pricing.get("breakdown") or {}).get("total"),
            "currency": pricing.get("currency", "USD"),
            "fileUrl": file_url,
            "fileName": analysis.get("fileName"),
        }
        return await self._request(
            "OrderCreation",
            "POST",
            "/orders-create",
            lambda: self.simulation.create_order(analysis, pricing, customer),
            json=body,
        )

    async def create_payment_intent(
        self, order_id: Optional[str], amount: Optional[int] = None, currency: str = "usd"
    ) -> Dict[str, Any]:
        return await self._request(
            "CreatePaymentIntent",
            "POST",
            "/payments-create-intent",
            lambda: self.simulation.create_payment_intent(order_id, amount, currency),
            json={"orderId": order_id, "amount": amount, "currency": currency},
        )

    async def process_payment(
        self, order_id: str, payment_intent_id: Optional[str] = None, amount: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self._request(
            "PaymentProcessing",
            "POST",
            "/payments-process",
            lambda: self.simulation.process_payment(order_id, amount),
            json={"orderId": order_id, "paymentIntentId": payment_intent_id},
        )

    async def track_order(self, order_id: str) -> Dict[str, Any]:
        return await self._request(
            "TrackOrder",
            "GET",
            f"/orders-status/{order_id}",
            lambda: self.simulation.track_order(order_id),
        )

    async def send_notification(
        self,
        to: str,
        subject: str,
        message: str = "",
        type: str = "order_status_update",
        order_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "SendNotification",
            "POST",
            "/notifications-send",
            lambda: self.simulation.send_notification(to, subject, type),
            json={"to": to, "subject": subject, "message": message, "type": type, "orderId": order_id},
        )
