# printbay/services/database.py

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from printbay.config.settings import Settings
from printbay.core.exceptions import IntegrationError
from printbay.db.base_class import Base
from printbay.db.session import build_async_engine, build_sessionmaker
from printbay.models import Order, Payment, PricingRecord, ShippingLabel
from printbay.schemas.orders import OrderRecord
from printbay.schemas.payments import PaymentRecord
from printbay.schemas.pricing import PricingRecordOut
from printbay.schemas.shipping import ShippingLabelRecord
from printbay.utils.hashing import now_ms

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DatabaseService:
    """
    Order/pricing/payment/shipping persistence.

    Without credentials every verb answers with an echo of its input (or a
    fixed sample row), so the storefront keeps working end to end.
    """

    name = "database"

    def __init__(self, settings: Settings, url: Optional[str] = None):
        self._url = url or settings.resolved_database_url
        self._echo = settings.env == "debug"
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        self._initialized = False
        self._lock = asyncio.Lock()
        self.last_error: Optional[str] = None

    @property
    def configured(self) -> bool:
        return self._sessionmaker is not None

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return
            if not self._url:
                logger.warning("⚠️ Database credentials not configured, using mock data")
                self._initialized = True
                return

            engine = None
            try:
                engine = build_async_engine(self._url, echo=self._echo)
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except (SQLAlchemyError, OSError, ImportError) as e:
                if engine is not None:
                    await engine.dispose()
                self.last_error = str(e)
                logger.error("❌ Database initialization failed: %s", e)
                raise IntegrationError(self.name, "initialization failed", {"error": str(e)}) from e

            self._engine = engine
            self._sessionmaker = build_sessionmaker(engine)
            self._initialized = True
            self.last_error = None
            logger.info("✅ Database connected")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("🔌 Database connection closed")
        self._engine = None
        self._sessionmaker = None
        self._initialized = False

    def _session(self) -> AsyncSession:
        return self._sessionmaker()

    async def _add(self, row: Any) -> Any:
        try:
            async with self._session() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return row
        except SQLAlchemyError as e:
            logger.error("❌ Failed to save %s: %s", type(row).__name__, e)
            raise IntegrationError(self.name, f"failed to save {row.__tablename__}", {"error": str(e)}) from e

    # ─── Orders ───────────────────────────────────────────────

    async def create_order(self, data: Dict[str, Any]) -> OrderRecord:
        if not self.configured:
            logger.warning("⚠️ Database not configured, returning mock order")
            return OrderRecord(**data, created=_utcnow())

        row = await self._add(Order(**data))
        logger.info("✅ Order created: %s", row.order_id)
        return OrderRecord.model_validate(row)

    async def update_order_status(self, order_id: str, status: str) -> Optional[OrderRecord]:
        """Set any status string. None when the order does not exist."""
        if not self.configured:
            logger.warning("⚠️ Database not configured, returning mock status update")
            return OrderRecord(order_id=order_id, status=status, updated=_utcnow())

        try:
            async with self._session() as session:
                order = await session.get(Order, order_id)
                if order is None:
                    return None
                order.status = status
                order.updated = _utcnow()
                await session.commit()
                await session.refresh(order)
        except SQLAlchemyError as e:
            logger.error("❌ Failed to update order %s: %s", order_id, e)
            raise IntegrationError(self.name, "failed to update order status", {"error": str(e)}) from e

        logger.info("✅ Order %s status -> %s", order_id, status)
        return OrderRecord.model_validate(order)

    async def get_order_status(self, order_id: str) -> Optional[OrderRecord]:
        if not self.configured:
            logger.warning("⚠️ Database not configured, returning mock order status")
            return OrderRecord(
                order_id=order_id,
                status="in_production",
                created=_utcnow() - timedelta(hours=1),
            )

        try:
            async with self._session() as session:
                order = await session.get(Order, order_id)
        except SQLAlchemyError as e:
            logger.error("❌ Failed to load order %s: %s", order_id, e)
            raise IntegrationError(self.name, "failed to load order", {"error": str(e)}) from e
        return OrderRecord.model_validate(order) if order else None

    # ─── Pricing / payments ───────────────────────────────────

    async def save_pricing(self, data: Dict[str, Any]) -> PricingRecordOut:
        if not self.configured:
            logger.warning("⚠️ Database not configured, returning mock pricing record")
            return PricingRecordOut(**data, created=_utcnow())
        row = await self._add(PricingRecord(**data))
        return PricingRecordOut.model_validate(row)

    async def save_payment(self, data: Dict[str, Any]) -> PaymentRecord:
        if not self.configured:
            logger.warning("⚠️ Database not configured, returning mock payment record")
            return PaymentRecord(**data, processed=_utcnow())
        row = await self._add(Payment(**data))
        logger.info("✅ Payment saved: %s (%s)", row.payment_id, row.status)
        return PaymentRecord.model_validate(row)

    # ─── Shipping ─────────────────────────────────────────────

    async def save_shipping_label(self, data: Dict[str, Any]) -> ShippingLabelRecord:
        if not self.configured:
            logger.warning("⚠️ Database not configured, returning mock shipping record")
            return ShippingLabelRecord(**data, created=_utcnow())
        row = await self._add(ShippingLabel(**data))
        return ShippingLabelRecord.model_validate(row)

    async def get_shipping_info(self, order_id: str) -> Optional[ShippingLabelRecord]:
        """Most recent label for the order."""
        if not self.configured:
            return ShippingLabelRecord(
                shipping_id=f"ship_{now_ms()}",
                order_id=order_id,
                tracking_number=f"TPB{now_ms()}",
                carrier="usps",
                status="shipped",
                created=_utcnow() - timedelta(days=1),
            )

        stmt = (
            select(ShippingLabel)
            .where(ShippingLabel.order_id == order_id)
            .order_by(ShippingLabel.created.desc())
            .limit(1)
        )
        try:
            async with self._session() as session:
                row = (await session.execute(stmt)).scalars().first()
        except SQLAlchemyError as e:
            logger.error("❌ Failed to load shipping info for %s: %s", order_id, e)
            raise IntegrationError(self.name, "failed to load shipping info", {"error": str(e)}) from e
        return ShippingLabelRecord.model_validate(row) if row else None
