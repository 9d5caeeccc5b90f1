# printbay/models/models.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
)

from printbay.db.base_class import Base, CacheBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =========================
# Orders
# =========================
class Order(Base):
    __tablename__ = "orders"

    order_id = Column(String(64), primary_key=True)
    order_number = Column(String(32), nullable=True, index=True)

    customer_email = Column(String(320), nullable=True)
    customer_name = Column(String(200), nullable=True)
    customer_phone = Column(String(50), nullable=True)

    total = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False, default="USD")
    # Free-form: any caller may set any status string
    status = Column(String(50), nullable=False, default="pending_payment")

    file_url = Column(Text, nullable=True)
    file_name = Column(Text, nullable=True)

    created = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Order {self.order_id} status={self.status}>"


# =========================
# Pricing quotes
# =========================
class PricingRecord(Base):
    __tablename__ = "pricing"

    pricing_id = Column(String(128), primary_key=True)
    order_id = Column(String(64), nullable=True, index=True)

    material = Column(String(64), nullable=False)
    quality = Column(String(32), nullable=True)
    color = Column(String(32), nullable=True)
    volume = Column(Float, nullable=False)

    material_cost = Column(Float, nullable=False, default=0.0)
    labor_cost = Column(Float, nullable=False, default=0.0)
    support_cost = Column(Float, nullable=False, default=0.0)
    color_premium = Column(Float, nullable=False, default=0.0)
    post_processing_cost = Column(Float, nullable=False, default=0.0)
    service_fee = Column(Float, nullable=False, default=0.0)
    subtotal = Column(Float, nullable=False, default=0.0)
    tax = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    estimated_days = Column(Integer, nullable=True)

    created = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


# =========================
# Payments
# =========================
class Payment(Base):
    __tablename__ = "payments"

    payment_id = Column(String(128), primary_key=True)
    order_id = Column(String(64), nullable=True, index=True)
    amount = Column(Integer, nullable=False)  # minor units (cents)
    currency = Column(String(3), nullable=False, default="usd")
    status = Column(String(50), nullable=False)
    stripe_payment_intent_id = Column(String(128), nullable=True)
    processed = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


# =========================
# Shipping labels
# =========================
class ShippingLabel(Base):
    __tablename__ = "shipping_labels"

    shipping_id = Column(String(64), primary_key=True)
    order_id = Column(String(64), nullable=False)
    tracking_number = Column(String(128), nullable=True)
    carrier = Column(String(32), nullable=True)
    label_url = Column(Text, nullable=True)
    cost = Column(Float, nullable=True)
    currency = Column(String(3), nullable=True)
    rate_id = Column(String(128), nullable=True)
    transaction_id = Column(String(128), nullable=True)
    created = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_shipping_labels_order_created", "order_id", "created"),)


# =========================
# Client file cache
# =========================
class CachedFile(CacheBase):
    __tablename__ = "cached_files"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    size = Column(Integer, nullable=False)
    type = Column(String(128), nullable=False, default="")
    data = Column(LargeBinary, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, index=True)
    last_accessed = Column(DateTime(timezone=True), nullable=False, index=True)
