# printbay/schemas/orders.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, confloat

from printbay.schemas._base import APIModel as BaseModel
from printbay.schemas.shipping import ShippingLabelRecord


class OrderStatus(str, Enum):
    """Known labels. Stored status is free text; nothing validates transitions."""
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_CONFIRMED = "payment_confirmed"
    IN_PRODUCTION = "in_production"
    QUALITY_CHECK = "quality_check"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


STATUS_STEPS = {
    OrderStatus.PENDING_PAYMENT.value: 0,
    OrderStatus.PAYMENT_CONFIRMED.value: 1,
    OrderStatus.IN_PRODUCTION.value: 2,
    OrderStatus.QUALITY_CHECK.value: 3,
    OrderStatus.SHIPPED.value: 4,
    OrderStatus.DELIVERED.value: 5,
}

STEP_LABELS = ["Order Received", "Payment Confirmed", "In Production", "Quality Check", "Shipped"]


def status_display(status: str) -> str:
    return (status or "").replace("_", " ").title()


class OrderCreateRequest(BaseModel):
    customer_email: Optional[str] = Field(None, example="maker@example.com")
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    total: Optional[confloat(ge=0)] = Field(None, example=24.25)
    currency: str = "USD"
    file_url: Optional[str] = None
    file_name: Optional[str] = None


class OrderRecord(BaseModel):
    order_id: str
    order_number: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    total: Optional[float] = None
    currency: Optional[str] = None
    status: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=50, example="in_production")


class TrackingStep(BaseModel):
    step: str
    completed: bool
    timestamp: Optional[datetime] = None


class OrderStatusResponse(OrderRecord):
    status_display: str
    progress: int
    estimated_completion: datetime
    tracking_steps: List[TrackingStep]
    shipping: Optional[ShippingLabelRecord] = None
