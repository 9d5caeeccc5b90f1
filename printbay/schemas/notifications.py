# printbay/schemas/notifications.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from printbay.schemas._base import APIModel as BaseModel


class NotificationRequest(BaseModel):
    to: str = Field(..., min_length=3, example="maker@example.com")
    subject: str = ""
    message: str = ""
    type: str = Field("order_status_update", example="order_confirmation")
    order_id: Optional[str] = None


class NotificationResult(BaseModel):
    notification_id: str
    type: str
    sent: bool
    to: str
    subject: str
    message_id: Optional[str] = None
    timestamp: datetime
