# printbay/schemas/payments.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, conint

from printbay.schemas._base import APIModel as BaseModel


class PaymentIntentRequest(BaseModel):
    order_id: Optional[str] = None
    amount: Optional[conint(gt=0)] = Field(None, description="Minor units (cents)", example=2425)
    currency: str = "usd"


class PaymentIntentResult(BaseModel):
    client_secret: Optional[str]
    payment_intent_id: str
    amount: int
    currency: str


class PaymentProcessRequest(BaseModel):
    payment_intent_id: Optional[str] = None
    order_id: Optional[str] = None


class PaymentRecord(BaseModel):
    payment_id: str
    order_id: Optional[str] = None
    amount: int
    currency: str
    status: str
    stripe_payment_intent_id: Optional[str] = None
    processed: Optional[datetime] = None
