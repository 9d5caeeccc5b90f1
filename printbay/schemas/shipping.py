# printbay/schemas/shipping.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, confloat, conint

from printbay.schemas._base import APIModel as BaseModel


class Address(BaseModel):
    name: Optional[str] = None
    company: Optional[str] = None
    street1: str = ""
    street2: Optional[str] = None
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = "US"
    phone: Optional[str] = None
    email: Optional[str] = None


class ShippingItem(BaseModel):
    weight: confloat(ge=0) = Field(0, description="ounces per unit")
    quantity: conint(ge=1) = 1
    value: confloat(ge=0) = Field(0, description="USD per unit")
    length: Optional[confloat(gt=0)] = Field(None, description="inches")
    width: Optional[confloat(gt=0)] = None
    height: Optional[confloat(gt=0)] = None


class ShippingRatesRequest(BaseModel):
    to_address: Address
    items: List[ShippingItem] = Field(default_factory=list)


class ServiceLevel(BaseModel):
    name: str
    token: str


class ShippingRate(BaseModel):
    rate_id: str
    servicelevel: ServiceLevel
    amount: str
    currency: str
    estimated_days: int
    provider: str
    provider_image_75: Optional[str] = None
    provider_image_200: Optional[str] = None


class ShippingLabelRequest(BaseModel):
    rate_id: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)


class LabelResult(BaseModel):
    label_url: Optional[str]
    tracking_number: Optional[str]
    tracking_url: Optional[str] = None
    cost: str
    currency: str = "USD"
    transaction_id: Optional[str] = None


class ShippingLabelRecord(BaseModel):
    shipping_id: str
    order_id: str
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    label_url: Optional[str] = None
    cost: Optional[float] = None
    currency: Optional[str] = None
    rate_id: Optional[str] = None
    transaction_id: Optional[str] = None
    created: Optional[datetime] = None
    status: Optional[str] = None


class TrackingEvent(BaseModel):
    status: str
    status_date: Optional[str] = None
    status_details: Optional[str] = None
    location: Optional[str] = None


class TrackingInfo(BaseModel):
    tracking_number: str
    status: str
    status_date: Optional[str] = None
    status_details: Optional[str] = None
    eta: Optional[str] = None
    tracking_history: List[TrackingEvent] = Field(default_factory=list)


class TrackingRequest(BaseModel):
    tracking_number: str = Field(..., min_length=1)
    carrier: str = "usps"
