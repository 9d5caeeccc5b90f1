# printbay/schemas/pricing.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field, confloat

from printbay.schemas._base import APIModel as BaseModel
from printbay.schemas.analysis import Dimensions


# ---------- Request ----------

class PricingRequest(BaseModel):
    """Quote request. Volume falls back to a typical 45.2 cm³ part when absent."""
    volume: Optional[confloat(ge=0)] = Field(None, example=12.5, description="Part volume, cm³")
    material: str = Field("standard-resin", example="tough-resin")
    quality: str = Field("standard", example="high")
    color: str = Field("white", example="red")
    delivery_option: str = "standard"

    dimensions: Optional[Dimensions] = None
    support_needed: bool = False

    order_id: Optional[str] = None
    model_analysis_id: Optional[str] = None


# ---------- Response ----------

class PricingBreakdown(BaseModel):
    material_cost: float
    labor_cost: float
    support_cost: float
    color_premium: float
    post_processing_cost: float
    service_fee: float
    subtotal: float
    tax: float
    total: float


class DeliveryEstimate(BaseModel):
    option: str = "standard"
    estimated_days: int
    rush_available: bool
    rush_cost: float


class MaterialSummary(BaseModel):
    name: str
    color: str
    quality: str
    estimated_weight: float = Field(..., description="grams")
    waste_percentage: int
    supports_required: bool
    complexity_level: Literal["low", "medium", "high"]


class PricingQuote(BaseModel):
    id: str
    volume: float
    currency: str = "USD"
    breakdown: PricingBreakdown
    delivery: DeliveryEstimate
    material: MaterialSummary
    timestamp: datetime


class PricingRecordOut(BaseModel):
    pricing_id: str
    order_id: Optional[str] = None
    material: str
    quality: Optional[str] = None
    color: Optional[str] = None
    volume: float
    material_cost: float = 0.0
    labor_cost: float = 0.0
    support_cost: float = 0.0
    color_premium: float = 0.0
    post_processing_cost: float = 0.0
    service_fee: float = 0.0
    subtotal: float = 0.0
    tax: float = 0.0
    total: float
    currency: str = "USD"
    estimated_days: Optional[int] = None
    created: Optional[datetime] = None


# ---------- Options catalog ----------

class MaterialOption(BaseModel):
    material_type: str
    name: str
    description: str
    price_per_cm3: float
    lead_time_days: int


class QualityOption(BaseModel):
    name: str
    description: str
    layer_height_mm: float
    price_multiplier: float


class ColorOption(BaseModel):
    value: str
    name: str
    category: Literal["standard", "premium", "special"]
    premium: float


class DeliveryOption(BaseModel):
    name: str
    days: int
    fee: float


class PricingOptionsResponse(BaseModel):
    materials: List[MaterialOption]
    qualities: List[QualityOption]
    colors: List[ColorOption]
    delivery_options: Dict[str, DeliveryOption]
