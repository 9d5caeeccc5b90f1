# printbay/services/pricing.py

"""
Deterministic quote engine.

Everything except `id` and `timestamp` is a pure function of
(volume, material, quality, color, dimensions, support flag); the
complexity factor is seeded from a 32-bit hash of the first four.
"""

import math
from datetime import datetime, timezone
from typing import Optional

from printbay.schemas.analysis import Dimensions
from printbay.schemas.pricing import (
    ColorOption,
    DeliveryEstimate,
    DeliveryOption,
    MaterialOption,
    MaterialSummary,
    PricingBreakdown,
    PricingOptionsResponse,
    PricingQuote,
    QualityOption,
)
from printbay.utils.hashing import now_ms, pricing_seed, random_suffix

DEFAULT_VOLUME_CM3 = 45.2
DEFAULT_DIMENSIONS = Dimensions(x=30, y=30, z=30)

# ─── Rate tables ──────────────────────────────────────────────

MATERIAL_PRICE_PER_CM3 = {
    "standard-resin": 0.22,
    "tough-resin": 0.30,
    "flexible-resin": 0.45,
    "clear-resin": 0.28,
    "ceramic-resin": 0.55,
    # FDM
    "pla": 0.12,
    "abs": 0.15,
    "petg": 0.18,
    "tpu": 0.35,
}
DEFAULT_MATERIAL_PRICE = 0.15

QUALITY_MULTIPLIERS = {"draft": 0.85, "standard": 1.15, "high": 1.55, "ultra": 2.25}

COLOR_PREMIUMS = {
    "white": 0.0,
    "black": 0.02,
    "gray": 0.02,
    "clear": 0.20,
    "red": 0.08,
    "blue": 0.08,
    "green": 0.08,
    "yellow": 0.12,
    "orange": 0.12,
    "purple": 0.15,
    "gold-glitter": 0.35,
    "silver-glitter": 0.30,
}

POST_PROCESSING = {"ultra": 6.00, "high": 3.50}

BASE_LABOR = 12.50
SERVICE_FEE = 6.95
TAX_RATE = 0.0875
MIN_SUPPORT_COST = 4.50
SUPPORT_RATE_PER_CM3 = 0.15
RUSH_COST = 19.99

MATERIAL_CATALOG = [
    MaterialOption(material_type="standard-resin", name="Standard Resin",
                   description="General purpose resin with a smooth finish", price_per_cm3=0.22, lead_time_days=3),
    MaterialOption(material_type="tough-resin", name="Tough Resin",
                   description="ABS-like impact resistance for functional parts", price_per_cm3=0.30, lead_time_days=4),
    MaterialOption(material_type="flexible-resin", name="Flexible Resin",
                   description="Rubber-like parts, gaskets and grips", price_per_cm3=0.45, lead_time_days=5),
    MaterialOption(material_type="clear-resin", name="Clear Resin",
                   description="Transparent parts that can be polished", price_per_cm3=0.28, lead_time_days=4),
    MaterialOption(material_type="ceramic-resin", name="Ceramic Resin",
                   description="Stiff, heat resistant, stone-like finish", price_per_cm3=0.55, lead_time_days=6),
    MaterialOption(material_type="pla", name="PLA", description="FDM: easy, rigid, biodegradable",
                   price_per_cm3=0.12, lead_time_days=3),
    MaterialOption(material_type="abs", name="ABS", description="FDM: tough and heat tolerant",
                   price_per_cm3=0.15, lead_time_days=3),
    MaterialOption(material_type="petg", name="PETG", description="FDM: strong, food-safe grades available",
                   price_per_cm3=0.18, lead_time_days=3),
    MaterialOption(material_type="tpu", name="TPU", description="FDM: flexible filament",
                   price_per_cm3=0.35, lead_time_days=4),
]

QUALITY_CATALOG = [
    QualityOption(name="draft", description="Draft (0.10mm)", layer_height_mm=0.10, price_multiplier=0.85),
    QualityOption(name="standard", description="Standard (0.05mm)", layer_height_mm=0.05, price_multiplier=1.15),
    QualityOption(name="high", description="High (0.03mm)", layer_height_mm=0.03, price_multiplier=1.55),
    QualityOption(name="ultra", description="Ultra (0.025mm)", layer_height_mm=0.025, price_multiplier=2.25),
]

DELIVERY_CATALOG = {
    "standard": DeliveryOption(name="Standard", days=7, fee=9.99),
    "express": DeliveryOption(name="Express", days=3, fee=19.99),
    "rush": DeliveryOption(name="Rush", days=1, fee=39.99),
}


def _color_category(premium: float) -> str:
    if premium >= 0.30:
        return "special"
    if premium > 0.02:
        return "premium"
    return "standard"


def _cents(value: float) -> float:
    """Round half up to cents."""
    return math.floor(value * 100 + 0.5) / 100


# ─── Engine ───────────────────────────────────────────────────

def complexity_factor(seed: int) -> float:
    bucket = abs(seed) % 100
    if bucket > 70:
        return 1.5
    if bucket > 30:
        return 1.2
    return 1.0


def needs_supports(volume: float, dimensions: Dimensions, support_needed: bool = False) -> bool:
    return (
        bool(support_needed)
        or dimensions.z > max(dimensions.x, dimensions.y) * 1.5
        or volume > 20
    )


def calculate_quote(
    volume: Optional[float] = None,
    material: str = "standard-resin",
    quality: str = "standard",
    color: str = "white",
    dimensions: Optional[Dimensions] = None,
    support_needed: bool = False,
    delivery_option: str = "standard",
    now: Optional[datetime] = None,
) -> PricingQuote:
    volume = DEFAULT_VOLUME_CM3 if volume is None else float(volume)
    dimensions = dimensions or DEFAULT_DIMENSIONS

    seed = pricing_seed(volume, material, quality, color)
    complexity = complexity_factor(seed)
    high_complexity = complexity > 1.3
    supports = needs_supports(volume, dimensions, support_needed)

    support_cost = max(MIN_SUPPORT_COST, volume * SUPPORT_RATE_PER_CM3) if supports else 0.0
    if high_complexity:
        support_cost *= 1.4

    base_material = volume * MATERIAL_PRICE_PER_CM3.get(material, DEFAULT_MATERIAL_PRICE)
    material_cost = base_material * QUALITY_MULTIPLIERS.get(quality, 1.0) * complexity
    color_premium = base_material * COLOR_PREMIUMS.get(color, 0.0)
    labor_cost = BASE_LABOR * (1.3 if high_complexity else 1.0)
    post_processing = POST_PROCESSING.get(quality, 0.0)

    subtotal = material_cost + labor_cost + support_cost + color_premium + post_processing
    tax = subtotal * TAX_RATE
    total = subtotal + SERVICE_FEE + tax

    if quality == "ultra":
        days = 8
    elif quality == "high":
        days = 6
    elif supports:
        days = 5
    elif high_complexity:
        days = 4
    else:
        days = 3

    if high_complexity:
        level = "high"
    elif complexity > 1.1:
        level = "medium"
    else:
        level = "low"

    return PricingQuote(
        id=f"pricing_{abs(seed)}_{now_ms()}_{random_suffix()}",
        volume=volume,
        breakdown=PricingBreakdown(
            material_cost=_cents(material_cost),
            labor_cost=_cents(labor_cost),
            support_cost=_cents(support_cost),
            color_premium=_cents(color_premium),
            post_processing_cost=_cents(post_processing),
            service_fee=SERVICE_FEE,
            subtotal=_cents(subtotal),
            tax=_cents(tax),
            total=_cents(total),
        ),
        delivery=DeliveryEstimate(
            option=delivery_option,
            estimated_days=days,
            rush_available=days > 3,
            rush_cost=RUSH_COST if days > 3 else 0.0,
        ),
        material=MaterialSummary(
            name=material,
            color=color,
            quality=quality,
            estimated_weight=round(volume * 1.2, 1),
            waste_percentage=18 if supports else 10,
            supports_required=supports,
            complexity_level=level,
        ),
        timestamp=now or datetime.now(timezone.utc),
    )


def pricing_options() -> PricingOptionsResponse:
    colors = [
        ColorOption(
            value=name,
            name=name.replace("-", " ").title(),
            category=_color_category(premium),
            premium=premium,
        )
        for name, premium in COLOR_PREMIUMS.items()
    ]
    return PricingOptionsResponse(
        materials=MATERIAL_CATALOG,
        qualities=QUALITY_CATALOG,
        colors=colors,
        delivery_options=DELIVERY_CATALOG,
    )
