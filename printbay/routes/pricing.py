# printbay/routes/pricing.py
import logging

from fastapi import APIRouter, Depends

from printbay.dependencies import get_database
from printbay.schemas.pricing import PricingRequest
from printbay.services.database import DatabaseService
from printbay.services.pricing import calculate_quote, pricing_options
from printbay.utils.responses import json_errors, success_response

router = APIRouter()
log = logging.getLogger("uvicorn.error")


@router.get("/pricing-calculate")
@json_errors("Failed to load pricing options")
async def get_pricing_options():
    return success_response(pricing_options())


@router.post("/pricing-calculate")
@json_errors("Failed to calculate pricing")
async def calculate_pricing(payload: PricingRequest, db: DatabaseService = Depends(get_database)):
    quote = calculate_quote(
        volume=payload.volume,
        material=payload.material,
        quality=payload.quality,
        color=payload.color,
        dimensions=payload.dimensions,
        support_needed=payload.support_needed,
        delivery_option=payload.delivery_option,
    )
    log.info("💰 Quote %s: %.2f cm³ %s/%s/%s -> $%.2f",
             quote.id, quote.volume, payload.material, payload.quality, payload.color, quote.breakdown.total)

    b = quote.breakdown
    record = await db.save_pricing({
        "pricing_id": quote.id,
        "order_id": payload.order_id,
        "material": payload.material,
        "quality": payload.quality,
        "color": payload.color,
        "volume": quote.volume,
        "material_cost": b.material_cost,
        "labor_cost": b.labor_cost,
        "support_cost": b.support_cost,
        "color_premium": b.color_premium,
        "post_processing_cost": b.post_processing_cost,
        "service_fee": b.service_fee,
        "subtotal": b.subtotal,
        "tax": b.tax,
        "total": b.total,
        "currency": quote.currency,
        "estimated_days": quote.delivery.estimated_days,
    })
    return success_response(
        quote,
        pricingId=record.pricing_id,
        orderId=payload.order_id,
        modelAnalysisId=payload.model_analysis_id,
    )
