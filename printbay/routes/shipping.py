# printbay/routes/shipping.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from printbay.dependencies import get_database, get_shipping
from printbay.schemas.shipping import ShippingLabelRequest, ShippingRatesRequest, TrackingRequest
from printbay.services.database import DatabaseService
from printbay.services.shipping import ShippingService
from printbay.utils.hashing import now_ms, random_suffix
from printbay.utils.responses import json_errors, success_response

router = APIRouter()
log = logging.getLogger("uvicorn.error")

DEFAULT_CARRIER = "usps"


@router.post("/shipping-rates")
@json_errors("Failed to get shipping rates")
async def shipping_rates(payload: ShippingRatesRequest, shipping: ShippingService = Depends(get_shipping)):
    addr = payload.to_address
    log.info("🚚 Getting shipping rates for %s, %s", addr.city, addr.state)
    rates = await shipping.get_rates(addr, payload.items)
    return success_response(
        rates=[r.to_json() for r in rates],
        shippingAddress=addr.to_json(),
    )


@router.post("/shipping-label")
@json_errors("Failed to create shipping label")
async def shipping_label(
    payload: ShippingLabelRequest,
    shipping: ShippingService = Depends(get_shipping),
    db: DatabaseService = Depends(get_database),
):
    log.info("🏷️ Creating shipping label for order %s", payload.order_id)
    label = await shipping.create_label(payload.rate_id, payload.order_id)

    # No rollback: a purchased label stays purchased if the writes below fail
    record = await db.save_shipping_label({
        "shipping_id": f"ship_{now_ms()}_{random_suffix()}",
        "order_id": payload.order_id,
        "tracking_number": label.tracking_number,
        "carrier": DEFAULT_CARRIER,
        "label_url": label.label_url,
        "cost": float(label.cost),
        "currency": label.currency,
        "rate_id": payload.rate_id,
        "transaction_id": label.transaction_id,
    })
    await db.update_order_status(payload.order_id, "shipped")

    return success_response(label, shippingId=record.shipping_id, saved=True)


async def _track(tracking_number: Optional[str], carrier: str, shipping: ShippingService):
    if not tracking_number:
        raise HTTPException(status_code=400, detail="trackingNumber is required")
    log.info("📦 Tracking package %s via %s", tracking_number, carrier)
    return success_response(await shipping.get_tracking_info(tracking_number, carrier))


@router.get("/shipping-track")
@json_errors("Failed to get tracking info")
async def track_query(
    tracking_number: Optional[str] = Query(None, alias="trackingNumber"),
    carrier: str = Query(DEFAULT_CARRIER),
    shipping: ShippingService = Depends(get_shipping),
):
    return await _track(tracking_number, carrier, shipping)


@router.get("/shipping-track/{tracking_number}")
@json_errors("Failed to get tracking info")
async def track_path(
    tracking_number: str,
    carrier: str = Query(DEFAULT_CARRIER),
    shipping: ShippingService = Depends(get_shipping),
):
    return await _track(tracking_number, carrier, shipping)


@router.post("/shipping-track")
@json_errors("Failed to get tracking info")
async def track_body(payload: TrackingRequest, shipping: ShippingService = Depends(get_shipping)):
    return await _track(payload.tracking_number, payload.carrier, shipping)


@router.post("/shipping-track/{tracking_number}")
@json_errors("Failed to get tracking info")
async def track_path_post(
    tracking_number: str,
    carrier: str = Query(DEFAULT_CARRIER),
    shipping: ShippingService = Depends(get_shipping),
):
    return await _track(tracking_number, carrier, shipping)
