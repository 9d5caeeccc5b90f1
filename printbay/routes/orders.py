# printbay/routes/orders.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from printbay.dependencies import get_database
from printbay.schemas.orders import (
    STATUS_STEPS,
    OrderCreateRequest,
    OrderStatusResponse,
    OrderStatusUpdate,
    status_display,
)
from printbay.services.database import DatabaseService
from printbay.services.orders import order_progress, order_step, tracking_steps
from printbay.utils.hashing import now_ms, random_suffix
from printbay.utils.responses import json_errors, success_response

router = APIRouter()
log = logging.getLogger("uvicorn.error")

DEFAULT_CUSTOMER_EMAIL = "customer@example.com"
DEFAULT_ORDER_TOTAL = 24.25


def _require_order_id(order_id: Optional[str]) -> str:
    if not order_id:
        raise HTTPException(status_code=400, detail="orderId is required")
    return order_id


# ─── Create ───────────────────────────────────────────────────

@router.post("/orders-create")
@json_errors("Failed to create order")
async def create_order(payload: OrderCreateRequest, db: DatabaseService = Depends(get_database)):
    ts = now_ms()
    data = {
        "order_id": f"TPB-{ts}-{random_suffix()}",
        "order_number": f"PB{str(ts)[-8:]}",
        "customer_email": payload.customer_email or DEFAULT_CUSTOMER_EMAIL,
        "customer_name": payload.customer_name,
        "customer_phone": payload.customer_phone,
        "total": payload.total if payload.total is not None else DEFAULT_ORDER_TOTAL,
        "currency": payload.currency,
        "status": "pending_payment",
        "file_url": payload.file_url,
        "file_name": payload.file_name,
    }
    log.info("📦 Creating order for %s, total: $%s", data["customer_email"], data["total"])
    return success_response(await db.create_order(data))


# ─── Status ───────────────────────────────────────────────────

async def _order_status(order_id: str, db: DatabaseService):
    log.info("📋 Getting order status for %s", order_id)
    order = await db.get_order_status(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    step = order_step(order.status)
    shipping = await db.get_shipping_info(order_id) if step >= STATUS_STEPS["shipped"] else None
    now = datetime.now(timezone.utc)
    return success_response(
        OrderStatusResponse(
            **order.model_dump(),
            status_display=status_display(order.status),
            progress=order_progress(order.status),
            estimated_completion=now + timedelta(days=1),
            tracking_steps=tracking_steps(order, now),
            shipping=shipping,
        )
    )


async def _update_status(order_id: str, payload: OrderStatusUpdate, db: DatabaseService):
    log.info("📋 Updating order status for %s to %s", order_id, payload.status)
    order = await db.update_order_status(order_id, payload.status)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return success_response(order)


@router.get("/orders-status")
@json_errors("Failed to process order status request")
async def get_order_status_query(
    order_id: Optional[str] = Query(None, alias="orderId"),
    db: DatabaseService = Depends(get_database),
):
    return await _order_status(_require_order_id(order_id), db)


@router.get("/orders-status/{order_id}")
@json_errors("Failed to process order status request")
async def get_order_status(order_id: str, db: DatabaseService = Depends(get_database)):
    return await _order_status(order_id, db)


@router.put("/orders-status")
@json_errors("Failed to process order status request")
async def update_order_status_query(
    payload: OrderStatusUpdate,
    order_id: Optional[str] = Query(None, alias="orderId"),
    db: DatabaseService = Depends(get_database),
):
    return await _update_status(_require_order_id(order_id), payload, db)


@router.put("/orders-status/{order_id}")
@json_errors("Failed to process order status request")
async def update_order_status(order_id: str, payload: OrderStatusUpdate, db: DatabaseService = Depends(get_database)):
    return await _update_status(order_id, payload, db)
