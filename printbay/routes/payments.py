# printbay/routes/payments.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from printbay.dependencies import get_database, get_payments
from printbay.schemas.payments import PaymentIntentRequest, PaymentProcessRequest, PaymentRecord
from printbay.services.database import DatabaseService
from printbay.services.payments import DEFAULT_AMOUNT_CENTS, PaymentService
from printbay.utils.hashing import now_ms, random_suffix
from printbay.utils.responses import json_errors, success_response

router = APIRouter()
log = logging.getLogger("uvicorn.error")


@router.post("/payments-create-intent")
@json_errors("Failed to create payment intent")
async def create_payment_intent(payload: PaymentIntentRequest, payments: PaymentService = Depends(get_payments)):
    log.info("💳 Creating payment intent for order %s, amount: %s", payload.order_id, payload.amount)
    intent = await payments.create_intent(payload.order_id, payload.amount, payload.currency)
    return success_response(intent)


@router.post("/payments-process")
@json_errors("Failed to process payment")
async def process_payment(
    payload: PaymentProcessRequest,
    payments: PaymentService = Depends(get_payments),
    db: DatabaseService = Depends(get_database),
):
    log.info("💳 Processing payment for intent %s, order: %s", payload.payment_intent_id, payload.order_id)

    if not payments.configured:
        log.warning("⚠️ Stripe not configured, using mock payment processing")
        return success_response(
            PaymentRecord(
                payment_id=f"pay_{now_ms()}",
                order_id=payload.order_id,
                amount=DEFAULT_AMOUNT_CENTS,
                currency="usd",
                status="succeeded",
                processed=datetime.now(timezone.utc),
            )
        )

    if not payload.payment_intent_id:
        raise HTTPException(status_code=400, detail="paymentIntentId is required")

    intent = await payments.retrieve_intent(payload.payment_intent_id)
    record = await db.save_payment({
        "payment_id": f"pay_{now_ms()}_{random_suffix()}",
        "order_id": payload.order_id or "unknown",
        "amount": intent["amount"],
        "currency": intent["currency"],
        "status": intent["status"],
        "stripe_payment_intent_id": intent["id"],
    })

    if intent["status"] == "succeeded":
        log.info("✅ Payment successful: %s", intent["id"])
        if payload.order_id:
            await db.update_order_status(payload.order_id, "payment_confirmed")
    else:
        log.warning("⚠️ Payment not completed: %s", intent["status"])

    return success_response(record)
