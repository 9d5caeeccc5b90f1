# printbay/routes/notifications.py
import logging

from fastapi import APIRouter, Depends

from printbay.dependencies import get_notifications
from printbay.schemas.notifications import NotificationRequest
from printbay.services.email import NotificationService
from printbay.utils.responses import json_errors, success_response

router = APIRouter()
log = logging.getLogger("uvicorn.error")


@router.post("/notifications-send")
@json_errors("Failed to send email notification")
async def send_notification(payload: NotificationRequest, email: NotificationService = Depends(get_notifications)):
    log.info("📧 Sending %s notification to %s", payload.type, payload.to)
    result = await email.send(
        to=payload.to,
        subject=payload.subject,
        message=payload.message,
        type=payload.type,
        order_id=payload.order_id,
    )
    return success_response(result)
