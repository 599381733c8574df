"""Order email routes (/api/orders/send-*).

Unlike the background emails queued by order changes, these send inline and
report relay failures to the caller.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.config import settings
from partners_hub.core.security import Principal, get_current_principal, require_admin
from partners_hub.db.base import get_db
from partners_hub.schemas.notification import (
    EmailSendResponse,
    SendEmailRequest,
    SendNotificationRequest,
)
from partners_hub.services import notification
from partners_hub.services.order import OrderService

router = APIRouter(prefix="/api/orders", tags=["Notifications"])


@router.post("/send-notification", response_model=EmailSendResponse)
async def send_internal_notification(
    body: SendNotificationRequest,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Tell the orders mailbox about a newly placed order."""
    order = await OrderService(session).get_order(principal, body.order_id)
    message_id = await notification.notify_internal_new_order(order)
    return EmailSendResponse(
        message="Notification sent",
        message_id=message_id,
        recipient=settings.orders_mailbox,
    )


@router.post("/send-email", response_model=EmailSendResponse)
async def send_order_email(
    body: SendEmailRequest,
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    order = await OrderService(session).get_order(principal, body.order_id)
    result = await notification.send_order_email(order, body.email_type, body.custom_message)
    session.add(notification.notification_history(order.id, result))

    if result.skipped:
        return EmailSendResponse(
            message="No recipient email configured - email not sent", skipped=True
        )
    return EmailSendResponse(
        message="Email sent successfully",
        message_id=result.message_id,
        recipient=result.recipient,
    )
