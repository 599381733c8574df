"""Order notifications — which template, to whom, and what happens on failure.

Two delivery modes:

* ``send_order_email`` raises on failure. Used by the admin endpoint that
  sends an email on demand, where the caller needs to know.
* ``dispatch_order_email`` is scheduled as a background task after a state
  change has committed. It opens its own session, logs failures, and records
  the outcome in the order history; it never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from partners_hub.core.config import settings
from partners_hub.core.exceptions import AppException
from partners_hub.db.base import async_session_factory
from partners_hub.domain.order import Order, OrderHistory, OrderStatus
from partners_hub.repositories.order import OrderRepository
from partners_hub.services import email_service, email_templates
from partners_hub.services.email_templates import EmailLine, OrderEmailData

logger = logging.getLogger(__name__)

EVENT_CREATED = "created"
EVENT_IN_PROCESS = "in_process"
EVENT_READY = "ready"
EVENT_CANCELLED = "cancelled"
EVENT_CUSTOM = "custom"

TEMPLATES: dict[str, Callable[[OrderEmailData], tuple[str, str]]] = {
    EVENT_CREATED: email_templates.order_created,
    EVENT_IN_PROCESS: email_templates.order_in_process,
    EVENT_READY: email_templates.order_ready,
    EVENT_CANCELLED: email_templates.order_cancelled,
    EVENT_CUSTOM: email_templates.custom_update,
}

# Status transitions that notify the client; "Open" never does
STATUS_EVENTS = {
    OrderStatus.IN_PROCESS: EVENT_IN_PROCESS,
    OrderStatus.DONE: EVENT_READY,
    OrderStatus.CANCELLED: EVENT_CANCELLED,
}


@dataclass
class NotificationResult:
    event: str
    recipient: Optional[str]
    message_id: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.recipient is None


def resolve_recipient(order: Order) -> Optional[str]:
    """The ordering client, else the company's ship-to contact, else the company inbox."""
    if order.client is not None and order.client.email:
        return order.client.email
    company = order.company
    if company is None:
        return None
    return company.ship_to_contact_email or company.company_email or None


def build_email_data(order: Order, custom_message: Optional[str] = None) -> OrderEmailData:
    return OrderEmailData(
        order_id=order.id,
        order_number=order.display_number,
        company_name=order.company.company_name if order.company else "N/A",
        status=order.status,
        site_url=settings.site_url,
        po_number=order.po_number,
        so_number=order.so_number,
        total_amount=order.total_value,
        items=[
            EmailLine(
                product_name=item.product.item_name if item.product else "Unknown Product",
                sku=item.product.sku if item.product else None,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
            )
            for item in order.items
        ],
        custom_message=custom_message,
    )


def render_order_email(
    event: str, order: Order, custom_message: Optional[str] = None
) -> tuple[str, str]:
    try:
        template = TEMPLATES[event]
    except KeyError:
        raise ValueError(f"Unknown order email event: {event}") from None
    return template(build_email_data(order, custom_message))


async def send_order_email(
    order: Order, event: str, custom_message: Optional[str] = None
) -> NotificationResult:
    recipient = resolve_recipient(order)
    if recipient is None:
        logger.info("No recipient for order %s; skipping %s email", order.id, event)
        return NotificationResult(event=event, recipient=None)

    subject, html = render_order_email(event, order, custom_message)
    message_id = await email_service.send_mail(recipient, subject, html)
    return NotificationResult(event=event, recipient=recipient, message_id=message_id)


def notification_history(order_id: str, result: NotificationResult, error: Optional[str] = None) -> OrderHistory:
    if error:
        notes = f"{result.event} email failed: {error}"
    elif result.skipped:
        notes = f"{result.event} email skipped: no recipient"
    else:
        notes = f"{result.event} email sent to {result.recipient}"
    return OrderHistory(
        order_id=order_id,
        action_type="notification",
        notes=notes,
        metadata_={
            "event": result.event,
            "recipient": result.recipient,
            "message_id": result.message_id,
            "error": error,
        },
    )


async def dispatch_order_email(
    order_id: str, event: str, custom_message: Optional[str] = None
) -> None:
    """Best-effort lifecycle email, run after the triggering change has committed."""
    async with async_session_factory() as session:
        order = await OrderRepository(session).get_with_items(order_id)
        if order is None:
            logger.warning("Order %s vanished before its %s email was sent", order_id, event)
            return

        error = None
        try:
            result = await send_order_email(order, event, custom_message)
        except AppException as exc:
            error = exc.message
            result = NotificationResult(event=event, recipient=resolve_recipient(order))
            logger.warning("Could not send %s email for order %s: %s", event, order_id, exc.message)
        except Exception as exc:
            error = str(exc)
            result = NotificationResult(event=event, recipient=resolve_recipient(order))
            logger.exception("Unexpected error sending %s email for order %s", event, order_id)

        session.add(notification_history(order_id, result, error))
        await session.commit()


# ---------------------------------------------------------------------------
# Internal mailbox
# ---------------------------------------------------------------------------

async def notify_internal_new_order(order: Order) -> str:
    placed_by = f"{order.client.name} ({order.client.email})" if order.client else None
    subject, html = email_templates.internal_new_order(build_email_data(order), placed_by)
    return await email_service.send_mail(settings.orders_mailbox, subject, html)
