"""Recipient resolution, event mapping, and best-effort background dispatch."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from partners_hub.core.exceptions import EmailDeliveryError
from partners_hub.db.base import async_session_factory
from partners_hub.domain import Client, Company, Order, OrderHistory, OrderItem, OrderStatus
from partners_hub.services import email_service, notification


def _order(**kwargs):
    order = Order(
        id="abcdef12-0000-0000-0000-000000000000",
        status=OrderStatus.OPEN,
        total_value=Decimal("0"),
        support_fund_used=Decimal("0"),
        **kwargs,
    )
    return order


class TestRecipient:
    def test_client_email_first(self):
        order = _order(
            client=Client(id="c", name="C", email="client@x.test"),
            company=Company(company_name="X", ship_to_contact_email="dock@x.test", company_email="co@x.test"),
        )
        assert notification.resolve_recipient(order) == "client@x.test"

    def test_ship_to_contact_then_company_email(self):
        company = Company(company_name="X", ship_to_contact_email="dock@x.test", company_email="co@x.test")
        assert notification.resolve_recipient(_order(company=company)) == "dock@x.test"

        company = Company(company_name="X", company_email="co@x.test")
        assert notification.resolve_recipient(_order(company=company)) == "co@x.test"

    def test_no_recipient(self):
        assert notification.resolve_recipient(_order(company=Company(company_name="X"))) is None

    def test_display_number_fallback(self):
        assert _order(company=Company(company_name="X")).display_number == "Order-abcdef12"
        assert _order(po_number="PO-1").display_number == "PO-1"

    @pytest.mark.parametrize(
        "status,event",
        [
            (OrderStatus.IN_PROCESS, "in_process"),
            (OrderStatus.DONE, "ready"),
            (OrderStatus.CANCELLED, "cancelled"),
        ],
    )
    def test_status_events(self, status, event):
        assert notification.STATUS_EVENTS[status] == event

    def test_open_does_not_notify(self):
        assert OrderStatus.OPEN not in notification.STATUS_EVENTS


async def _persist_order(seed, company=None, client=None) -> str:
    async with async_session_factory() as s:
        order = Order(
            company_id=(company or seed.us_company).id,
            user_id=client.id if client else None,
            po_number="PO-9",
            status=OrderStatus.OPEN,
            total_value=Decimal("48.00"),
            support_fund_used=Decimal("0"),
        )
        order.items = [
            OrderItem(
                product_id=seed.chips.id, quantity=12, unit_price=Decimal("4.00"),
                total_price=Decimal("48.00"), sort_order=0,
            )
        ]
        s.add(order)
        await s.commit()
        return order.id


async def _history(order_id):
    async with async_session_factory() as s:
        result = await s.execute(select(OrderHistory).where(OrderHistory.order_id == order_id))
        return list(result.scalars().all())


class TestDispatch:
    async def test_sends_to_client_and_records_history(self, seed, outbox):
        order_id = await _persist_order(seed, client=seed.us_client)

        await notification.dispatch_order_email(order_id, "in_process")

        assert len(outbox) == 1
        assert outbox[0]["to"] == "carla@acme.test"
        assert outbox[0]["subject"] == "Your order PO-9 is being processed"
        [entry] = await _history(order_id)
        assert entry.action_type == "notification"
        assert "sent to carla@acme.test" in entry.notes

    async def test_skips_without_recipient(self, seed, outbox):
        order_id = await _persist_order(seed, company=seed.bare_company)

        await notification.dispatch_order_email(order_id, "created")

        assert outbox == []
        [entry] = await _history(order_id)
        assert "skipped" in entry.notes

    async def test_failure_is_logged_not_raised(self, seed, monkeypatch):
        async def broken_send(*args, **kwargs):
            raise EmailDeliveryError("SMTP error 535: nope")

        monkeypatch.setattr(email_service, "send_mail", broken_send)
        order_id = await _persist_order(seed, client=seed.us_client)

        await notification.dispatch_order_email(order_id, "ready")

        [entry] = await _history(order_id)
        assert "failed" in entry.notes
        assert entry.metadata_["error"] == "SMTP error 535: nope"

    async def test_missing_order_is_ignored(self, database, outbox):
        await notification.dispatch_order_email("00000000-0000-0000-0000-000000000000", "created")
        assert outbox == []
