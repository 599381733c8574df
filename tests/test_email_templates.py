"""Email subjects, links, and escaping."""

from decimal import Decimal

from partners_hub.services import email_templates
from partners_hub.services.email_templates import EmailLine, OrderEmailData


def _data(**overrides):
    values = {
        "order_id": "11111111-2222-3333-4444-555555555555",
        "order_number": "PO-778",
        "company_name": "Acme Foods",
        "status": "Open",
        "site_url": "https://partners.example.com",
        "po_number": "PO-778",
        "total_amount": Decimal("1234.5"),
        "items": [EmailLine(product_name="Chili Chips", quantity=12, unit_price=Decimal("4"))],
    }
    values.update(overrides)
    return OrderEmailData(**values)


class TestOrderTemplates:
    def test_created(self):
        subject, html = email_templates.order_created(_data())
        assert subject == "New Order received"
        assert "https://partners.example.com/logo.png" in html
        assert "https://partners.example.com/client/orders/11111111-2222-3333-4444-555555555555" in html
        assert "Chili Chips" in html
        assert "$1,234.50" in html
        assert "$4.00" in html

    def test_status_subjects_prefer_so_number(self):
        with_so = _data(so_number="SO-42")
        assert email_templates.order_in_process(with_so)[0] == "Your order SO-42 is being processed"
        assert email_templates.order_ready(with_so)[0] == "Order SO-42 is ready for pickup!"
        assert email_templates.order_cancelled(with_so)[0] == "Order SO-42 has been cancelled"

    def test_status_subjects_fall_back_to_order_number(self):
        data = _data()
        assert email_templates.order_in_process(data)[0] == "Your order PO-778 is being processed"
        assert email_templates.order_ready(data)[0] == "Order PO-778 is ready for pickup!"
        assert email_templates.order_cancelled(data)[0] == "Order PO-778 has been cancelled"

    def test_custom_update(self):
        subject, html = email_templates.custom_update(_data(custom_message="Truck arrives Friday\nDock 4"))
        assert subject == "Order Update - #PO-778"
        assert "Truck arrives Friday<br>Dock 4" in html

    def test_values_are_escaped(self):
        data = _data(
            company_name="<script>alert(1)</script>",
            custom_message='<img src=x onerror="steal()">',
            items=[EmailLine(product_name="Fish & Chips", quantity=1, unit_price=Decimal("1"))],
        )
        _, html = email_templates.custom_update(data)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "<img src=x" not in html

        _, html = email_templates.order_created(data)
        assert "Fish &amp; Chips" in html


class TestOtherTemplates:
    def test_password_reset(self):
        subject, html = email_templates.password_reset(
            "Carla", "https://auth.test/verify?token=a&type=recovery", "https://partners.example.com"
        )
        assert "password" in subject.lower()
        assert "Hi Carla" in html
        assert "https://auth.test/verify?token=a&amp;type=recovery" in html

    def test_internal_new_order(self):
        data = _data(
            items=[
                EmailLine(
                    product_name="Chili Chips", sku="CHIP-01", quantity=12,
                    unit_price=Decimal("4"), total_price=Decimal("48"),
                )
            ],
            total_amount=Decimal("48"),
        )
        subject, html = email_templates.internal_new_order(data, "Carla (carla@acme.test)")
        assert subject == "New Order: PO-778 - Acme Foods"
        assert "CHIP-01" in html
        assert "Carla (carla@acme.test)" in html
        assert "/admin/orders/11111111-2222-3333-4444-555555555555" in html

    def test_internal_new_order_by_admin(self):
        _, html = email_templates.internal_new_order(_data())
        assert "Admin Created" in html

    def test_feedback_subjects(self):
        issue, _ = email_templates.feedback("issue", "Broken", "Carla", "c@a.test", "https://x.test")
        other, _ = email_templates.feedback("feedback", "Nice", "Carla", "c@a.test", "https://x.test")
        assert issue == "[Carla] sent an issue!"
        assert other == "[Carla] is sharing a feedback!"
