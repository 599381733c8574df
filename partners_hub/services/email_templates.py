"""HTML email templates.

Each template returns ``(subject, html)``. Every value that comes from the
database or a request is escaped before it reaches the markup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from html import escape
from typing import Optional, Sequence

from partners_hub.services.pricing import to_decimal

_H2 = (
    "margin: 0 0 20px; color: #000000; font-size: 22px; padding-bottom: 10px; "
    "border-bottom: 1px solid #e5e7eb;"
)
_P = "margin: 0 0 20px; color: #374151; font-size: 16px; line-height: 1.6;"
_P_MUTED = "margin: 20px 0 0; color: #6b7280; font-size: 14px; line-height: 1.6;"
_INFO = "margin: 0 0 10px; color: #6b7280; font-size: 14px;"
_TH = "padding: 12px; color: #374151; font-size: 14px; font-weight: 600;"
_TD = "padding: 10px; border-bottom: 1px solid #e5e7eb;"
_BUTTON = (
    "display: inline-block; padding: 14px 32px; background-color: #000000; color: #ffffff; "
    "text-decoration: none; border-radius: 6px; font-size: 16px; font-weight: 600;"
)


@dataclass
class EmailLine:
    product_name: str
    quantity: int
    unit_price: Decimal
    sku: Optional[str] = None
    total_price: Optional[Decimal] = None


@dataclass
class OrderEmailData:
    order_id: str
    order_number: str
    company_name: str
    status: str
    site_url: str
    po_number: Optional[str] = None
    so_number: Optional[str] = None
    total_amount: Optional[Decimal] = None
    items: Sequence[EmailLine] = field(default_factory=list)
    custom_message: Optional[str] = None

    @property
    def reference(self) -> str:
        """SO number once the order is in the ERP, otherwise the order number."""
        return self.so_number or self.order_number

    @property
    def order_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/client/orders/{self.order_id}"


def format_money(value) -> str:
    return f"${to_decimal(value):,.2f}"


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def _wrap(content: str, site_url: str, title: str = "Qiqi Orders Notification") -> str:
    logo = escape(f"{site_url.rstrip('/')}/logo.png", quote=True)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(title)}</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background-color: #f4f4f4; padding: 20px 0;">
    <tr>
      <td align="center">
        <table width="600" cellpadding="0" cellspacing="0" style="background-color: #ffffff; border-radius: 8px; overflow: hidden;">
          <tr>
            <td style="padding: 40px 30px; text-align: center;">
              <img src="{logo}" alt="Qiqi" style="height: 50px; width: auto; display: block; margin: 0 auto;" />
            </td>
          </tr>
          <tr>
            <td style="padding: 40px 30px;">
              {content}
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def _button(url: str, label: str) -> str:
    return (
        f'<div style="margin: 30px 0; text-align: center;">'
        f'<a href="{escape(url, quote=True)}" style="{_BUTTON}">{escape(label)}</a></div>'
    )


def _order_info(data: OrderEmailData, status_label: Optional[str] = None) -> str:
    rows = [
        f'<p style="{_INFO}"><strong>Company:</strong> {escape(data.company_name)}</p>',
        f'<p style="{_INFO}"><strong>Status:</strong> {escape(status_label or data.status)}</p>',
    ]
    if data.po_number:
        rows.append(f'<p style="{_INFO}"><strong>PO Number:</strong> {escape(data.po_number)}</p>')
    if data.so_number:
        rows.append(f'<p style="{_INFO}"><strong>SO Number:</strong> {escape(data.so_number)}</p>')
    return (
        '<table width="100%" cellpadding="0" cellspacing="0" style="margin: 20px 0; '
        'background-color: #f8f9fa; border-radius: 6px; padding: 20px;"><tr><td>'
        + "".join(rows)
        + "</td></tr></table>"
    )


def _items_table(items: Sequence[EmailLine], total: Optional[Decimal]) -> str:
    if not items:
        return ""
    body = "".join(
        f"<tr>"
        f'<td style="{_TD}">{escape(item.product_name)}</td>'
        f'<td style="{_TD} text-align: center;">{item.quantity}</td>'
        f'<td style="{_TD} text-align: right;">{format_money(item.unit_price)}</td>'
        f"</tr>"
        for item in items
    )
    foot = ""
    if total:
        foot = (
            f'<tfoot><tr style="background-color: #f8f9fa;">'
            f'<td colspan="2" style="{_TH} text-align: right;">Total:</td>'
            f'<td style="{_TH} text-align: right;">{format_money(total)}</td></tr></tfoot>'
        )
    return (
        '<h3 style="margin: 30px 0 15px; color: #1e293b; font-size: 18px;">Order Items</h3>'
        '<table width="100%" cellpadding="0" cellspacing="0" style="border: 1px solid #e5e7eb;">'
        f'<thead><tr style="background-color: #f8f9fa;">'
        f'<th style="{_TH} text-align: left;">Product</th>'
        f'<th style="{_TH} text-align: center;">Quantity</th>'
        f'<th style="{_TH} text-align: right;">Unit Price</th></tr></thead>'
        f"<tbody>{body}</tbody>{foot}</table>"
    )


def _message_box(message: Optional[str]) -> str:
    if not message:
        return ""
    text = escape(message).replace("\n", "<br>")
    return (
        '<div style="margin: 20px 0; padding: 20px; background-color: #f8f9fa; '
        'border-left: 4px solid #000000; border-radius: 6px;">'
        f'<p style="margin: 0; color: #374151; font-size: 16px; line-height: 1.6;">{text}</p></div>'
    )


# ---------------------------------------------------------------------------
# Order lifecycle
# ---------------------------------------------------------------------------

def order_created(data: OrderEmailData) -> tuple[str, str]:
    content = (
        f'<h2 style="{_H2}">Order Confirmation</h2>'
        f'<p style="{_P}">Your order <strong>#{escape(data.order_number)}</strong> has been '
        "successfully created and is being processed.</p>"
        + _order_info(data)
        + _message_box(data.custom_message)
        + _items_table(data.items, data.total_amount)
        + _button(data.order_url, "View Order Details")
        + f'<p style="{_P_MUTED}">We will notify you when your order status changes. '
        "If you have any questions, please contact our support team.</p>"
    )
    return "New Order received", _wrap(content, data.site_url)


def order_in_process(data: OrderEmailData) -> tuple[str, str]:
    content = (
        f'<h2 style="{_H2}">Order In Process</h2>'
        f'<p style="{_P}">Great news! Your order <strong>#{escape(data.order_number)}</strong> '
        "is now being processed.</p>"
        + _order_info(data, "In Process")
        + f'<p style="{_P}">We\'re working on your order and will notify you once it\'s ready '
        "for pickup/delivery.</p>"
        + _button(data.order_url, "Track Order Status")
    )
    return f"Your order {data.reference} is being processed", _wrap(content, data.site_url)


def order_ready(data: OrderEmailData) -> tuple[str, str]:
    content = (
        f'<h2 style="{_H2}">Order Ready!</h2>'
        f'<p style="{_P}">Excellent news! Your order <strong>{escape(data.reference)}</strong> '
        "is now ready for pickup. You may Edit and/or Print your packing slip.</p>"
        + _order_info(data, "Ready")
        + f'<p style="{_P}">Please contact us to arrange pickup or confirm delivery details.</p>'
        + _button(data.order_url, "View Order Details")
    )
    return f"Order {data.reference} is ready for pickup!", _wrap(content, data.site_url)


def order_cancelled(data: OrderEmailData) -> tuple[str, str]:
    content = (
        f'<h2 style="{_H2}">Order Cancelled</h2>'
        f'<p style="{_P}">Your order <strong>#{escape(data.order_number)}</strong> has been cancelled.</p>'
        + _order_info(data, "Cancelled")
        + f'<p style="{_P}">If you have any questions about this cancellation, please contact '
        "our support team.</p>"
        + _button(data.order_url, "View Order Details")
    )
    return f"Order {data.reference} has been cancelled", _wrap(content, data.site_url)


def custom_update(data: OrderEmailData) -> tuple[str, str]:
    content = (
        f'<h2 style="{_H2}">Order Update</h2>'
        f'<p style="{_P}">We have an update regarding your order '
        f"<strong>#{escape(data.order_number)}</strong>.</p>"
        + _order_info(data)
        + _message_box(data.custom_message)
        + _button(data.order_url, "View Order Details")
        + f'<p style="{_P_MUTED}">If you have any questions, please contact our support team.</p>'
    )
    return f"Order Update - #{data.order_number}", _wrap(content, data.site_url)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

def password_reset(name: str, reset_link: str, site_url: str) -> tuple[str, str]:
    content = (
        f'<h2 style="{_H2}">Reset Your Password</h2>'
        f'<p style="{_P}">Hi {escape(name)},</p>'
        f'<p style="{_P}">We received a request to reset the password for your Qiqi Partners '
        "account. Click the button below to choose a new password.</p>"
        + _button(reset_link, "Reset Password")
        + f'<p style="{_P_MUTED}">If you did not request a password reset, you can safely '
        "ignore this email. This link will expire for your security.</p>"
    )
    return "Reset your Qiqi Partners password", _wrap(content, site_url, "Password Reset")


def account_setup(name: str, setup_link: str, site_url: str) -> tuple[str, str]:
    content = (
        f'<h2 style="{_H2}">Welcome to Qiqi Partners</h2>'
        f'<p style="{_P}">Hi {escape(name)},</p>'
        f'<p style="{_P}">An account has been created for you on the Qiqi Partners portal. '
        "Click the button below to set your password and sign in.</p>"
        + _button(setup_link, "Set Up Your Account")
        + f'<p style="{_P_MUTED}">If you were not expecting this invitation, please contact '
        "our support team.</p>"
    )
    return "Welcome to Qiqi Partners - set up your account", _wrap(content, site_url, "Account Setup")


# ---------------------------------------------------------------------------
# Internal mailbox
# ---------------------------------------------------------------------------

def internal_new_order(data: OrderEmailData, placed_by: Optional[str] = None) -> tuple[str, str]:
    rows = "".join(
        f"<tr>"
        f'<td style="{_TD}">{escape(item.product_name)}</td>'
        f'<td style="{_TD}">{escape(item.sku or "")}</td>'
        f'<td style="{_TD} text-align: center;">{item.quantity}</td>'
        f'<td style="{_TD} text-align: right;">{format_money(item.total_price or 0)}</td>'
        f"</tr>"
        for item in data.items
    )
    created_by = placed_by or "Admin Created"
    content = (
        f'<h2 style="{_H2}">New Order Submitted</h2>'
        f'<p style="{_P}">A new order <strong>{escape(data.order_number)}</strong> was placed '
        f"for <strong>{escape(data.company_name)}</strong>.</p>"
        f'<p style="{_INFO}"><strong>Created By:</strong> {escape(created_by)}</p>'
        f'<p style="{_INFO}"><strong>Items:</strong> {len(data.items)} item(s)</p>'
        '<table width="100%" cellpadding="0" cellspacing="0" style="border: 1px solid #e5e7eb;">'
        f'<thead><tr style="background-color: #f8f9fa;">'
        f'<th style="{_TH} text-align: left;">Product</th>'
        f'<th style="{_TH} text-align: left;">SKU</th>'
        f'<th style="{_TH} text-align: center;">Qty</th>'
        f'<th style="{_TH} text-align: right;">Total</th></tr></thead>'
        f"<tbody>{rows}</tbody></table>"
        f'<p style="{_P} margin-top: 20px;"><strong>Order Total:</strong> '
        f"{format_money(data.total_amount or 0)}</p>"
        + _button(f"{data.site_url.rstrip('/')}/admin/orders/{data.order_id}", "Open in Admin")
    )
    subject = f"New Order: {data.order_number} - {data.company_name}"
    return subject, _wrap(content, data.site_url, "New Order")


def feedback(
    feedback_type: str,
    text: str,
    user_name: str,
    user_email: str,
    site_url: str,
    screenshot_attached: bool = False,
) -> tuple[str, str]:
    is_issue = feedback_type == "issue"
    if is_issue:
        subject = f"[{user_name}] sent an issue!"
    else:
        subject = f"[{user_name}] is sharing a feedback!"
    content = (
        f'<h2 style="{_H2}">{"Issue Report" if is_issue else "Feedback"}</h2>'
        f'<p style="{_INFO}"><strong>From:</strong> {escape(user_name)} '
        f"&lt;{escape(user_email)}&gt;</p>"
        f'<p style="{_INFO}"><strong>Type:</strong> {escape(feedback_type)}</p>'
        + _message_box(text)
    )
    if screenshot_attached:
        content += f'<p style="{_INFO}"><em>Screenshot attached</em></p>'
    return subject, _wrap(content, site_url, "Feedback")
