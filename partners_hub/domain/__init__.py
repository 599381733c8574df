"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  company.py  — Company plus its class and support-fund level
  product.py  — Catalog products and categories
  order.py    — Orders, line items, order history
  user.py     — Client / Admin profiles keyed by auth user id
  note.py     — Company notes, attachments, replies
  audit.py    — Immutable audit trail (never updated or deleted)
  mixins.py   — Shared id / timestamp columns
"""

from partners_hub.domain.audit import AuditTrail
from partners_hub.domain.company import Company, CompanyClass, SupportFundLevel
from partners_hub.domain.note import CompanyNote, NoteAttachment, NoteReply
from partners_hub.domain.order import Order, OrderHistory, OrderItem, OrderStatus
from partners_hub.domain.product import Category, PriceTier, Product
from partners_hub.domain.user import Admin, Client

__all__ = [
    "Admin",
    "AuditTrail",
    "Category",
    "Client",
    "Company",
    "CompanyClass",
    "CompanyNote",
    "NoteAttachment",
    "NoteReply",
    "Order",
    "OrderHistory",
    "OrderItem",
    "OrderStatus",
    "PriceTier",
    "Product",
    "SupportFundLevel",
]
