"""SQLAlchemy ORM models for orders, their line items, and their history."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partners_hub.db.base import Base
from partners_hub.domain.mixins import CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin


class OrderStatus:
    OPEN = "Open"
    IN_PROCESS = "In Process"
    DONE = "Done"
    CANCELLED = "Cancelled"
    DRAFT = "Draft"

    # Drafts are only ever written by the draft save, never set by hand
    SETTABLE = (OPEN, IN_PROCESS, DONE, CANCELLED)
    DELETABLE = (DRAFT, CANCELLED)


class Order(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "orders"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Client who placed the order; NULL when an admin created it for the company
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    po_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    so_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), default=OrderStatus.OPEN, nullable=False, index=True
    )
    # Overwritten with the post-redemption total when support fund is redeemed
    total_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"), nullable=False)
    support_fund_used: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), default=Decimal("0"), nullable=False
    )

    company: Mapped["Company"] = relationship(lazy="joined")
    client: Mapped[Optional["Client"]] = relationship(lazy="joined")
    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderItem.sort_order",
    )

    @property
    def display_number(self) -> str:
        return self.po_number or f"Order-{self.id[:8]}"

    @property
    def support_fund_items(self) -> list["OrderItem"]:
        return [item for item in self.items if item.is_support_fund_item]


class OrderItem(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "order_items"

    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    # Units, not cases
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    is_support_fund_item: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship(lazy="joined")


class OrderHistory(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """Append-only log of what happened to an order (never updated or deleted)."""

    __tablename__ = "order_history"

    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # "created" | "draft_saved" | "items_updated" | "status_change" | "support_fund_redeemed" | "notification"
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status_from: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status_to: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    changed_by_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    changed_by_name: Mapped[str] = mapped_column(String(255), default="System", nullable=False)
    # "admin" | "client" | "system"
    changed_by_role: Mapped[str] = mapped_column(String(20), default="system", nullable=False)
    metadata_: Mapped[Optional[Any]] = mapped_column("metadata", JSON, nullable=True)
