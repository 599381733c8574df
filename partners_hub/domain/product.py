"""SQLAlchemy ORM models for the product catalog."""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partners_hub.db.base import Base
from partners_hub.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class PriceTier(str, enum.Enum):
    """Which of a product's two stored prices (and visibility flags) applies."""

    AMERICAS = "americas"
    INTERNATIONAL = "international"


class Category(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class Product(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "products"

    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    upc: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    size: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Two price tiers, chosen by the ordering company's class
    price_americas: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    price_international: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    case_pack: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    enable: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    list_in_support_funds: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    visible_to_americas: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    visible_to_international: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    picture_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    category: Mapped[Optional[Category]] = relationship(lazy="joined")
