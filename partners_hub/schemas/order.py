"""Order, order item, history, and support-fund Pydantic schemas."""


from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import Field, field_validator

from partners_hub.domain.order import OrderStatus
from partners_hub.schemas.common import CamelModel


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class OrderLineIn(CamelModel):
    """One product at a case quantity. Zero cases drops the line."""

    product_id: str
    case_qty: int = Field(ge=0)


class OrderCreate(CamelModel):
    # Required for admins; clients always order for their own company
    company_id: str | None = None
    po_number: str | None = Field(default=None, max_length=100)
    items: list[OrderLineIn] = Field(min_length=1)
    notify: bool = True


class OrderDraftSave(CamelModel):
    """Work in progress; may be saved with no lines at all."""

    company_id: str | None = None
    po_number: str | None = Field(default=None, max_length=100)
    items: list[OrderLineIn] = Field(default_factory=list)


class OrderItemsUpdate(CamelModel):
    items: list[OrderLineIn] = Field(min_length=1)


class OrderStatusUpdate(CamelModel):
    status: str
    so_number: str | None = Field(default=None, max_length=100)
    notes: str | None = None
    notify: bool = True

    @field_validator("status")
    @classmethod
    def _known_status(cls, value: str) -> str:
        if value not in OrderStatus.SETTABLE:
            raise ValueError(f"status must be one of: {', '.join(OrderStatus.SETTABLE)}")
        return value


class SupportFundRedeem(CamelModel):
    items: list[OrderLineIn] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class OrderItemOut(CamelModel):
    id: str
    product_id: str
    sku: str | None = None
    item_name: str | None = None
    case_pack: int | None = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    is_support_fund_item: bool
    sort_order: int

    @classmethod
    def from_item(cls, item) -> "OrderItemOut":
        product = item.product
        return cls(
            id=item.id,
            product_id=item.product_id,
            sku=product.sku if product else None,
            item_name=product.item_name if product else None,
            case_pack=product.case_pack if product else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
            is_support_fund_item=item.is_support_fund_item,
            sort_order=item.sort_order,
        )


class OrderOut(CamelModel):
    id: str
    company_id: str
    company_name: str | None = None
    user_id: str | None = None
    po_number: str | None = None
    so_number: str | None = None
    display_number: str
    status: str
    total_value: Decimal
    support_fund_used: Decimal
    items: list[OrderItemOut] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderOut":
        return cls(
            id=order.id,
            company_id=order.company_id,
            company_name=order.company.company_name if order.company else None,
            user_id=order.user_id,
            po_number=order.po_number,
            so_number=order.so_number,
            display_number=order.display_number,
            status=order.status,
            total_value=order.total_value,
            support_fund_used=order.support_fund_used,
            items=[OrderItemOut.from_item(i) for i in order.items],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderSummaryOut(CamelModel):
    """List row: the order without its lines."""

    id: str
    company_id: str
    user_id: str | None = None
    po_number: str | None = None
    so_number: str | None = None
    display_number: str
    status: str
    total_value: Decimal
    support_fund_used: Decimal
    created_at: datetime


class OrderHistoryOut(CamelModel):
    id: str
    order_id: str
    action_type: str
    status_from: str | None = None
    status_to: str | None = None
    notes: str | None = None
    changed_by_id: str | None = None
    changed_by_name: str
    changed_by_role: str
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="metadata_")
    created_at: datetime


class SupportFundProductOut(CamelModel):
    id: str
    sku: str
    item_name: str
    size: str | None = None
    case_pack: int
    unit_price: Decimal
    picture_url: str | None = None
    # None when the product costs nothing and any quantity fits
    max_cases: int | None = None


class SupportFundSummaryOut(CamelModel):
    order_id: str
    percent: Decimal
    earned: Decimal
    used: Decimal
    remaining: Decimal
    original_total: Decimal
    final_total: Decimal
    redeemed: bool
    products: list[SupportFundProductOut] = []


class SupportFundResultOut(CamelModel):
    order: OrderOut
    earned: Decimal
    used: Decimal
    remaining: Decimal
    final_total: Decimal
