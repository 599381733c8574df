"""Order router — order entry, drafts, edits, status, history, and support-fund redemption.

Lifecycle emails are queued as background tasks only after the session has
committed, so the task (which opens its own session) sees the new state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.pagination import PaginationParams
from partners_hub.core.response import DataResponse, ListResponse, paginated
from partners_hub.core.security import Principal, get_current_principal, require_admin
from partners_hub.db.base import get_db
from partners_hub.schemas.order import (
    OrderCreate,
    OrderDraftSave,
    OrderHistoryOut,
    OrderItemsUpdate,
    OrderOut,
    OrderStatusUpdate,
    OrderSummaryOut,
    SupportFundRedeem,
    SupportFundResultOut,
    SupportFundSummaryOut,
)
from partners_hub.services.notification import EVENT_CREATED, dispatch_order_email
from partners_hub.services.order import OrderService
from partners_hub.services.support_fund import REDEMPTION_MESSAGE, SupportFundService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=ListResponse[OrderSummaryOut])
async def list_orders(
    filter_status: Optional[str] = Query(default=None, alias="status", description="Filter by status"),
    company_id: Optional[str] = Query(default=None, alias="companyId", description="Admin only"),
    pagination: PaginationParams = Depends(),
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """List orders (paginated). Clients only ever see their own company's orders."""
    items, total = await OrderService(session).list_orders(
        principal, pagination, status=filter_status, company_id=company_id
    )
    return paginated(
        [OrderSummaryOut.model_validate(o) for o in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[OrderOut], status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    background: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Create an order from case quantities; prices come from the company's tier."""
    order = await OrderService(session).create_order(principal, body)
    await session.commit()
    if body.notify:
        background.add_task(dispatch_order_email, order.id, EVENT_CREATED)
    return {"data": OrderOut.from_order(order)}


@router.put("/draft", response_model=DataResponse[OrderOut])
async def save_draft(
    body: OrderDraftSave,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Create or overwrite the caller's draft for the company. No email is sent."""
    order = await OrderService(session).save_draft(principal, body)
    return {"data": OrderOut.from_order(order)}


@router.get("/{order_id}", response_model=DataResponse[OrderOut])
async def get_order(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    order = await OrderService(session).get_order(principal, order_id)
    return {"data": OrderOut.from_order(order)}


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Only Draft and Cancelled orders can be deleted."""
    await OrderService(session).delete_order(principal, order_id)


@router.put("/{order_id}/items", response_model=DataResponse[OrderOut])
async def replace_order_items(
    order_id: str,
    body: OrderItemsUpdate,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    order = await OrderService(session).replace_items(principal, order_id, body.items)
    return {"data": OrderOut.from_order(order)}


@router.patch("/{order_id}/status", response_model=DataResponse[OrderOut])
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    background: BackgroundTasks,
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    order, event = await OrderService(session).update_status(principal, order_id, body)
    await session.commit()
    if event:
        background.add_task(dispatch_order_email, order.id, event)
    return {"data": OrderOut.from_order(order)}


@router.get("/{order_id}/history", response_model=DataResponse[list[OrderHistoryOut]])
async def get_order_history(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    entries = await OrderService(session).get_history(principal, order_id)
    return {"data": [OrderHistoryOut.model_validate(e) for e in entries]}


# ------------------------------------------------------------------
# Support fund
# ------------------------------------------------------------------

@router.get("/{order_id}/support-fund", response_model=DataResponse[SupportFundSummaryOut])
async def get_support_fund(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Earned / used / remaining credit and the products it can be spent on."""
    summary = await SupportFundService(session).summary(principal, order_id)
    return {"data": summary}


@router.post("/{order_id}/support-fund", response_model=DataResponse[SupportFundResultOut])
async def redeem_support_fund(
    order_id: str,
    body: SupportFundRedeem,
    background: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Redeem credit once; the order total becomes the post-credit amount."""
    redemption = await SupportFundService(session).redeem(principal, order_id, body.items)
    await session.commit()
    background.add_task(dispatch_order_email, order_id, EVENT_CREATED, REDEMPTION_MESSAGE)

    totals = redemption.totals
    return {
        "data": SupportFundResultOut(
            order=OrderOut.from_order(redemption.order),
            earned=totals.earned,
            used=totals.used,
            remaining=totals.remaining,
            final_total=totals.final_total,
        )
    }
