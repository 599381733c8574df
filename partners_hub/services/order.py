"""Order service — order entry, line replacement, status transitions, history.

Clients order for their own company only; admins may act on any company's
orders. Prices are always taken from the catalog at the company's tier, never
from the request.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from partners_hub.core.pagination import PaginationParams
from partners_hub.core.security import Principal
from partners_hub.domain.company import Company
from partners_hub.domain.order import Order, OrderHistory, OrderItem, OrderStatus
from partners_hub.domain.product import PriceTier
from partners_hub.repositories.company import CompanyRepository
from partners_hub.repositories.order import OrderHistoryRepository, OrderRepository
from partners_hub.repositories.product import ProductRepository
from partners_hub.schemas.order import OrderCreate, OrderDraftSave, OrderLineIn, OrderStatusUpdate
from partners_hub.services.notification import STATUS_EVENTS
from partners_hub.services.pricing import (
    LineItem,
    ZERO,
    is_visible_to,
    lines_total,
    resolve_price_tier,
    set_case_qty,
)

logger = logging.getLogger(__name__)


def history_entry(
    order_id: str, action_type: str, actor: Optional[Principal], **fields
) -> OrderHistory:
    if actor is None:
        return OrderHistory(order_id=order_id, action_type=action_type, **fields)
    return OrderHistory(
        order_id=order_id,
        action_type=action_type,
        changed_by_id=actor.user_id,
        changed_by_name=actor.name,
        changed_by_role=actor.role,
        **fields,
    )


def items_from_lines(lines: Iterable[LineItem], *, support_fund: bool, start: int = 0) -> list[OrderItem]:
    return [
        OrderItem(
            product_id=line.product_id,
            product=line.product,
            quantity=line.total_units,
            unit_price=line.unit_price,
            total_price=line.total_price,
            is_support_fund_item=support_fund,
            sort_order=start + i,
        )
        for i, line in enumerate(lines)
    ]


class OrderService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = OrderRepository(session)
        self._history = OrderHistoryRepository(session)
        self._companies = CompanyRepository(session)
        self._products = ProductRepository(session)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _company_for_new_order(self, principal: Principal, requested: Optional[str]) -> Company:
        if principal.is_admin:
            if not requested:
                raise ValidationError("companyId is required when an admin creates an order")
            company_id = requested
        else:
            if principal.company_id is None:
                raise ForbiddenError("Your account is not linked to a company")
            if requested and requested != principal.company_id:
                raise ForbiddenError("You can only order for your own company")
            company_id = principal.company_id

        company = await self._companies.get_by_id(company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    async def build_lines(
        self, tier: PriceTier, requested: list[OrderLineIn], *, allow_empty: bool = False
    ) -> list[LineItem]:
        """Turn requested case quantities into priced lines for *tier*.

        Every product must exist, be enabled, and be visible to the tier. A
        product listed twice keeps its last quantity. Only drafts may end up
        with no lines.
        """
        products = await self._products.get_many([r.product_id for r in requested])
        lines: list[LineItem] = []
        for req in requested:
            product = products.get(req.product_id)
            if product is None:
                raise ValidationError(f"Unknown product '{req.product_id}'")
            if not product.enable or not is_visible_to(product, tier):
                raise ValidationError(f"Product '{product.sku}' is not available to this company")
            lines = set_case_qty(lines, product, req.case_qty, tier)
        if not lines and not allow_empty:
            raise ValidationError("An order needs at least one product with a quantity above zero")
        return lines

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_order(self, principal: Principal, order_id: str) -> Order:
        order = await self._repo.get_with_items(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        if not principal.can_access_company(order.company_id):
            raise ForbiddenError("You do not have access to this order")
        return order

    async def list_orders(
        self,
        principal: Principal,
        pagination: PaginationParams,
        *,
        status: Optional[str] = None,
        company_id: Optional[str] = None,
    ):
        if not principal.is_admin:
            if principal.company_id is None:
                return [], 0
            company_id = principal.company_id
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"status": status, "company_id": company_id},
            search=pagination.search,
        )

    async def get_history(self, principal: Principal, order_id: str) -> list[OrderHistory]:
        await self.get_order(principal, order_id)
        return await self._history.list_for_order(order_id)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create_order(self, principal: Principal, data: OrderCreate) -> Order:
        company = await self._company_for_new_order(principal, data.company_id)
        tier = resolve_price_tier(company.class_name)
        lines = await self.build_lines(tier, data.items)

        order = Order(
            company_id=company.id,
            user_id=None if principal.is_admin else principal.user_id,
            po_number=data.po_number,
            status=OrderStatus.OPEN,
            total_value=lines_total(lines),
            support_fund_used=ZERO,
        )
        order.items = items_from_lines(lines, support_fund=False)
        await self._repo.add(order)
        self._session.add(
            history_entry(
                order.id,
                "created",
                principal,
                status_to=OrderStatus.OPEN,
                notes=f"Order created with {len(lines)} line(s)",
                metadata_={"total_value": str(order.total_value), "price_tier": tier.value},
            )
        )
        await self._session.flush()
        logger.info("Order %s created for company %s (%s)", order.id, company.id, order.total_value)
        return await self._repo.get_with_items(order.id)  # type: ignore[return-value]

    async def save_draft(self, principal: Principal, data: OrderDraftSave) -> Order:
        """Create or overwrite the caller's single draft for the company.

        Each save replaces the draft's lines and total wholesale.
        """
        company = await self._company_for_new_order(principal, data.company_id)
        tier = resolve_price_tier(company.class_name)
        lines = await self.build_lines(tier, data.items, allow_empty=True)
        user_id = None if principal.is_admin else principal.user_id

        order = await self._repo.get_draft(company.id, user_id)
        created = order is None
        if created:
            order = Order(
                company_id=company.id,
                user_id=user_id,
                status=OrderStatus.DRAFT,
                support_fund_used=ZERO,
            )
        order.po_number = data.po_number
        order.items = items_from_lines(lines, support_fund=False)
        order.total_value = lines_total(lines)
        if created:
            await self._repo.add(order)

        self._session.add(
            history_entry(
                order.id,
                "draft_saved",
                principal,
                status_to=OrderStatus.DRAFT if created else None,
                notes=f"Draft saved with {len(lines)} line(s)",
                metadata_={"total_value": str(order.total_value), "price_tier": tier.value},
            )
        )
        await self._session.flush()
        logger.debug("Draft %s saved for company %s (%s)", order.id, company.id, order.total_value)
        return await self._repo.get_with_items(order.id)  # type: ignore[return-value]

    async def delete_order(self, principal: Principal, order_id: str) -> None:
        """Remove a draft or cancelled order together with its lines and history."""
        order = await self.get_order(principal, order_id)
        if order.status not in OrderStatus.DELETABLE:
            raise ForbiddenError(
                f'Cannot delete order with status "{order.status}". '
                "Only Cancelled or Draft orders can be deleted."
            )
        if not principal.is_admin and order.user_id != principal.user_id:
            raise ForbiddenError("You can only delete your own orders")

        await self._history.delete_for_order(order.id)
        await self._repo.hard_delete(order)
        logger.info("Order %s (%s) deleted by %s", order_id, order.status, principal.user_id)

    async def replace_items(
        self, principal: Principal, order_id: str, requested: list[OrderLineIn]
    ) -> Order:
        """Replace the regular lines of an open, unredeemed order."""
        order = await self.get_order(principal, order_id)
        if order.status != OrderStatus.OPEN:
            raise ConflictError(f"Only open orders can be edited (order is {order.status})")
        if order.support_fund_used > ZERO or order.support_fund_items:
            raise ConflictError("Items cannot be changed after support fund redemption")

        tier = resolve_price_tier(order.company.class_name)
        lines = await self.build_lines(tier, requested)
        previous_total = order.total_value

        order.items = items_from_lines(lines, support_fund=False)
        order.total_value = lines_total(lines)
        self._session.add(
            history_entry(
                order.id,
                "items_updated",
                principal,
                notes=f"Items replaced ({len(lines)} line(s))",
                metadata_={"previous_total": str(previous_total), "total_value": str(order.total_value)},
            )
        )
        await self._session.flush()
        return await self._repo.get_with_items(order.id)  # type: ignore[return-value]

    async def update_status(
        self, principal: Principal, order_id: str, data: OrderStatusUpdate
    ) -> tuple[Order, Optional[str]]:
        """Apply a status change; returns the order and the email event to send, if any."""
        order = await self.get_order(principal, order_id)
        previous = order.status
        changed = data.status != previous

        if not changed and data.so_number is None and not data.notes:
            raise ValidationError(f"Order is already {previous}")

        order.status = data.status
        if data.so_number is not None:
            order.so_number = data.so_number or None
        self._session.add(
            history_entry(
                order.id,
                "status_change" if changed else "updated",
                principal,
                status_from=previous,
                status_to=data.status,
                notes=data.notes,
                metadata_={"so_number": order.so_number} if data.so_number is not None else None,
            )
        )
        await self._session.flush()
        logger.info("Order %s status %s -> %s by %s", order.id, previous, data.status, principal.user_id)

        event = STATUS_EVENTS.get(data.status) if changed and data.notify else None
        return await self._repo.get_with_items(order.id), event  # type: ignore[return-value]
