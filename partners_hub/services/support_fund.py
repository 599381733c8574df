"""Support fund service — credit summary and one-time redemption per order.

A company earns ``percent`` of an order's total as credit and may spend it,
once, on support-fund products added to the same order at no charge. The
redemption rewrites the order total to the post-credit amount, so the
original total is ``total_value + support_fund_used`` afterwards.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.exceptions import ConflictError, ForbiddenError, ValidationError
from partners_hub.core.security import Principal
from partners_hub.domain.order import Order, OrderStatus
from partners_hub.repositories.product import ProductRepository
from partners_hub.schemas.order import OrderLineIn, SupportFundProductOut, SupportFundSummaryOut
from partners_hub.services.order import OrderService, history_entry, items_from_lines
from partners_hub.services.pricing import (
    ZERO,
    SupportFundTotals,
    compute_support_fund_totals,
    max_redeemable_cases,
    resolve_price_tier,
    set_case_qty,
    support_fund_earned,
    unit_price_for,
)

logger = logging.getLogger(__name__)

REDEMPTION_MESSAGE = "Order completed with support fund redemption"


@dataclass
class Redemption:
    order: Order
    totals: SupportFundTotals


def is_redeemed(order: Order) -> bool:
    return order.support_fund_used > ZERO or bool(order.support_fund_items)


class SupportFundService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._orders = OrderService(session)
        self._products = ProductRepository(session)

    async def summary(self, principal: Principal, order_id: str) -> SupportFundSummaryOut:
        order = await self._orders.get_order(principal, order_id)
        company = order.company
        percent = company.support_fund_percent
        tier = resolve_price_tier(company.class_name)

        redeemed = is_redeemed(order)
        used = order.support_fund_used if redeemed else ZERO
        original_total = order.total_value + used
        earned = support_fund_earned(original_total, percent)
        remaining = earned - used

        products = []
        if not redeemed:
            for product in await self._products.list_support_fund_eligible(tier):
                unit_price = unit_price_for(product, tier)
                products.append(
                    SupportFundProductOut(
                        id=product.id,
                        sku=product.sku,
                        item_name=product.item_name,
                        size=product.size,
                        case_pack=product.case_pack,
                        unit_price=unit_price,
                        picture_url=product.picture_url,
                        max_cases=max_redeemable_cases(remaining, unit_price, product.case_pack),
                    )
                )

        return SupportFundSummaryOut(
            order_id=order.id,
            percent=percent,
            earned=earned,
            used=used,
            remaining=remaining,
            original_total=original_total,
            final_total=original_total - used,
            redeemed=redeemed,
            products=products,
        )

    async def redeem(
        self, principal: Principal, order_id: str, requested: list[OrderLineIn]
    ) -> Redemption:
        """Spend the order's credit on support-fund products.

        Everything is written through the request session, so the new total,
        the redeemed lines, and the history entry commit or roll back together.
        """
        order = await self._orders.get_order(principal, order_id)
        if not principal.is_admin and order.user_id != principal.user_id:
            raise ForbiddenError("Only the client who placed this order can redeem its support fund")
        if order.status != OrderStatus.OPEN:
            raise ConflictError(f"Support fund can only be redeemed on open orders (order is {order.status})")
        if is_redeemed(order):
            raise ConflictError("Support fund has already been redeemed for this order")

        company = order.company
        tier = resolve_price_tier(company.class_name)
        eligible = {p.id: p for p in await self._products.list_support_fund_eligible(tier)}

        lines = []
        for req in requested:
            product = eligible.get(req.product_id)
            if product is None:
                raise ValidationError(f"Product '{req.product_id}' is not eligible for support fund")
            lines = set_case_qty(lines, product, req.case_qty, tier)
        if not lines:
            raise ValidationError("Select at least one support fund product")

        totals = compute_support_fund_totals(order.total_value, company.support_fund_percent, lines)
        if totals.overspent:
            raise ValidationError(
                f"Support fund selection (${totals.used:,.2f}) exceeds available credit "
                f"(${totals.earned:,.2f})"
            )

        start = max((item.sort_order for item in order.items), default=-1) + 1
        order.items.extend(items_from_lines(lines, support_fund=True, start=start))
        order.total_value = totals.final_total
        order.support_fund_used = totals.used
        self._session.add(
            history_entry(
                order.id,
                "support_fund_redeemed",
                principal,
                notes=f"Redeemed ${totals.used:,.2f} of ${totals.earned:,.2f} support fund credit",
                metadata_={
                    "percent": str(totals.percent),
                    "earned": str(totals.earned),
                    "used": str(totals.used),
                    "remaining": str(totals.remaining),
                    "original_total": str(totals.original_total),
                    "final_total": str(totals.final_total),
                },
            )
        )
        await self._session.flush()
        logger.info(
            "Order %s redeemed %s support fund (final total %s)", order.id, totals.used, totals.final_total
        )

        refreshed = await self._orders.get_order(principal, order.id)
        return Redemption(order=refreshed, totals=totals)
