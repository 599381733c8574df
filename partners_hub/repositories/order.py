"""Order, order item, and order history repositories."""


from sqlalchemy import delete, select

from partners_hub.domain.order import Order, OrderHistory, OrderStatus
from partners_hub.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    model = Order
    search_columns = ("po_number", "so_number")

    async def get_with_items(self, order_id: str) -> Order | None:
        """Load the order fresh from the database, replacing any stale identity-map copy."""
        result = await self._session.execute(
            self._base_query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalars().first()

    async def get_draft(self, company_id: str, user_id: str | None) -> Order | None:
        """Most recent draft for the company, owned by *user_id* (None for admin drafts)."""
        owner = Order.user_id.is_(None) if user_id is None else Order.user_id == user_id
        result = await self._session.execute(
            self._base_query()
            .where(Order.company_id == company_id, Order.status == OrderStatus.DRAFT, owner)
            .order_by(Order.created_at.desc())
            .limit(1)
        )
        return result.unique().scalars().first()

    async def add(self, order: Order) -> Order:
        self._session.add(order)
        await self._session.flush()
        return order


class OrderHistoryRepository(BaseRepository[OrderHistory]):
    model = OrderHistory

    async def list_for_order(self, order_id: str) -> list[OrderHistory]:
        result = await self._session.execute(
            select(OrderHistory)
            .where(OrderHistory.order_id == order_id)
            .order_by(OrderHistory.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete_for_order(self, order_id: str) -> int:
        result = await self._session.execute(
            delete(OrderHistory).where(OrderHistory.order_id == order_id)
        )
        return result.rowcount
