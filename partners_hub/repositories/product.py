"""Product repository — catalog queries filtered by class visibility."""


from sqlalchemy import select

from partners_hub.domain.product import Category, PriceTier, Product
from partners_hub.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    model = Product
    search_columns = ("sku", "item_name", "upc")

    def _visible_query(self, tier: PriceTier):
        flag = (
            Product.visible_to_international
            if tier is PriceTier.INTERNATIONAL
            else Product.visible_to_americas
        )
        return self._base_query().where(Product.enable.is_(True)).where(flag.is_(True))

    async def list_catalog(self, tier: PriceTier, *, search: str | None = None) -> list[Product]:
        """Enabled products visible to the tier, grouped by category order then name."""
        q = self._apply_search(self._visible_query(tier), search)
        q = q.outerjoin(Category, Product.category_id == Category.id).order_by(
            Category.sort_order.is_(None), Category.sort_order, Product.item_name
        )
        result = await self._session.execute(q)
        return list(result.unique().scalars().all())

    async def list_support_fund_eligible(self, tier: PriceTier) -> list[Product]:
        q = (
            self._visible_query(tier)
            .where(Product.list_in_support_funds.is_(True))
            .order_by(Product.item_name.asc())
        )
        result = await self._session.execute(q)
        return list(result.unique().scalars().all())

    async def get_many(self, product_ids: list[str]) -> dict[str, Product]:
        if not product_ids:
            return {}
        result = await self._session.execute(
            self._base_query().where(Product.id.in_(product_ids))
        )
        return {p.id: p for p in result.unique().scalars().all()}

    async def get_by_sku(self, sku: str) -> Product | None:
        result = await self._session.execute(select(Product).where(Product.sku == sku))
        return result.unique().scalars().first()
