"""Product service — catalog management and the per-company catalog view."""


import logging

from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.config import settings
from partners_hub.core.exceptions import ConflictError, NotFoundError, ValidationError
from partners_hub.core.pagination import PaginationParams
from partners_hub.domain.company import Company
from partners_hub.domain.product import PriceTier, Product
from partners_hub.repositories.product import ProductRepository
from partners_hub.schemas.product import CatalogProductOut, ProductCreate, ProductUpdate
from partners_hub.services.pricing import resolve_price_tier, unit_price_for
from partners_hub.services.storage import BUCKET_PRODUCT_IMAGES, StorageClient, safe_file_name

logger = logging.getLogger(__name__)

_IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp", "image/gif"}


class ProductService:
    def __init__(self, session: AsyncSession):
        self._repo = ProductRepository(session)

    async def list_products(self, pagination: PaginationParams, enabled: bool | None = None):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"enable": enabled} if enabled is not None else None,
            search=pagination.search,
        )

    async def get_product(self, product_id: str) -> Product:
        product = await self._repo.get_by_id(product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    async def create_product(self, data: ProductCreate) -> Product:
        if await self._repo.get_by_sku(data.sku):
            raise ConflictError(f"A product with SKU '{data.sku}' already exists")
        return await self._repo.create(**data.model_dump(exclude_none=True))

    async def update_product(self, product_id: str, data: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        changes = data.model_dump(exclude_unset=True)
        for key in ("price_americas", "price_international", "case_pack", "sku", "item_name"):
            if key in changes and changes[key] is None:
                raise ValidationError(f"{key} cannot be cleared")
        if changes.get("sku") and changes["sku"] != product.sku:
            existing = await self._repo.get_by_sku(changes["sku"])
            if existing is not None:
                raise ConflictError(f"A product with SKU '{changes['sku']}' already exists")
        updated = await self._repo.update(product_id, **changes)
        return updated  # type: ignore[return-value]

    async def delete_product(self, product_id: str) -> None:
        deleted = await self._repo.soft_delete(product_id)
        if not deleted:
            raise NotFoundError("Product", product_id)

    async def upload_image(
        self,
        product_id: str,
        storage: StorageClient,
        *,
        file_name: str,
        content: bytes,
        content_type: str,
    ) -> Product:
        product = await self.get_product(product_id)
        if content_type not in _IMAGE_TYPES:
            raise ValidationError(f"Unsupported image type '{content_type}'")
        if len(content) > settings.max_upload_size_bytes:
            raise ValidationError(f"Image exceeds {settings.max_upload_size_mb} MB limit")

        path = f"{product.id}/{safe_file_name(file_name)}"
        await storage.upload(BUCKET_PRODUCT_IMAGES, path, content, content_type, upsert=True)
        url = storage.public_url(BUCKET_PRODUCT_IMAGES, path)
        return await self._repo.update(product_id, picture_url=url)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def catalog_for(
        self, company: Company, search: str | None = None
    ) -> tuple[PriceTier, list[CatalogProductOut]]:
        tier = resolve_price_tier(company.class_name)
        products = await self._repo.list_catalog(tier, search=search)
        logger.debug("Catalog for %s (%s): %d products", company.id, tier.value, len(products))
        return tier, [
            CatalogProductOut(
                id=p.id,
                sku=p.sku,
                item_name=p.item_name,
                upc=p.upc,
                size=p.size,
                category_id=p.category_id,
                category_name=p.category.name if p.category else None,
                case_pack=p.case_pack,
                unit_price=unit_price_for(p, tier),
                list_in_support_funds=p.list_in_support_funds,
                picture_url=p.picture_url,
            )
            for p in products
        ]
