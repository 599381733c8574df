"""Product router — admin catalog management and the per-company catalog."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.exceptions import ValidationError
from partners_hub.core.pagination import PaginationParams
from partners_hub.core.response import DataResponse, ListResponse, paginated
from partners_hub.core.security import Principal, get_current_principal, require_admin
from partners_hub.db.base import get_db
from partners_hub.schemas.product import CatalogOut, ProductCreate, ProductOut, ProductUpdate
from partners_hub.services.company import CompanyService
from partners_hub.services.product import ProductService
from partners_hub.services.storage import StorageClient, get_storage

router = APIRouter(prefix="/products", tags=["Products"])
catalog_router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("", response_model=ListResponse[ProductOut])
async def list_products(
    enabled: Optional[bool] = Query(default=None, description="Filter by enable flag"),
    pagination: PaginationParams = Depends(),
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    """List products (paginated). ?search= matches SKU, name and UPC."""
    items, total = await ProductService(session).list_products(pagination, enabled=enabled)
    return paginated(
        [ProductOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[ProductOut], status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    product = await ProductService(session).create_product(body)
    return {"data": ProductOut.model_validate(product)}


@router.get("/{product_id}", response_model=DataResponse[ProductOut])
async def get_product(
    product_id: str,
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    product = await ProductService(session).get_product(product_id)
    return {"data": ProductOut.model_validate(product)}


@router.put("/{product_id}", response_model=DataResponse[ProductOut])
async def update_product(
    product_id: str,
    body: ProductUpdate,
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    product = await ProductService(session).update_product(product_id, body)
    return {"data": ProductOut.model_validate(product)}


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    await ProductService(session).delete_product(product_id)


@router.post("/{product_id}/image", response_model=DataResponse[ProductOut])
async def upload_product_image(
    product_id: str,
    file: UploadFile = File(..., description="PNG, JPEG, WebP or GIF image"),
    _: Principal = Depends(require_admin),
    storage: StorageClient = Depends(get_storage),
    session: AsyncSession = Depends(get_db),
):
    content = await file.read()
    product = await ProductService(session).upload_image(
        product_id,
        storage,
        file_name=file.filename or "image",
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )
    return {"data": ProductOut.model_validate(product)}


@catalog_router.get("", response_model=DataResponse[CatalogOut])
async def get_catalog(
    company_id: Optional[str] = Query(default=None, alias="companyId"),
    search: Optional[str] = Query(default=None, max_length=100),
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Enabled products visible to the company's class, priced at its tier."""
    if principal.is_admin:
        if not company_id:
            raise ValidationError("companyId is required for admins")
    else:
        company_id = company_id or principal.company_id
        if company_id is None:
            raise ValidationError("Your account is not linked to a company")

    company = await CompanyService(session).get_company_for(principal, company_id)
    tier, products = await ProductService(session).catalog_for(company, search=search)
    return {"data": CatalogOut(company_id=company.id, price_tier=tier.value, products=products)}
