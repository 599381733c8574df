"""Company router — admin management; clients may read their own company."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.pagination import PaginationParams
from partners_hub.core.response import DataResponse, ListResponse, paginated
from partners_hub.core.security import Principal, get_current_principal, require_admin
from partners_hub.db.base import get_db
from partners_hub.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate
from partners_hub.services.company import CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=ListResponse[CompanyOut])
async def list_companies(
    pagination: PaginationParams = Depends(),
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    """List companies (paginated). ?search= matches name and NetSuite number."""
    items, total = await CompanyService(session).list_companies(pagination)
    return paginated(
        [CompanyOut.model_validate(c) for c in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[CompanyOut], status_code=status.HTTP_201_CREATED)
async def create_company(
    body: CompanyCreate,
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    company = await CompanyService(session).create_company(body)
    return {"data": CompanyOut.model_validate(company)}


@router.get("/{company_id}", response_model=DataResponse[CompanyOut])
async def get_company(
    company_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    company = await CompanyService(session).get_company_for(principal, company_id)
    return {"data": CompanyOut.model_validate(company)}


@router.put("/{company_id}", response_model=DataResponse[CompanyOut])
async def update_company(
    company_id: str,
    body: CompanyUpdate,
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    company = await CompanyService(session).update_company(company_id, body)
    return {"data": CompanyOut.model_validate(company)}


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
    company_id: str,
    _: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    await CompanyService(session).delete_company(company_id)
