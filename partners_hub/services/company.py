"""Company service — admin management of partner companies."""


from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from partners_hub.core.pagination import PaginationParams
from partners_hub.core.security import Principal
from partners_hub.domain.company import Company
from partners_hub.repositories.company import CompanyRepository
from partners_hub.schemas.company import CompanyCreate, CompanyUpdate


class CompanyService:
    def __init__(self, session: AsyncSession):
        self._repo = CompanyRepository(session)

    async def _check_references(self, class_id: str | None, level_id: str | None) -> None:
        if class_id and not await self._repo.class_exists(class_id):
            raise ValidationError(f"Unknown class '{class_id}'")
        if level_id and not await self._repo.support_fund_level_exists(level_id):
            raise ValidationError(f"Unknown support fund level '{level_id}'")

    async def list_companies(self, pagination: PaginationParams):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            search=pagination.search,
        )

    async def get_company(self, company_id: str) -> Company:
        company = await self._repo.get_by_id(company_id)
        if not company:
            raise NotFoundError("Company", company_id)
        return company

    async def get_company_for(self, principal: Principal, company_id: str) -> Company:
        if not principal.can_access_company(company_id):
            raise ForbiddenError("You can only view your own company")
        return await self.get_company(company_id)

    async def create_company(self, data: CompanyCreate) -> Company:
        await self._check_references(data.class_id, data.support_fund_level_id)
        company = await self._repo.create(**data.model_dump(exclude_none=True))
        return await self.get_company(company.id)

    async def update_company(self, company_id: str, data: CompanyUpdate) -> Company:
        _ = await self.get_company(company_id)  # raises 404 if missing
        changes = data.model_dump(exclude_unset=True)
        await self._check_references(changes.get("class_id"), changes.get("support_fund_level_id"))
        updated = await self._repo.update(company_id, **changes)
        return updated  # type: ignore[return-value]

    async def delete_company(self, company_id: str) -> None:
        deleted = await self._repo.soft_delete(company_id)
        if not deleted:
            raise NotFoundError("Company", company_id)
