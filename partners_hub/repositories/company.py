"""Company repository."""


from sqlalchemy import func, select

from partners_hub.domain.company import Company, CompanyClass, SupportFundLevel
from partners_hub.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    model = Company
    search_columns = ("company_name", "netsuite_number")

    async def class_exists(self, class_id: str) -> bool:
        result = await self._session.execute(
            select(func.count()).select_from(CompanyClass).where(CompanyClass.id == class_id)
        )
        return result.scalar_one() > 0

    async def support_fund_level_exists(self, level_id: str) -> bool:
        result = await self._session.execute(
            select(func.count())
            .select_from(SupportFundLevel)
            .where(SupportFundLevel.id == level_id)
        )
        return result.scalar_one() > 0
