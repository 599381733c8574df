"""Client and admin profile repositories."""


from sqlalchemy import func, select

from partners_hub.domain.user import Admin, Client
from partners_hub.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    model = Client
    search_columns = ("name", "email")

    async def get_by_email(self, email: str) -> Client | None:
        result = await self._session.execute(
            self._base_query().where(func.lower(Client.email) == email.lower())
        )
        return result.unique().scalars().first()


class AdminRepository(BaseRepository[Admin]):
    model = Admin

    async def get_by_email(self, email: str) -> Admin | None:
        result = await self._session.execute(
            self._base_query().where(func.lower(Admin.email) == email.lower())
        )
        return result.scalars().first()

    async def get_active(self, admin_id: str) -> Admin | None:
        result = await self._session.execute(
            select(Admin)
            .where(Admin.id == admin_id)
            .where(Admin.deleted_at.is_(None))
        )
        return result.scalars().first()
