"""Company note repositories."""


from sqlalchemy import select
from sqlalchemy.orm import joinedload

from partners_hub.domain.note import CompanyNote, NoteAttachment
from partners_hub.repositories.base import BaseRepository


class CompanyNoteRepository(BaseRepository[CompanyNote]):
    model = CompanyNote

    async def list_for_company(
        self, company_id: str, *, client_visible_only: bool = False
    ) -> list[CompanyNote]:
        q = self._base_query().where(CompanyNote.company_id == company_id)
        if client_visible_only:
            q = q.where(CompanyNote.client_visible.is_(True))
        q = q.order_by(CompanyNote.created_at.desc())
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def get_fresh(self, note_id: str) -> CompanyNote | None:
        result = await self._session.execute(
            self._base_query()
            .where(CompanyNote.id == note_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()


class NoteAttachmentRepository(BaseRepository[NoteAttachment]):
    model = NoteAttachment

    async def get_with_note(self, attachment_id: str) -> NoteAttachment | None:
        result = await self._session.execute(
            select(NoteAttachment)
            .options(joinedload(NoteAttachment.note))
            .where(NoteAttachment.id == attachment_id)
        )
        return result.scalars().first()
