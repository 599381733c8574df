"""Company notes service — admin notes, attachments, and replies."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.config import settings
from partners_hub.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from partners_hub.core.security import Principal
from partners_hub.domain.mixins import new_id
from partners_hub.domain.note import CompanyNote, NoteAttachment, NoteReply
from partners_hub.repositories.company import CompanyRepository
from partners_hub.repositories.note import CompanyNoteRepository, NoteAttachmentRepository
from partners_hub.schemas.note import NoteCreate
from partners_hub.services.storage import BUCKET_COMPANY_NOTES, StorageClient, safe_file_name

logger = logging.getLogger(__name__)

SIGNED_URL_TTL_SECONDS = 3600


def can_view(principal: Principal, note: CompanyNote) -> bool:
    if principal.is_admin:
        return True
    return note.client_visible and principal.company_id == note.company_id


class NoteService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._notes = CompanyNoteRepository(session)
        self._attachments = NoteAttachmentRepository(session)
        self._companies = CompanyRepository(session)

    async def _get_visible(self, principal: Principal, note_id: str) -> CompanyNote:
        note = await self._notes.get_by_id(note_id)
        # Hidden notes look missing to clients
        if note is None or not can_view(principal, note):
            raise NotFoundError("Note", note_id)
        return note

    async def list_notes(self, principal: Principal, company_id: str) -> list[CompanyNote]:
        if not principal.can_access_company(company_id):
            raise ForbiddenError("You can only view notes for your own company")
        return await self._notes.list_for_company(
            company_id, client_visible_only=not principal.is_admin
        )

    async def create_note(self, principal: Principal, company_id: str, data: NoteCreate) -> CompanyNote:
        if await self._companies.get_by_id(company_id) is None:
            raise NotFoundError("Company", company_id)
        note = await self._notes.create(
            company_id=company_id,
            title=data.title,
            body=data.body,
            client_visible=data.client_visible,
            author_id=principal.user_id,
            author_name=principal.name,
        )
        return await self._notes.get_fresh(note.id)  # type: ignore[return-value]

    async def add_attachment(
        self,
        note_id: str,
        storage: StorageClient,
        *,
        file_name: str,
        content: bytes,
        content_type: str,
    ) -> NoteAttachment:
        note = await self._notes.get_by_id(note_id)
        if note is None:
            raise NotFoundError("Note", note_id)
        if not content:
            raise ValidationError("Attachment is empty")
        if len(content) > settings.max_upload_size_bytes:
            raise ValidationError(f"Attachment exceeds {settings.max_upload_size_mb} MB limit")

        path = f"{note.company_id}/{note.id}/{new_id()}-{safe_file_name(file_name)}"
        await storage.upload(BUCKET_COMPANY_NOTES, path, content, content_type)
        try:
            attachment = await self._attachments.create(
                note_id=note.id,
                storage_path=path,
                file_name=file_name,
                content_type=content_type,
                file_size_bytes=len(content),
            )
        except Exception:
            logger.exception("Attachment row for %s failed; removing uploaded object", path)
            await storage.remove(BUCKET_COMPANY_NOTES, [path])
            raise
        logger.info("Attached %s to note %s", path, note.id)
        return attachment

    async def attachment_url(
        self, principal: Principal, attachment_id: str, storage: StorageClient
    ) -> str:
        attachment = await self._attachments.get_with_note(attachment_id)
        if attachment is None or not can_view(principal, attachment.note):
            raise NotFoundError("Attachment", attachment_id)
        return await storage.create_signed_url(
            BUCKET_COMPANY_NOTES, attachment.storage_path, SIGNED_URL_TTL_SECONDS
        )

    async def add_reply(self, principal: Principal, note_id: str, body: str) -> NoteReply:
        note = await self._get_visible(principal, note_id)
        reply = NoteReply(
            note_id=note.id,
            author_id=principal.user_id,
            author_name=principal.name,
            author_role=principal.role,
            body=body,
        )
        self._session.add(reply)
        await self._session.flush()
        return reply
