"""Company notes router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.response import DataResponse
from partners_hub.core.security import Principal, get_current_principal, require_admin
from partners_hub.db.base import get_db
from partners_hub.schemas.note import (
    NoteAttachmentOut,
    NoteCreate,
    NoteOut,
    NoteReplyCreate,
    NoteReplyOut,
    SignedUrlOut,
)
from partners_hub.services.note import SIGNED_URL_TTL_SECONDS, NoteService
from partners_hub.services.storage import StorageClient, get_storage

router = APIRouter(tags=["Notes"])


@router.get("/companies/{company_id}/notes", response_model=DataResponse[list[NoteOut]])
async def list_company_notes(
    company_id: str,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    """Admins see every note; clients see the client-visible notes of their own company."""
    notes = await NoteService(session).list_notes(principal, company_id)
    return {"data": [NoteOut.model_validate(n) for n in notes]}


@router.post(
    "/companies/{company_id}/notes",
    response_model=DataResponse[NoteOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_company_note(
    company_id: str,
    body: NoteCreate,
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    note = await NoteService(session).create_note(principal, company_id, body)
    return {"data": NoteOut.model_validate(note)}


@router.post(
    "/notes/{note_id}/attachments",
    response_model=DataResponse[NoteAttachmentOut],
    status_code=status.HTTP_201_CREATED,
)
async def upload_note_attachment(
    note_id: str,
    file: UploadFile = File(...),
    _: Principal = Depends(require_admin),
    storage: StorageClient = Depends(get_storage),
    session: AsyncSession = Depends(get_db),
):
    attachment = await NoteService(session).add_attachment(
        note_id,
        storage,
        file_name=file.filename or "attachment",
        content=await file.read(),
        content_type=file.content_type or "application/octet-stream",
    )
    return {"data": NoteAttachmentOut.model_validate(attachment)}


@router.get("/notes/attachments/{attachment_id}/url", response_model=DataResponse[SignedUrlOut])
async def get_attachment_url(
    attachment_id: str,
    principal: Principal = Depends(get_current_principal),
    storage: StorageClient = Depends(get_storage),
    session: AsyncSession = Depends(get_db),
):
    url = await NoteService(session).attachment_url(principal, attachment_id, storage)
    return {"data": SignedUrlOut(url=url, expires_in=SIGNED_URL_TTL_SECONDS)}


@router.post(
    "/notes/{note_id}/replies",
    response_model=DataResponse[NoteReplyOut],
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_note(
    note_id: str,
    body: NoteReplyCreate,
    principal: Principal = Depends(get_current_principal),
    session: AsyncSession = Depends(get_db),
):
    reply = await NoteService(session).add_reply(principal, note_id, body.body)
    return {"data": NoteReplyOut.model_validate(reply)}
