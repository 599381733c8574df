"""Company note Pydantic schemas."""


from datetime import datetime

from pydantic import Field

from partners_hub.schemas.common import CamelModel


class NoteCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    body: str | None = None
    client_visible: bool = False


class NoteReplyCreate(CamelModel):
    body: str = Field(min_length=1)


class NoteAttachmentOut(CamelModel):
    id: str
    note_id: str
    file_name: str
    content_type: str | None = None
    file_size_bytes: int | None = None
    created_at: datetime


class NoteReplyOut(CamelModel):
    id: str
    note_id: str
    author_id: str
    author_name: str
    author_role: str
    body: str
    created_at: datetime


class NoteOut(CamelModel):
    id: str
    company_id: str
    title: str
    body: str | None = None
    client_visible: bool
    author_id: str | None = None
    author_name: str | None = None
    attachments: list[NoteAttachmentOut] = []
    replies: list[NoteReplyOut] = []
    created_at: datetime
    updated_at: datetime


class SignedUrlOut(CamelModel):
    url: str
    expires_in: int
