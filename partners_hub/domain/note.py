"""SQLAlchemy ORM models for admin notes attached to companies."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partners_hub.db.base import Base
from partners_hub.domain.mixins import CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin


class CompanyNote(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "company_notes"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    client_visible: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    author_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    author_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    attachments: Mapped[List["NoteAttachment"]] = relationship(
        back_populates="note", lazy="selectin", cascade="all, delete-orphan"
    )
    replies: Mapped[List["NoteReply"]] = relationship(
        back_populates="note",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="NoteReply.created_at",
    )


class NoteAttachment(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "note_attachments"

    note_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("company_notes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Object path inside the company-notes bucket
    storage_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    file_size_bytes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    note: Mapped[CompanyNote] = relationship(back_populates="attachments")


class NoteReply(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "note_replies"

    note_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("company_notes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # "admin" | "client"
    author_role: Mapped[str] = mapped_column(String(20), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    note: Mapped[CompanyNote] = relationship(back_populates="replies")
