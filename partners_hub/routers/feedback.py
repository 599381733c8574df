"""Feedback route (/api/feedback/submit) — multipart form with optional screenshot."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from partners_hub.core.response import MessageResponse
from partners_hub.core.security import Principal, get_current_principal
from partners_hub.services.email_service import EmailAttachment
from partners_hub.services.feedback import submit_feedback

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


@router.post("/submit", response_model=MessageResponse)
async def submit(
    feedback_type: str = Form(..., alias="type"),
    text: str = Form(...),
    user_name: Optional[str] = Form(default=None, alias="userName"),
    user_email: Optional[str] = Form(default=None, alias="userEmail"),
    screenshot: Optional[UploadFile] = File(default=None),
    principal: Principal = Depends(get_current_principal),
):
    attachment = None
    if screenshot is not None and screenshot.filename:
        attachment = EmailAttachment(
            filename=screenshot.filename,
            content=await screenshot.read(),
            content_type=screenshot.content_type or "application/octet-stream",
        )

    warning = await submit_feedback(
        principal,
        feedback_type=feedback_type,
        text=text,
        user_name=user_name,
        user_email=user_email,
        screenshot=attachment,
    )
    return MessageResponse(message="Feedback submitted", warning=warning)
