"""Feedback service — user-submitted feedback and issue reports to the orders mailbox."""

import logging
from typing import Optional

from partners_hub.core.config import settings
from partners_hub.core.exceptions import ValidationError
from partners_hub.core.security import Principal
from partners_hub.services import email_service, email_templates
from partners_hub.services.email_service import EmailAttachment

logger = logging.getLogger(__name__)

FEEDBACK_TYPES = ("issue", "feedback")
NOT_CONFIGURED_WARNING = "Email not configured - feedback logged on the server"


async def submit_feedback(
    principal: Principal,
    *,
    feedback_type: str,
    text: str,
    user_name: Optional[str] = None,
    user_email: Optional[str] = None,
    screenshot: Optional[EmailAttachment] = None,
) -> Optional[str]:
    """Mail the feedback; returns a warning when mail is not configured.

    Screenshots are only attached to issue reports.
    """
    if feedback_type not in FEEDBACK_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(FEEDBACK_TYPES)}")
    if not text.strip():
        raise ValidationError("Feedback text is required")
    if screenshot is not None and len(screenshot.content) > settings.max_upload_size_bytes:
        raise ValidationError(f"Screenshot exceeds {settings.max_upload_size_mb} MB limit")

    name = user_name or principal.name
    email = user_email or principal.email
    attachments = [screenshot] if screenshot is not None and feedback_type == "issue" else []

    if not settings.mail_enabled:
        logger.warning(
            "Feedback not mailed (SMTP not configured): type=%s from=%s <%s> screenshot=%s text=%r",
            feedback_type,
            name,
            email,
            screenshot.filename if screenshot else None,
            text,
        )
        return NOT_CONFIGURED_WARNING

    subject, html = email_templates.feedback(
        feedback_type, text, name, email, settings.site_url, screenshot_attached=bool(attachments)
    )
    await email_service.send_mail(
        settings.orders_mailbox, subject, html, attachments=attachments, reply_to=email
    )
    logger.info("Feedback (%s) from %s mailed", feedback_type, principal.user_id)
    return None
