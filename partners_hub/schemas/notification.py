"""Notification endpoint schemas."""


from typing import Literal

from pydantic import Field

from partners_hub.schemas.common import CamelModel

EmailType = Literal["created", "in_process", "ready", "cancelled", "custom"]


class SendNotificationRequest(CamelModel):
    order_id: str


class SendEmailRequest(CamelModel):
    order_id: str
    email_type: EmailType
    custom_message: str | None = Field(default=None, max_length=5000)


class EmailSendResponse(CamelModel):
    success: bool = True
    message: str
    message_id: str | None = None
    recipient: str | None = None
    skipped: bool = False
