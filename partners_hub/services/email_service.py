"""Mail delivery — SMTP relay with STARTTLS and XOAUTH2.

Every message goes out as the locked orders mailbox; the relay rejects any
other sender for the app registration, so a mismatched ``SMTP_FROM`` is
treated as a configuration error instead of a delivery attempt. smtplib is
blocking, so the SMTP conversation runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Optional, Sequence, Union

from partners_hub.core.config import settings
from partners_hub.core.exceptions import EmailConfigurationError, EmailDeliveryError
from partners_hub.services import email_auth

logger = logging.getLogger(__name__)

LOCKED_SENDER = "orders@qiqiglobal.com"
SENDER_NAME = "Qiqi Orders"

# Relay status fragments that have a known fix on the tenant side
_RELAY_HINTS = {
    "5.7.3": (
        "SMTP AUTH was rejected. Check that authenticated SMTP is enabled for the "
        "mailbox and that the app registration has SMTP.SendAsApp permission."
    ),
    "5.7.60": (
        "The app is not allowed to send as this address. Grant it SendAs rights on "
        f"the {LOCKED_SENDER} mailbox."
    ),
}


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def _check_configuration() -> str:
    if not settings.mail_enabled:
        raise EmailConfigurationError("Email is not configured: SMTP_HOST and SMTP_FROM are required")
    if settings.smtp_from.strip().lower() != LOCKED_SENDER:
        raise EmailConfigurationError(
            f"SMTP_FROM must be {LOCKED_SENDER}, got {settings.smtp_from}"
        )
    return LOCKED_SENDER


def build_message(
    to: Sequence[str],
    subject: str,
    html: str,
    text: Optional[str] = None,
    attachments: Sequence[EmailAttachment] = (),
    reply_to: Optional[str] = None,
) -> MIMEMultipart:
    body = MIMEMultipart("alternative")
    if text:
        body.attach(MIMEText(text, "plain", "utf-8"))
    body.attach(MIMEText(html, "html", "utf-8"))

    if attachments:
        msg = MIMEMultipart("mixed")
        msg.attach(body)
        for attachment in attachments:
            maintype, _, subtype = attachment.content_type.partition("/")
            part = MIMEBase(maintype or "application", subtype or "octet-stream")
            part.set_payload(attachment.content)
            encoders.encode_base64(part)
            part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
            msg.attach(part)
    else:
        msg = body

    msg["Subject"] = subject
    msg["From"] = formataddr((SENDER_NAME, LOCKED_SENDER))
    msg["To"] = ", ".join(to)
    if reply_to:
        msg["Reply-To"] = reply_to
    msg["Message-ID"] = make_msgid(domain=LOCKED_SENDER.split("@")[1])
    return msg


def _xoauth2(user: str, token: str):
    def authobject(challenge=None) -> str:
        # A challenge means the relay refused the token; an empty reply ends the exchange
        if challenge:
            return ""
        return f"user={user}\x01auth=Bearer {token}\x01\x01"

    return authobject


def _deliver(msg: MIMEMultipart, recipients: Sequence[str], token: str) -> None:
    context = ssl.create_default_context()
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout) as smtp:
        smtp.ehlo()
        smtp.starttls(context=context)
        smtp.ehlo()
        smtp.auth("XOAUTH2", _xoauth2(LOCKED_SENDER, token), initial_response_ok=True)
        smtp.send_message(msg, from_addr=LOCKED_SENDER, to_addrs=list(recipients))


def _describe_smtp_error(exc: smtplib.SMTPResponseException) -> str:
    detail = exc.smtp_error
    if isinstance(detail, bytes):
        detail = detail.decode("utf-8", errors="replace")
    message = f"SMTP error {exc.smtp_code}: {detail}"
    for fragment, hint in _RELAY_HINTS.items():
        if fragment in detail:
            return f"{message}. {hint}"
    return message


async def send_mail(
    to: Union[str, Sequence[str]],
    subject: str,
    html: str,
    text: Optional[str] = None,
    attachments: Sequence[EmailAttachment] = (),
    reply_to: Optional[str] = None,
) -> str:
    """Send one message and return its Message-ID.

    Raises EmailConfigurationError before any network I/O when the relay
    settings are incomplete, and EmailDeliveryError when the token endpoint or
    the relay refuses the message.
    """
    _check_configuration()
    recipients = [to] if isinstance(to, str) else list(to)
    recipients = [r.strip() for r in recipients if r and r.strip()]
    if not recipients:
        raise EmailDeliveryError("No recipients given")

    token = await email_auth.get_smtp_access_token()
    msg = build_message(recipients, subject, html, text, attachments, reply_to)

    try:
        await asyncio.to_thread(_deliver, msg, recipients, token)
    except smtplib.SMTPResponseException as exc:
        if exc.smtp_code == 535:
            email_auth.get_token_provider().invalidate()
        description = _describe_smtp_error(exc)
        logger.error("Mail to %s failed: %s", recipients, description)
        raise EmailDeliveryError(description) from exc
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Mail to %s failed: %s", recipients, exc)
        raise EmailDeliveryError(f"SMTP delivery failed: {exc}") from exc

    message_id = msg["Message-ID"]
    logger.info("Sent '%s' to %s (%s)", subject, recipients, message_id)
    return message_id
