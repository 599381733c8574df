"""User provisioning — client accounts backed by the auth provider.

Creating a client is a two-system write (auth user, then profile row), so a
failed profile insert deletes the auth user it just created. Password links
are generated through the admin API and mailed through our own relay.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.config import settings
from partners_hub.core.exceptions import AppException, BadRequestError, NotFoundError, ValidationError
from partners_hub.domain.user import Client
from partners_hub.repositories.company import CompanyRepository
from partners_hub.repositories.user import AdminRepository, ClientRepository
from partners_hub.schemas.user import UserCreateRequest
from partners_hub.services import email_service, email_templates
from partners_hub.services.auth_admin import AuthAdminClient

logger = logging.getLogger(__name__)

RESET_REQUEST_MESSAGE = "If an account with that email exists, a password reset link has been sent."

_PASSWORD_LENGTH = 32


def generate_password() -> str:
    """Throwaway password the user never sees; they set their own through the link."""
    return secrets.token_hex(_PASSWORD_LENGTH // 2)


def reset_redirect_url() -> str:
    return f"{settings.site_url.rstrip('/')}/confirm-password-reset"


def display_name(email: str, name: Optional[str] = None) -> str:
    return name or email.split("@")[0]


@dataclass
class CreatedUser:
    user_id: str
    message: str
    warning: Optional[str] = None


class UserService:
    def __init__(self, session: AsyncSession, auth_admin: AuthAdminClient):
        self._session = session
        self._clients = ClientRepository(session)
        self._admins = AdminRepository(session)
        self._companies = CompanyRepository(session)
        self._auth = auth_admin

    async def create_client(self, data: UserCreateRequest) -> CreatedUser:
        if await self._companies.get_by_id(data.company_id) is None:
            raise ValidationError(f"Unknown company '{data.company_id}'")
        if await self._clients.get_by_email(data.email) is not None:
            raise BadRequestError("A user with this email already exists. Please use a different email.")

        user_id = await self._auth.create_user(data.email, generate_password(), data.name)
        try:
            self._session.add(
                Client(
                    id=user_id,
                    name=data.name,
                    email=data.email,
                    enabled=data.enabled,
                    company_id=data.company_id,
                )
            )
            await self._session.flush()
        except Exception:
            logger.exception("Client profile insert failed; removing auth user %s", user_id)
            await self._auth.delete_user(user_id)
            raise

        try:
            link = await self._auth.generate_recovery_link(data.email, reset_redirect_url())
            subject, html = email_templates.account_setup(data.name, link, settings.site_url)
            await email_service.send_mail(data.email, subject, html)
        except AppException as exc:
            logger.error("User %s created but setup email failed: %s", user_id, exc.message)
            return CreatedUser(
                user_id=user_id,
                message="User created successfully",
                warning=(
                    "User created but failed to send the setup email. "
                    "Please use Reset Password to send the link manually."
                ),
            )

        logger.info("Created client %s for company %s", user_id, data.company_id)
        return CreatedUser(user_id=user_id, message="User created successfully and setup email sent")

    async def delete_client(self, user_id: str) -> Optional[str]:
        """Delete the profile, then the auth user. Returns a warning if only the first succeeded."""
        client = await self._clients.get_by_id(user_id)
        if client is None:
            raise NotFoundError("User", user_id)
        await self._clients.hard_delete(client)

        try:
            await self._auth.delete_user(user_id)
        except AppException as exc:
            logger.error("Profile %s deleted but auth user removal failed: %s", user_id, exc.message)
            return "Profile deleted but the login could not be removed from the auth provider."
        return None

    async def send_reset_link(self, email: str, name: Optional[str] = None) -> str:
        """Admin-initiated reset link; returns the Message-ID. Failures propagate."""
        link = await self._auth.generate_recovery_link(email, reset_redirect_url())
        subject, html = email_templates.password_reset(display_name(email, name), link, settings.site_url)
        return await email_service.send_mail(email, subject, html)

    async def request_password_reset(self, email: str) -> None:
        """Self-service reset. Never reveals whether the account exists."""
        client = await self._clients.get_by_email(email)
        admin = None if client else await self._admins.get_by_email(email)
        profile = client or admin
        if profile is None:
            logger.info("Password reset requested for unknown email")
            return
        try:
            await self.send_reset_link(profile.email, profile.name)
        except AppException as exc:
            logger.error("Password reset email for %s failed: %s", profile.id, exc.message)
