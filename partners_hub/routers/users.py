"""User provisioning routes (/api/users/*) — admin only, service-role backed."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.response import MessageResponse
from partners_hub.core.security import Principal, require_admin
from partners_hub.db.base import get_db
from partners_hub.schemas.notification import EmailSendResponse
from partners_hub.schemas.user import SendResetLinkRequest, UserCreateRequest, UserCreateResponse
from partners_hub.services.auth_admin import AuthAdminClient, get_auth_admin
from partners_hub.services.user import UserService

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/create", response_model=UserCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    _: Principal = Depends(require_admin),
    auth_admin: AuthAdminClient = Depends(get_auth_admin),
    session: AsyncSession = Depends(get_db),
):
    """Create the auth user and client profile, then email an account setup link."""
    created = await UserService(session, auth_admin).create_client(body)
    return UserCreateResponse(user_id=created.user_id, message=created.message, warning=created.warning)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    _: Principal = Depends(require_admin),
    auth_admin: AuthAdminClient = Depends(get_auth_admin),
    session: AsyncSession = Depends(get_db),
):
    warning = await UserService(session, auth_admin).delete_client(user_id)
    return MessageResponse(message="User deleted successfully", warning=warning)


@router.post("/send-reset-link", response_model=EmailSendResponse)
async def send_reset_link(
    body: SendResetLinkRequest,
    _: Principal = Depends(require_admin),
    auth_admin: AuthAdminClient = Depends(get_auth_admin),
    session: AsyncSession = Depends(get_db),
):
    message_id = await UserService(session, auth_admin).send_reset_link(body.user_email, body.user_name)
    return EmailSendResponse(
        message="Password reset link sent successfully",
        message_id=message_id,
        recipient=body.user_email,
    )
