"""Public auth routes (/api/auth/*)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.response import MessageResponse
from partners_hub.db.base import get_db
from partners_hub.schemas.user import ResetPasswordRequest
from partners_hub.services.auth_admin import AuthAdminClient, get_auth_admin
from partners_hub.services.user import RESET_REQUEST_MESSAGE, UserService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/reset-password", response_model=MessageResponse)
async def request_password_reset(
    body: ResetPasswordRequest,
    auth_admin: AuthAdminClient = Depends(get_auth_admin),
    session: AsyncSession = Depends(get_db),
):
    """Always answers the same way, whether or not the account exists."""
    await UserService(session, auth_admin).request_password_reset(body.email)
    return MessageResponse(message=RESET_REQUEST_MESSAGE)
