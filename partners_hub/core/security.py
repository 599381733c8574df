"""Caller authentication — auth-provider access tokens resolved to portal principals.

The auth provider (Supabase GoTrue) issues HS256 access tokens whose ``sub``
is the auth user id. A token is only half the story: the caller must also
have an enabled admin or client profile, which decides what it may touch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from partners_hub.core.config import settings
from partners_hub.core.exceptions import ForbiddenError, UnauthorizedError
from partners_hub.db.base import get_db
from partners_hub.repositories.user import AdminRepository, ClientRepository

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)

ROLE_ADMIN = "admin"
ROLE_CLIENT = "client"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str
    name: str
    email: str
    company_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def can_access_company(self, company_id: str) -> bool:
        return self.is_admin or (self.company_id is not None and self.company_id == company_id)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.supabase_jwt_audience,
        )
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Access token expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected access token: %s", exc)
        raise UnauthorizedError("Invalid access token") from exc


async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    session: AsyncSession = Depends(get_db),
) -> Principal:
    token = credentials.credentials if credentials else request.cookies.get("sb-access-token")
    if not token:
        raise UnauthorizedError()

    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Access token has no subject")

    admin = await AdminRepository(session).get_active(user_id)
    if admin is not None:
        if not admin.enabled:
            raise ForbiddenError("Account is disabled")
        principal = Principal(
            user_id=admin.id, role=ROLE_ADMIN, name=admin.name, email=admin.email
        )
    else:
        client = await ClientRepository(session).get_by_id(user_id)
        if client is None:
            raise ForbiddenError("No portal profile for this account")
        if not client.enabled:
            raise ForbiddenError("Account is disabled")
        principal = Principal(
            user_id=client.id,
            role=ROLE_CLIENT,
            name=client.name,
            email=client.email,
            company_id=client.company_id,
        )

    request.state.principal = principal
    return principal


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
    return principal
