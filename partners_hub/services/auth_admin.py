"""Auth provider admin API — user provisioning and recovery links."""

from __future__ import annotations

import logging

from partners_hub.core.config import settings
from partners_hub.core.exceptions import BadRequestError, UpstreamServiceError
from partners_hub.services.supabase_api import SupabaseServiceClient

logger = logging.getLogger(__name__)


class AuthAdminClient(SupabaseServiceClient):
    service_name = "Auth admin API"

    async def create_user(self, email: str, password: str, full_name: str) -> str:
        """Create a confirmed auth user and return its id."""
        response = await self._request(
            "POST",
            "/auth/v1/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"full_name": full_name},
            },
        )
        if not response.is_success and "already" in self.error_message(response).lower():
            raise BadRequestError(
                "A user with this email already exists. Please use a different email."
            )
        self._raise_for_status(response, "create auth user")

        payload = response.json()
        user = payload.get("user", payload)
        logger.info("Created auth user %s", user["id"])
        return user["id"]

    async def delete_user(self, user_id: str) -> None:
        response = await self._request("DELETE", f"/auth/v1/admin/users/{user_id}")
        self._raise_for_status(response, "delete auth user")
        logger.info("Deleted auth user %s", user_id)

    async def generate_recovery_link(self, email: str, redirect_to: str) -> str:
        response = await self._request(
            "POST",
            "/auth/v1/admin/generate_link",
            json={"type": "recovery", "email": email, "redirect_to": redirect_to},
        )
        self._raise_for_status(response, "generate recovery link")

        payload = response.json()
        link = payload.get("action_link") or payload.get("properties", {}).get("action_link")
        if not link:
            raise UpstreamServiceError("Failed to generate recovery link: response had no action_link")
        return link


def get_auth_admin() -> AuthAdminClient:
    """FastAPI dependency; overridden in tests."""
    return AuthAdminClient(
        settings.supabase_url,
        settings.supabase_service_role_key,
        timeout=settings.supabase_timeout,
    )
