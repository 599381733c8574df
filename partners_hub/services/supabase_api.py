"""Shared HTTP plumbing for the hosted auth provider's service-role APIs."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from partners_hub.core.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

_ERROR_SNIPPET_CHARS = 200


class SupabaseServiceClient:
    """Base for clients that call the provider with the service-role key.

    A new ``httpx.AsyncClient`` is opened per call; ``transport`` lets tests
    substitute ``httpx.MockTransport``.
    """

    service_name = "Supabase"

    def __init__(
        self,
        base_url: str,
        service_role_key: Optional[str],
        *,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._key = service_role_key
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        if not self._key:
            raise UpstreamServiceError(
                f"{self.service_name} is not configured: SUPABASE_SERVICE_ROLE_KEY is missing"
            )
        return {"apikey": self._key, "Authorization": f"Bearer {self._key}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                return await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s %s failed: %s", self.service_name, method, path, exc)
            raise UpstreamServiceError(f"{self.service_name} request failed: {exc}") from exc

    @staticmethod
    def error_message(response: httpx.Response) -> str:
        """Best human-readable error text from a provider error response."""
        try:
            payload = response.json()
        except ValueError:
            return response.text[:_ERROR_SNIPPET_CHARS]
        if isinstance(payload, dict):
            for key in ("msg", "message", "error_description", "error"):
                if isinstance(payload.get(key), str):
                    return payload[key]
        return response.text[:_ERROR_SNIPPET_CHARS]

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        message = self.error_message(response)
        logger.error("%s: %s failed (%s): %s", self.service_name, action, response.status_code, message)
        raise UpstreamServiceError(f"Failed to {action}: {message}")
