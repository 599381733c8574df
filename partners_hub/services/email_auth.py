"""Mail relay OAuth — client-credentials access tokens for SMTP XOAUTH2.

The relay only accepts OAuth2 bearer tokens. Tokens are fetched from the
identity platform with the app registration's client id/secret and cached in
process memory until they are within a minute of expiring. Concurrent
refreshes are harmless: the last token fetched wins.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import httpx

from partners_hub.core.config import settings
from partners_hub.core.exceptions import EmailConfigurationError, EmailDeliveryError

logger = logging.getLogger(__name__)

TOKEN_URL_TEMPLATE = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"
SMTP_SCOPE = "https://outlook.office365.com/.default"

# Refresh when fewer than this many seconds of validity remain
REFRESH_MARGIN_SECONDS = 60
_ERROR_SNIPPET_CHARS = 200


class SmtpTokenProvider:
    """Fetches and caches one client-credentials token."""

    def __init__(
        self,
        tenant_id: Optional[str],
        client_id: Optional[str],
        client_secret: Optional[str],
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 15.0,
    ) -> None:
        self._tenant_id = tenant_id
        self._client_id = client_id
        self._client_secret = client_secret
        self._transport = transport
        self._clock = clock
        self._timeout = timeout
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    @property
    def configured(self) -> bool:
        return bool(self._tenant_id and self._client_id and self._client_secret)

    def _cached(self) -> Optional[str]:
        if self._token and self._expires_at - self._clock() > REFRESH_MARGIN_SECONDS:
            return self._token
        return None

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    async def get_token(self) -> str:
        cached = self._cached()
        if cached:
            return cached

        if not self.configured:
            raise EmailConfigurationError(
                "Missing mail OAuth settings: AZURE_TENANT_ID, AZURE_CLIENT_ID and "
                "AZURE_CLIENT_SECRET must all be set"
            )

        url = TOKEN_URL_TEMPLATE.format(tenant=self._tenant_id)
        form = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "scope": SMTP_SCOPE,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(url, data=form)
        except httpx.HTTPError as exc:
            logger.error("Token endpoint unreachable: %s", exc)
            raise EmailDeliveryError(f"Failed to reach token endpoint: {exc}") from exc

        if response.status_code >= 400:
            snippet = response.text[:_ERROR_SNIPPET_CHARS]
            logger.error("Token request failed (%s): %s", response.status_code, snippet)
            raise EmailDeliveryError(
                f"Failed to get SMTP access token ({response.status_code}): {snippet}"
            )

        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise EmailDeliveryError("Token endpoint returned no access_token")

        expires_in = int(payload.get("expires_in", 3600))
        self._token = token
        self._expires_at = self._clock() + expires_in
        logger.info("Fetched SMTP access token (expires in %ss)", expires_in)
        return token


_provider: Optional[SmtpTokenProvider] = None


def get_token_provider() -> SmtpTokenProvider:
    global _provider
    if _provider is None:
        _provider = SmtpTokenProvider(
            settings.azure_tenant_id,
            settings.azure_client_id,
            settings.azure_client_secret,
        )
    return _provider


def reset_token_provider() -> None:
    """Forget the cached provider (and its token); the next call rebuilds it from settings."""
    global _provider
    _provider = None


async def get_smtp_access_token() -> str:
    return await get_token_provider().get_token()
