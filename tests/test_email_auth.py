"""Client-credentials token fetch and cache for the mail relay."""

import httpx
import pytest

from partners_hub.core.exceptions import EmailConfigurationError, EmailDeliveryError
from partners_hub.services.email_auth import SMTP_SCOPE, SmtpTokenProvider


class Clock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def _provider(handler, clock=None, **overrides):
    args = {"tenant_id": "tenant-1", "client_id": "app-1", "client_secret": "s3cret"}
    args.update(overrides)
    return SmtpTokenProvider(
        args["tenant_id"],
        args["client_id"],
        args["client_secret"],
        transport=httpx.MockTransport(handler),
        clock=clock or Clock(),
    )


class TestSmtpTokenProvider:
    async def test_requests_client_credentials_token(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "tok-1", "expires_in": 3599})

        token = await _provider(handler).get_token()

        assert token == "tok-1"
        request = seen[0]
        assert str(request.url) == "https://login.microsoftonline.com/tenant-1/oauth2/v2.0/token"
        form = dict(httpx.QueryParams(request.content.decode()))
        assert form["grant_type"] == "client_credentials"
        assert form["client_id"] == "app-1"
        assert form["client_secret"] == "s3cret"
        assert form["scope"] == SMTP_SCOPE

    async def test_token_is_cached_until_near_expiry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"access_token": f"tok-{len(calls)}", "expires_in": 3600})

        clock = Clock()
        provider = _provider(handler, clock)

        assert await provider.get_token() == "tok-1"
        clock.now += 3600 - 61
        assert await provider.get_token() == "tok-1"
        assert len(calls) == 1

        # Inside the last minute of validity the token is refreshed
        clock.now += 2
        assert await provider.get_token() == "tok-2"
        assert len(calls) == 2

    async def test_invalidate_forces_refetch(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})

        provider = _provider(handler)
        await provider.get_token()
        provider.invalidate()
        await provider.get_token()
        assert len(calls) == 2

    async def test_missing_credentials(self):
        provider = _provider(lambda r: httpx.Response(500), client_secret=None)
        assert not provider.configured
        with pytest.raises(EmailConfigurationError):
            await provider.get_token()

    async def test_error_response_is_truncated(self):
        body = "invalid_client: " + "x" * 500

        provider = _provider(lambda r: httpx.Response(401, text=body))
        with pytest.raises(EmailDeliveryError) as exc_info:
            await provider.get_token()

        message = exc_info.value.message
        assert "401" in message
        assert "invalid_client" in message
        assert "x" * 201 not in message

    async def test_response_without_token(self):
        provider = _provider(lambda r: httpx.Response(200, json={"token_type": "Bearer"}))
        with pytest.raises(EmailDeliveryError):
            await provider.get_token()


class TestProviderFromSettings:
    def test_provider_is_shared_until_reset(self, monkeypatch):
        from partners_hub.core.config import settings
        from partners_hub.services import email_auth

        email_auth.reset_token_provider()
        first = email_auth.get_token_provider()
        assert first is email_auth.get_token_provider()
        assert first.configured

        monkeypatch.setattr(settings, "azure_client_secret", None)
        email_auth.reset_token_provider()
        assert not email_auth.get_token_provider().configured
        email_auth.reset_token_provider()
