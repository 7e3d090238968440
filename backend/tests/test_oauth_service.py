"""
VoiceNote Backend — Notion OAuth Exchanger Unit Tests
======================================================

What:  Tests for the callback checks and the token exchange.
How:   httpx.MockTransport stands in for Notion's token endpoint; every
       precondition test asserts that the endpoint was never called.
"""

import base64

import httpx
import pytest

from app.config import settings
from app.exceptions import (
    AuthorizationDeniedError,
    InvalidInputError,
    ServiceMisconfiguredError,
    TokenExchangeFailedError,
)
from app.services.oauth_service import NotionOAuthService

TOKEN_PAYLOAD = {
    "access_token": "secret_oauth_token",
    "token_type": "bearer",
    "bot_id": "bot-1",
    "workspace_id": "ws-1",
    "workspace_name": "Acme",
    "workspace_icon": "https://example.com/icon.png",
    "owner": {"type": "user", "user": {"id": "user-1"}},
    "duplicated_template_id": None,
}


class TestPreconditions:

    @pytest.mark.asyncio
    async def test_error_param_is_denial(self, mock_transport):
        transport = mock_transport(200, TOKEN_PAYLOAD)

        with pytest.raises(AuthorizationDeniedError) as exc_info:
            await NotionOAuthService(transport=transport).handle_callback(
                code="abc", error="access_denied"
            )

        assert exc_info.value.status_code == 400
        assert exc_info.value.error == "Authorization denied"
        assert exc_info.value.message == "access_denied"
        assert transport.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [None, ""])
    async def test_missing_code(self, mock_transport, code):
        transport = mock_transport(200, TOKEN_PAYLOAD)

        with pytest.raises(InvalidInputError) as exc_info:
            await NotionOAuthService(transport=transport).handle_callback(code=code)

        assert exc_info.value.error == "Missing authorization code"
        assert exc_info.value.message == "No authorization code received from Notion"
        assert transport.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["notion_client_id", "notion_client_secret"])
    async def test_missing_client_credentials(self, mock_transport, monkeypatch, field):
        monkeypatch.setattr(settings, field, "")
        transport = mock_transport(200, TOKEN_PAYLOAD)

        with pytest.raises(ServiceMisconfiguredError) as exc_info:
            await NotionOAuthService(transport=transport).handle_callback(code="abc")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Notion OAuth credentials are not configured"
        assert transport.requests == []


class TestExchange:

    @pytest.mark.asyncio
    async def test_success_returns_payload(self, mock_transport):
        transport = mock_transport(200, TOKEN_PAYLOAD)

        result = await NotionOAuthService(transport=transport).handle_callback(code="abc")

        assert result.access_token == "secret_oauth_token"
        assert result.workspace_id == "ws-1"
        assert result.workspace_name == "Acme"
        assert result.bot_id == "bot-1"
        assert result.owner == {"type": "user", "user": {"id": "user-1"}}
        assert result.duplicated_template_id is None

    @pytest.mark.asyncio
    async def test_request_uses_basic_auth_and_default_redirect(self, mock_transport):
        transport = mock_transport(200, TOKEN_PAYLOAD)

        await NotionOAuthService(transport=transport).handle_callback(code="abc")

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.notion.com/v1/oauth/token"
        expected = base64.b64encode(b"test-client-id:test-client-secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert transport.json_body() == {
            "grant_type": "authorization_code",
            "code": "abc",
            "redirect_uri": "http://localhost:8080/api/notion/callback",
        }

    @pytest.mark.asyncio
    async def test_configured_redirect_uri(self, mock_transport, monkeypatch):
        monkeypatch.setattr(settings, "notion_redirect_uri", "https://voicenote.app/oauth")
        transport = mock_transport(200, TOKEN_PAYLOAD)

        await NotionOAuthService(transport=transport).handle_callback(code="abc")

        assert transport.json_body()["redirect_uri"] == "https://voicenote.app/oauth"

    @pytest.mark.asyncio
    async def test_failure_uses_error_description(self, mock_transport):
        transport = mock_transport(400, {
            "error": "invalid_grant",
            "error_description": "Invalid code.",
        })

        with pytest.raises(TokenExchangeFailedError) as exc_info:
            await NotionOAuthService(transport=transport).handle_callback(code="expired")

        assert exc_info.value.status_code == 400
        assert exc_info.value.error == "Token exchange failed"
        assert exc_info.value.message == "Invalid code."

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_error_code(self, mock_transport):
        transport = mock_transport(401, {"error": "invalid_client"})

        with pytest.raises(TokenExchangeFailedError) as exc_info:
            await NotionOAuthService(transport=transport).handle_callback(code="abc")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "invalid_client"

    @pytest.mark.asyncio
    async def test_failure_without_body(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(TokenExchangeFailedError) as exc_info:
            await NotionOAuthService(transport=transport).handle_callback(code="abc")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Failed to exchange authorization code"

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(TokenExchangeFailedError) as exc_info:
            await NotionOAuthService(transport=httpx.MockTransport(handler)).handle_callback(
                code="abc"
            )

        assert exc_info.value.status_code == 500
        assert exc_info.value.error == "OAuth callback failed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
    ])
    async def test_unreadable_success_body(self, response):
        transport = httpx.MockTransport(lambda request: response)

        with pytest.raises(TokenExchangeFailedError) as exc_info:
            await NotionOAuthService(transport=transport).handle_callback(code="abc")

        assert exc_info.value.status_code == 500
        assert exc_info.value.error == "OAuth callback failed"
