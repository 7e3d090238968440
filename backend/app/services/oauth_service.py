"""
VoiceNote Backend — Notion OAuth Exchanger
===========================================

What:  Handles the redirect of Notion's authorization-code flow.
How:   Validates the redirect query, then POSTs the code to
       {notion_api_base}/oauth/token using HTTP Basic auth built from the
       integration's client id and secret.
Who:   Called by GET /api/notion/callback.

The token payload is returned to the caller as-is. Nothing is stored
server-side; the caller owns the access token from here on.
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from app.config import settings
from app.exceptions import (
    AuthorizationDeniedError,
    InvalidInputError,
    ServiceMisconfiguredError,
    TokenExchangeFailedError,
)
from app.schemas.note import OAuthExchangeResult

logger = logging.getLogger(__name__)


class NotionOAuthService:
    """
    Exchanges one-time authorization codes for access tokens.

    Args:
        transport: Optional httpx transport (tests inject httpx.MockTransport).
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    async def handle_callback(
        self,
        code: Optional[str],
        error: Optional[str] = None,
    ) -> OAuthExchangeResult:
        """
        Full callback flow: denial check → code check → config check → exchange.

        Raises:
            AuthorizationDeniedError: `error` was present in the redirect.
            InvalidInputError: No code in the redirect.
            ServiceMisconfiguredError: Client id/secret not configured.
            TokenExchangeFailedError: Token endpoint rejected the code or was unreachable.
        """
        if error:
            logger.warning("Notion authorization denied: %s", error)
            raise AuthorizationDeniedError(message=error)

        if not code:
            raise InvalidInputError(
                message="No authorization code received from Notion",
                error="Missing authorization code",
                field="code",
            )

        if not settings.is_notion_oauth_configured:
            raise ServiceMisconfiguredError(message="Notion OAuth credentials are not configured")

        return await self.exchange_code(code, settings.redirect_uri)

    async def exchange_code(self, code: str, redirect_uri: str) -> OAuthExchangeResult:
        """Single POST to the token endpoint. No retry."""
        logger.info("Exchanging authorization code for access token...")

        try:
            async with httpx.AsyncClient(
                base_url=settings.notion_api_base,
                auth=(settings.notion_client_id, settings.notion_client_secret),
                timeout=settings.http_timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/oauth/token",
                    json={
                        "grant_type": "authorization_code",
                        "code": code,
                        "redirect_uri": redirect_uri,
                    },
                )
        except httpx.HTTPError as e:
            logger.error("Notion token endpoint unreachable: %s", e)
            raise TokenExchangeFailedError(
                message="An unexpected error occurred during OAuth callback",
                error="OAuth callback failed",
                status_code=500,
                context={"error_type": type(e).__name__},
            ) from e

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            logger.error(
                "Token exchange failed: status=%d error=%s",
                response.status_code, body.get("error"),
            )
            status = response.status_code if response.status_code >= 400 else 500
            raise TokenExchangeFailedError(
                message=body.get("error_description") or body.get("error"),
                status_code=status,
                context={"remote_status": response.status_code, "remote_error": body.get("error")},
            )

        try:
            result = OAuthExchangeResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(
                "Token endpoint answered %d with an unreadable body: %s",
                response.status_code, e,
            )
            raise TokenExchangeFailedError(
                message="An unexpected error occurred during OAuth callback",
                error="OAuth callback failed",
                status_code=500,
                context={"remote_status": response.status_code},
            ) from e

        logger.info("Access token obtained successfully")
        return result


# ── Singleton Instance ────────────────────────────────────────────────────
oauth_service = NotionOAuthService()
