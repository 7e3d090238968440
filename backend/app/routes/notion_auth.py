"""
VoiceNote Backend — Notion OAuth Callback Route
================================================

What:  Handles GET /api/notion/callback, the redirect target of Notion's
       authorization-code flow.
How:   Passes `code` and `error` from the query string to NotionOAuthService
       and returns the token payload unchanged.
"""

from typing import Optional

from fastapi import APIRouter, Query

from app.schemas.note import ErrorResponse, OAuthCallbackResponse
from app.services.oauth_service import oauth_service

router = APIRouter(prefix="/api/notion", tags=["Notion OAuth"])


@router.get(
    "/callback",
    response_model=OAuthCallbackResponse,
    responses={
        400: {"description": "Authorization denied or code missing", "model": ErrorResponse},
        500: {"description": "OAuth credentials not configured", "model": ErrorResponse},
    },
    summary="Exchange a Notion authorization code for an access token",
)
async def notion_callback(
    code: Optional[str] = Query(default=None),
    error: Optional[str] = Query(default=None),
) -> OAuthCallbackResponse:
    result = await oauth_service.handle_callback(code=code, error=error)
    return OAuthCallbackResponse(**result.model_dump())
