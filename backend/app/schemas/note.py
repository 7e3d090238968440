"""
VoiceNote Backend — Pydantic Schemas (API Contracts)
=====================================================

What:  Request and response models for every endpoint.
How:   FastAPI uses these for body parsing and response serialization.
       The create-note contract uses camelCase on the wire; Python code
       uses snake_case attributes through aliases.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class CreateNoteRequest(BaseModel):
    """
    Body of POST /api/create-note.

    Every field is optional at the schema level so that a missing field is
    reported by the service with a field-specific message instead of a
    generic schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    transcription: Optional[str] = Field(default=None, description="Raw transcription text")
    notion_api_key: Optional[str] = Field(
        default=None,
        alias="notionApiKey",
        description="Notion integration token or OAuth access token of the caller",
    )
    notion_database_id: Optional[str] = Field(
        default=None,
        alias="notionDatabaseId",
        description="ID of the Notion database the page is created in",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class TranscriptionResponse(BaseModel):
    """
    Example:
        {"success": true, "transcription": "hello world"}
    """

    success: bool = True
    transcription: str


class CreateNoteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    notion_page_url: str = Field(alias="notionPageUrl")
    title: str
    polished_text: str = Field(alias="polishedText")


class OAuthExchangeResult(BaseModel):
    """
    Payload returned by Notion's token endpoint.

    The server does not interpret it; callers store the token themselves.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    workspace_id: Optional[str] = None
    workspace_name: Optional[str] = None
    workspace_icon: Optional[str] = None
    bot_id: Optional[str] = None
    owner: Optional[Any] = None
    duplicated_template_id: Optional[str] = None


class OAuthCallbackResponse(OAuthExchangeResult):
    success: bool = True


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "Missing required field",
            "message": "Notion API key is required"
        }
    """

    error: str = Field(description="Error kind label")
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health. Reports configuration only; makes no remote calls."""

    status: str = Field(description="Overall service status: healthy or degraded")
    version: str = Field(description="Application version")
    gemini_configured: bool
    notion_oauth_configured: bool
    uptime_seconds: float = Field(description="Seconds since service started")
