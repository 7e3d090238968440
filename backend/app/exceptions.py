"""
VoiceNote Backend — Custom Exception Hierarchy
===============================================

What:  One exception class per kind in the error taxonomy.
How:   Each exception carries an HTTP status, a kind label, a human-readable
       message and an optional context dict. Global exception handlers
       (registered in main.py) turn them into `{error, message}` responses.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    VoiceNoteError (base)                    → 500
    ├── InvalidInputError                    → 400 (caller can fix)
    ├── ServiceMisconfiguredError            → 500 (server lacks a credential)
    ├── AuthorizationDeniedError             → 400 (user denied OAuth consent)
    ├── AuthFailedError                      → 401 (Notion rejected the key)
    ├── TargetNotFoundError                  → 404 (Notion database missing)
    ├── NotionValidationError                → 400 (Notion schema mismatch)
    ├── TranscriptionFailedError             → remote 4xx or 500
    ├── AIProcessingFailedError              → remote 4xx or 500
    ├── PublishFailedError                   → 500
    └── TokenExchangeFailedError             → remote status or 500

The `context` dict is logged server-side and never returned to the client.
"""

from typing import Any, Dict, Optional


def passthrough_status(remote_status: Optional[int]) -> int:
    """
    Map a remote HTTP status onto the status we return.

    Remote 4xx codes are passed through unchanged; 5xx, missing or
    non-HTTP codes collapse to 500.
    """
    try:
        status = int(remote_status) if remote_status is not None else None
    except (TypeError, ValueError):
        status = None
    if status is not None and 400 <= status < 500:
        return status
    return 500


class VoiceNoteError(Exception):
    """
    Base exception for all VoiceNote application errors.

    Attributes:
        status_code: HTTP status returned to the caller
        error:       Kind label, returned as the `error` field
        message:     User-facing error description (safe to return in API response)
        context:     Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error: str = "Internal server error"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error, "message": self.message}


class InvalidInputError(VoiceNoteError):
    """
    Raised when the caller's request is malformed or incomplete.

    When:  No audio file, wrong content type, oversize/empty upload,
           missing create-note fields, missing OAuth code.
    HTTP:  400 Bad Request
    """

    status_code = 400
    error = "Invalid input"
    default_message = "The request is invalid"

    def __init__(
        self,
        message: Optional[str] = None,
        error: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, error=error, context=ctx)
        self.field = field


class ServiceMisconfiguredError(VoiceNoteError):
    """
    Raised before any remote call when the server lacks a required credential.

    HTTP:  500 Internal Server Error
    """

    status_code = 500
    error = "Server configuration error"
    default_message = "The server is missing required configuration"


class AuthorizationDeniedError(VoiceNoteError):
    """The user declined the Notion consent screen. HTTP 400."""

    status_code = 400
    error = "Authorization denied"
    default_message = "Authorization was denied"


class AuthFailedError(VoiceNoteError):
    """Notion rejected the caller-supplied integration token. HTTP 401."""

    status_code = 401
    error = "Notion authentication failed"
    default_message = "Invalid Notion API key. Please check your integration token."


class TargetNotFoundError(VoiceNoteError):
    """The database does not exist or is not shared with the integration. HTTP 404."""

    status_code = 404
    error = "Notion database not found"
    default_message = (
        "The specified database ID was not found or the integration doesn't have access to it."
    )


class NotionValidationError(VoiceNoteError):
    """
    Notion refused the page payload (e.g. the database has no title property
    of the expected shape). The remote message is passed through. HTTP 400.
    """

    status_code = 400
    error = "Notion validation error"
    default_message = "The database structure may not match expected properties."


class TranscriptionFailedError(VoiceNoteError):
    """Speech-to-text call failed. HTTP: remote 4xx passthrough, else 500."""

    status_code = 500
    error = "Transcription failed"
    default_message = "Failed to transcribe audio"


class AIProcessingFailedError(VoiceNoteError):
    """Polishing or title generation failed. HTTP: remote 4xx passthrough, else 500."""

    status_code = 500
    error = "AI processing failed"
    default_message = "Failed to polish transcription"


class PublishFailedError(VoiceNoteError):
    """Any Notion page-creation failure outside the enumerated codes. HTTP 500."""

    status_code = 500
    error = "Failed to create note"
    default_message = "An unexpected error occurred"


class TokenExchangeFailedError(VoiceNoteError):
    """
    The Notion token endpoint answered with a non-success status.

    HTTP:  Same status as the token endpoint returned.
    """

    status_code = 500
    error = "Token exchange failed"
    default_message = "Failed to exchange authorization code"
