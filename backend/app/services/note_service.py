"""
VoiceNote Backend — Note Service (Pipeline Orchestrator)
=========================================================

What:  Chains the pipeline stages for the two note endpoints.
How:   Composes FileService, the LLM service and NotionService. Each stage
       runs only after the previous one succeeded; the first failure aborts
       the request with that stage's error.
Who:   Called by route handlers.

Pipeline A (POST /api/transcribe):
    ┌───────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate  │───▶│ Config check │───▶│ Store + STT  │───▶│ Cleanup  │
    │ (intake)  │    │ (no network) │    │ (Gemini)     │    │ (always) │
    └───────────┘    └──────────────┘    └──────────────┘    └──────────┘

Pipeline B (POST /api/create-note):
    ┌───────────┐    ┌──────────────┐    ┌────────┐    ┌───────┐    ┌─────────┐
    │ Required  │───▶│ Config check │───▶│ Polish │───▶│ Title │───▶│ Publish │
    │ fields    │    │ (no network) │    │        │    │       │    │ (Notion)│
    └───────────┘    └──────────────┘    └────────┘    └───────┘    └─────────┘

Nothing is ever partially reported: each pipeline returns a complete
result or raises.
"""

import logging
from typing import Optional

from app.config import settings
from app.exceptions import InvalidInputError, ServiceMisconfiguredError
from app.models.note import (
    PolishedNote,
    PublishedPage,
    TranscriptionResult,
    WorkspaceCredentials,
)
from app.schemas.note import CreateNoteRequest
from app.services.file_service import file_service
from app.services.gemini_service import gemini_service
from app.services.notion_service import notion_service

logger = logging.getLogger(__name__)

MISSING_FIELD = "Missing required field"


def _require(value: Optional[str], message: str, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(message=message, error=MISSING_FIELD, field=field)
    return value


def _require_gemini() -> None:
    # Checked before any file is written or any remote call is attempted
    if not settings.is_gemini_configured:
        raise ServiceMisconfiguredError(message="Gemini API key is not configured")


class NoteService:
    """
    Stateless orchestrator for the transcribe and create-note workflows.
    """

    async def transcribe(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        content_type: Optional[str],
    ) -> TranscriptionResult:
        """
        Validate the upload, transcribe it and remove the transient file.

        Args:
            filename: Original client filename (None if not sent)
            content: Uploaded bytes, or None when no `audio` field was sent
            content_type: Declared MIME type

        Raises:
            InvalidInputError: No file, wrong type, empty or too large
            ServiceMisconfiguredError: GEMINI_API_KEY missing
            TranscriptionFailedError: Gemini call failed
        """
        if content is None:
            raise InvalidInputError(
                message="Please upload an audio file with the key 'audio'",
                error="No audio file provided",
                field="audio",
            )

        upload = file_service.validate(filename, content, content_type)
        _require_gemini()

        async with file_service.stored_upload(upload) as stored:
            logger.info(
                "Transcribing file: %s (%d bytes, %s)",
                stored.path.name, stored.size, stored.content_type,
            )
            text = await gemini_service.transcribe_audio(str(stored.path), stored.content_type)

        logger.info("Transcription successful: %d chars", len(text))
        return TranscriptionResult(text=text)

    async def polish(self, transcription: str) -> PolishedNote:
        """Polish the raw text, then title the polished text."""
        logger.info("Polishing transcription (%d chars)...", len(transcription))
        polished_text = await gemini_service.polish_text(transcription)

        logger.info("Generating title...")
        title = await gemini_service.generate_title(polished_text)
        return PolishedNote(title=title, text=polished_text)

    async def create_note(self, request: CreateNoteRequest) -> PublishedPage:
        """
        Polish a transcription, title it and publish it to Notion.

        Required fields are checked in order (transcription, API key,
        database ID) before anything else happens.

        Raises:
            InvalidInputError: A required field is missing or blank
            ServiceMisconfiguredError: GEMINI_API_KEY missing
            AIProcessingFailedError: Polishing or title generation failed
            AuthFailedError / TargetNotFoundError / NotionValidationError /
            PublishFailedError: Notion rejected the page
        """
        transcription = _require(
            request.transcription, "Transcription text is required", "transcription"
        )
        credentials = WorkspaceCredentials(
            api_key=_require(request.notion_api_key, "Notion API key is required", "notionApiKey"),
            database_id=_require(
                request.notion_database_id, "Notion Database ID is required", "notionDatabaseId"
            ),
        )
        _require_gemini()

        note = await self.polish(transcription)

        logger.info('Creating Notion page with title: "%s"', note.title)
        page = await notion_service.create_page(credentials, note)
        logger.info("Notion page created successfully")
        return page


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
