"""
VoiceNote Backend — Transcribe Route Handler
=============================================

What:  Handles POST /api/transcribe (multipart upload, field `audio`).
How:   Reads the upload (bounded by the size limit), delegates the
       validate → store → transcribe → cleanup workflow to NoteService.

Error responses (handled by global exception handlers):
    HTTP 400: Missing file, invalid type, empty or oversize upload
    HTTP 4xx: Gemini rejected the request (status passed through)
    HTTP 500: GEMINI_API_KEY missing or Gemini failure
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, UploadFile

from app.config import settings
from app.schemas.note import ErrorResponse, TranscriptionResponse
from app.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Transcribe"])


@router.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    responses={
        400: {"description": "Missing or invalid audio file", "model": ErrorResponse},
        500: {"description": "Misconfiguration or transcription failure", "model": ErrorResponse},
    },
    summary="Transcribe an audio recording",
)
async def transcribe_audio(
    audio: Optional[UploadFile] = File(
        default=None,
        description="Audio recording (audio/*, max 10MB)",
    ),
) -> TranscriptionResponse:
    content: Optional[bytes] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None

    if audio is not None:
        try:
            # One byte past the limit is enough to detect an oversize upload
            content = await audio.read(settings.max_upload_size + 1)
            filename = audio.filename
            content_type = audio.content_type
        finally:
            await audio.close()
        logger.info(
            "Received transcribe request: filename=%s, type=%s, size=%d bytes",
            filename or "unknown", content_type, len(content),
        )

    result = await note_service.transcribe(filename, content, content_type)
    return TranscriptionResponse(transcription=result.text)
