"""
VoiceNote Backend — Google Gemini Service Implementation
=========================================================

What:  Concrete LLM service using Google Gemini for transcription, text
       polishing and title generation.
How:   Each stage is a single `generate_content_async` call with a fixed
       instruction. Audio is sent inline (the upload limit keeps it well
       under the inline request size), so no copy is stored by the provider.
Who:   Instantiated once at import; called by NoteService.

Error mapping:
    missing GEMINI_API_KEY       → ServiceMisconfiguredError (no call made)
    GoogleAPICallError (4xx)     → stage error with the same status + remote message
    GoogleAPICallError (5xx)     → stage error, 500, remote message
    anything else                → stage error, 500, generic message

No retries: a failure aborts the request immediately.
"""

import logging
import time
from typing import Any, Dict, Optional, Type

import aiofiles
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from app.config import settings
from app.exceptions import (
    AIProcessingFailedError,
    ServiceMisconfiguredError,
    TranscriptionFailedError,
    VoiceNoteError,
    passthrough_status,
)
from app.models.note import DEFAULT_NOTE_TITLE, TRANSCRIPTION_LANGUAGE
from app.services.llm_base import LLMService

logger = logging.getLogger(__name__)


LANGUAGE_NAMES = {"en": "English"}

TRANSCRIPTION_PROMPT = f"""Transcribe this audio recording verbatim.
The recording is in {LANGUAGE_NAMES[TRANSCRIPTION_LANGUAGE]}.
Return ONLY the spoken words as plain text, without timestamps, speaker labels,
commentary or descriptions of background sounds.
If nothing is spoken, return an empty response."""

POLISHING_PROMPT = """You are a text editor that polishes voice transcriptions. Your task is to:
1. Remove filler words (um, uh, like, you know, etc.)
2. Fix grammar and punctuation
3. Organize the text into clear, well-structured paragraphs
4. Maintain the original meaning and tone
5. Keep the text natural and conversational

Return ONLY the polished text, without any preamble or explanation."""

TITLE_PROMPT = """Based on the following text, generate a concise, descriptive title (maximum 60 characters). Return ONLY the title text, nothing else:"""

# Deterministic output for transcription; moderate creativity for editing
TRANSCRIPTION_CONFIG: Dict[str, Any] = {"temperature": 0.0}
POLISHING_CONFIG: Dict[str, Any] = {"temperature": 0.7}
# Titles are not truncated after generation
TITLE_CONFIG: Dict[str, Any] = {"temperature": 0.7, "max_output_tokens": 20}


def _response_text(response: Any) -> str:
    """
    Extract plain text from a Gemini response.

    `response.text` raises ValueError when the candidate has no text parts
    (e.g. blocked output); that is treated as an empty response.
    """
    try:
        text = response.text
    except ValueError:
        return ""
    return text or ""


class GeminiService(LLMService):
    """
    Google Gemini implementation of the three pipeline stages.

    The API key is read from settings on every call so that a missing key
    is reported per request rather than at startup.
    """

    def __init__(self):
        if settings.gemini_api_key:
            genai.configure(api_key=settings.gemini_api_key)
        logger.info("GeminiService initialized with model=%s", settings.gemini_model)

    def _model(self, system_instruction: Optional[str] = None) -> Any:
        """Check configuration, then build a model handle. Raises before any network call."""
        if not settings.gemini_api_key:
            raise ServiceMisconfiguredError(message="Gemini API key is not configured")
        genai.configure(api_key=settings.gemini_api_key)
        if system_instruction:
            return genai.GenerativeModel(
                settings.gemini_model,
                system_instruction=system_instruction,
            )
        return genai.GenerativeModel(settings.gemini_model)

    async def _generate(
        self,
        model: Any,
        contents: Any,
        generation_config: Dict[str, Any],
        stage: str,
        error_cls: Type[VoiceNoteError],
        fallback_message: str,
    ) -> str:
        """
        Single remote call with uniform error wrapping and timing.
        """
        start = time.perf_counter()
        try:
            response = await model.generate_content_async(
                contents,
                generation_config=generation_config,
            )
        except google_exceptions.GoogleAPICallError as e:
            logger.error(
                "Gemini %s failed after %.0fms: status=%s %s",
                stage, (time.perf_counter() - start) * 1000, e.code, e.message,
            )
            raise error_cls(
                message=e.message or fallback_message,
                status_code=passthrough_status(e.code),
                context={"stage": stage, "remote_status": e.code},
            ) from e
        except Exception as e:
            logger.error("Unexpected Gemini %s error: %s", stage, e, exc_info=True)
            raise error_cls(
                message=fallback_message,
                context={"stage": stage, "error_type": type(e).__name__},
            ) from e

        text = _response_text(response).strip()
        logger.info(
            "Gemini %s completed in %.0fms, %d chars",
            stage, (time.perf_counter() - start) * 1000, len(text),
        )
        return text

    async def transcribe_audio(self, audio_path: str, mime_type: str) -> str:
        model = self._model()
        async with aiofiles.open(audio_path, "rb") as f:
            audio_bytes = await f.read()

        return await self._generate(
            model,
            [TRANSCRIPTION_PROMPT, {"mime_type": mime_type, "data": audio_bytes}],
            TRANSCRIPTION_CONFIG,
            stage="transcription",
            error_cls=TranscriptionFailedError,
            fallback_message="Failed to transcribe audio",
        )

    async def polish_text(self, text: str) -> str:
        model = self._model(system_instruction=POLISHING_PROMPT)
        polished = await self._generate(
            model,
            text,
            POLISHING_CONFIG,
            stage="polishing",
            error_cls=AIProcessingFailedError,
            fallback_message="Failed to polish transcription",
        )
        if not polished:
            logger.warning("Polishing returned no text; using the raw transcription")
            return text
        return polished

    async def generate_title(self, text: str) -> str:
        model = self._model(system_instruction=TITLE_PROMPT)
        title = await self._generate(
            model,
            text,
            TITLE_CONFIG,
            stage="title",
            error_cls=AIProcessingFailedError,
            fallback_message="Failed to generate title",
        )
        return title or DEFAULT_NOTE_TITLE


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_service = GeminiService()
