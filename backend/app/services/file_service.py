"""
VoiceNote Backend — Audio Intake Service
=========================================

What:  Validates uploaded audio, writes it to transient storage and
       guarantees its deletion.
How:   Validates declared MIME type and size before anything touches the
       disk, then stores the blob under `<time_ns>-<original name>`.
       `stored_upload()` is an async context manager: the file is removed
       on every exit path of the `async with` block.
Who:   Called by NoteService for POST /api/transcribe.

Lifecycle of an uploaded file:
    1. validate()            → InvalidInputError, nothing written
    2. store_file()          → file exists on disk
    3. consumer runs         → success or any exception
    4. cleanup_file()        → file removed (errors logged, never raised)
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles

from app.config import settings
from app.exceptions import InvalidInputError, VoiceNoteError
from app.models.note import AudioUpload

logger = logging.getLogger(__name__)

# ── Allowed Content Types ─────────────────────────────────────────────────
# Any other "audio/*" type is accepted as well (see is_allowed_content_type)
ALLOWED_MIME_TYPES = frozenset({
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/m4a",
    "audio/x-m4a",
    "audio/mp4",
    "audio/webm",
    "audio/ogg",
})

INVALID_AUDIO = "Invalid audio file"

# Most filesystems cap a name at 255 bytes; leaves room for the timestamp prefix
MAX_STORED_NAME_BYTES = 200


def is_allowed_content_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime in ALLOWED_MIME_TYPES or mime.startswith("audio/")


class FileService:
    """
    Manages validation, transient storage and cleanup of uploaded audio.

    Stored names combine a nanosecond timestamp with the client filename so
    concurrent uploads never share a path.
    """

    def __init__(self, upload_dir: Optional[str] = None, max_upload_size: Optional[int] = None):
        """
        Args:
            upload_dir: Override the transient directory (used in tests).
            max_upload_size: Override the size limit in bytes (used in tests).
        """
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.max_upload_size = max_upload_size or settings.max_upload_size

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """
        Check the declared MIME type against the audio allow-list.

        Returns the normalized MIME type (lowercase, parameters stripped).
        """
        if not is_allowed_content_type(content_type):
            raise InvalidInputError(
                message="Invalid file type. Only audio files are allowed.",
                error=INVALID_AUDIO,
                field="audio",
                context={"content_type": content_type},
            )
        return content_type.split(";", 1)[0].strip().lower()

    def validate_size(self, content: bytes) -> None:
        """Reject empty uploads and anything larger than the configured limit."""
        size = len(content)
        if size == 0:
            raise InvalidInputError(
                message="The uploaded audio file is empty.",
                error=INVALID_AUDIO,
                field="audio",
            )
        if size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise InvalidInputError(
                message=f"Audio file is too large. Maximum size is {max_mb:.0f}MB.",
                error=INVALID_AUDIO,
                field="audio",
                context={"size": size, "max_size": self.max_upload_size},
            )

    def validate(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
    ) -> AudioUpload:
        """
        Run all intake checks and build the AudioUpload.

        Order: content type first (no bytes inspected), then size.
        """
        mime = self.validate_content_type(content_type)
        self.validate_size(content)
        return AudioUpload(
            filename=filename or "audio",
            content_type=mime,
            content=content,
        )

    def _generate_storage_path(self, filename: str) -> Path:
        # Only the basename of the client filename is kept
        safe_name = Path(filename.replace("\\", "/")).name or "audio"
        encoded = safe_name.encode("utf-8")
        if len(encoded) > MAX_STORED_NAME_BYTES:
            # Keep the tail so the extension survives
            safe_name = encoded[-MAX_STORED_NAME_BYTES:].decode("utf-8", errors="ignore")
        return self.upload_dir / f"{time.time_ns()}-{safe_name}"

    async def store_file(self, upload: AudioUpload) -> Path:
        """
        Write the validated audio to transient storage.

        Sets and returns `upload.path`.

        Raises:
            VoiceNoteError (500) if the directory or file cannot be written.
        """
        path = self._generate_storage_path(upload.filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(upload.content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, e)
            # A partial write may have left a file behind
            await self.cleanup_file(path)
            raise VoiceNoteError(
                message="Failed to save uploaded audio. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        upload.path = path
        logger.info("Stored upload %s (%d bytes)", path.name, upload.size)
        return path

    async def cleanup_file(self, file_path: Path) -> None:
        """
        Remove a transient file.

        Failures are logged and swallowed so a cleanup problem can never
        replace the error (or result) of the request that owned the file.
        """
        try:
            os.remove(file_path)
            logger.info("Cleaned up file: %s", Path(file_path).name)
        except FileNotFoundError:
            logger.debug("Cleanup: file already gone: %s", Path(file_path).name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, e)

    @asynccontextmanager
    async def stored_upload(self, upload: AudioUpload) -> AsyncIterator[AudioUpload]:
        """
        Store `upload` for the duration of an `async with` block.

        Usage:
            async with file_service.stored_upload(upload) as stored:
                text = await transcribe(stored.path)

        If storing fails nothing was written and nothing is cleaned up.
        """
        path = await self.store_file(upload)
        try:
            yield upload
        finally:
            await self.cleanup_file(path)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
