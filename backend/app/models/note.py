"""
VoiceNote Backend — Domain Models
==================================

What:  In-memory representations of the entities flowing through the pipeline.
How:   Plain dataclasses; none of them is persisted and none outlives its request.

Entity lifecycle:
    AudioUpload          created on intake, file deleted after transcription
    TranscriptionResult  returned by the transcription stage
    WorkspaceCredentials caller-supplied, used once for the publish call
    PolishedNote         output of polish + title generation
    PublishedPage        terminal artifact of create-note
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# MVP is English only
TRANSCRIPTION_LANGUAGE = "en"

DEFAULT_NOTE_TITLE = "Voice Note"


@dataclass
class AudioUpload:
    """
    An uploaded audio blob accepted by the intake validator.

    `path` is None until the content has been written to transient storage.
    """

    filename: str
    content_type: str
    content: bytes = field(repr=False)
    path: Optional[Path] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class TranscriptionResult:
    text: str
    language: str = TRANSCRIPTION_LANGUAGE


@dataclass(frozen=True)
class WorkspaceCredentials:
    """Per-request Notion credentials. Never stored."""

    api_key: str = field(repr=False)
    database_id: str


@dataclass(frozen=True)
class PolishedNote:
    title: str
    text: str


@dataclass(frozen=True)
class PublishedPage:
    url: str
    title: str
    text: str
    page_id: Optional[str] = None
