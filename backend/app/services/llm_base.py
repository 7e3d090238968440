"""
VoiceNote Backend — Abstract LLM Service Interface
===================================================

What:  Abstract base class for the speech-to-text and text-generation provider.
How:   Concrete implementations inherit from LLMService and implement the
       three pipeline stages. NoteService only depends on this contract.

Design Decision:
    One interface covers transcription, polishing and titling because a
    single provider credential backs all three calls.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Contract:
        - Each method makes exactly one remote call, with no retry
        - A missing credential raises ServiceMisconfiguredError before any call
        - Provider errors are wrapped in TranscriptionFailedError or
          AIProcessingFailedError
        - Empty provider output never propagates as "nothing": polish_text
          falls back to its input and generate_title to a default label
    """

    @abstractmethod
    async def transcribe_audio(self, audio_path: str, mime_type: str) -> str:
        """
        Convert a stored audio file to plain English text.

        Args:
            audio_path: Path of the validated audio in transient storage.
            mime_type: Declared content type of the audio.

        Raises:
            ServiceMisconfiguredError: No provider credential configured.
            TranscriptionFailedError: The provider call failed.
        """
        ...

    @abstractmethod
    async def polish_text(self, text: str) -> str:
        """
        Remove filler words, fix grammar and structure `text` into paragraphs.

        Returns `text` unchanged if the provider returns nothing.
        """
        ...

    @abstractmethod
    async def generate_title(self, text: str) -> str:
        """Produce a short title for `text`; a default label if the provider returns nothing."""
        ...
