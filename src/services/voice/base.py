"""Abstract base classes for kiosk voice I/O adapters."""

from abc import ABC, abstractmethod
from typing import Optional


class SpeechOutput(ABC):
    """Text-to-speech adapter.

    The dialog engine never calls this directly. VoiceOutputService reads
    unspoken bot messages from a session and hands them to the adapter.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the adapter name."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the adapter can produce audio."""
        ...

    @abstractmethod
    def speak(
        self,
        text: str,
        language: str,
        audio_key: Optional[str] = None,
        rate: float = 1.0,
    ) -> bool:
        """Speak one bot message.

        Args:
            text: Message text.
            language: Language code of the session.
            audio_key: Pre-recorded voice asset key, if the message has one.
            rate: Playback speed from the catalog's language settings.

        Returns:
            True if audio was produced, False if skipped.
        """
        ...


class SpeechInput(ABC):
    """Speech-to-text adapter producing a single utterance."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the adapter name."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the adapter can transcribe audio."""
        ...

    @abstractmethod
    def transcribe(self, audio: bytes, language: str) -> str:
        """Transcribe recorded audio into text.

        Returns:
            Recognized text. Empty string when nothing was recognized.
        """
        ...
