"""Mock voice adapters for testing and fallback."""

from typing import Optional

from src.core.logging import get_logger
from src.services.voice.base import SpeechInput, SpeechOutput

logger = get_logger(__name__)


class MockSpeechOutput(SpeechOutput):
    """Records spoken texts instead of producing audio."""

    def __init__(self) -> None:
        self.spoken: list[tuple[str, str, Optional[str]]] = []

    @property
    def name(self) -> str:
        return "mock"

    def is_available(self) -> bool:
        return True

    def speak(
        self,
        text: str,
        language: str,
        audio_key: Optional[str] = None,
        rate: float = 1.0,
    ) -> bool:
        if not text.strip():
            return False
        self.spoken.append((text, language, audio_key))
        logger.debug("[mock tts] (%s) %s", language, text)
        return True


class MockSpeechInput(SpeechInput):
    """Treats the audio payload as UTF-8 text."""

    @property
    def name(self) -> str:
        return "mock"

    def is_available(self) -> bool:
        return True

    def transcribe(self, audio: bytes, language: str) -> str:
        return audio.decode("utf-8", errors="ignore").strip()
