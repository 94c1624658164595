"""Mock translation provider for testing and fallback."""

from typing import Optional

from src.services.ai.base import Translator


class MockTranslator(Translator):
    """Mock provider that tags text with the target language.

    Used for testing and as a fallback when no API key is configured.
    """

    @property
    def name(self) -> str:
        """Return the provider name."""
        return "mock"

    def is_available(self) -> bool:
        """Check if the provider is available."""
        return True

    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        hint: Optional[str] = None,
    ) -> str:
        """Return the text prefixed with the target language code."""
        if not text:
            return text
        return f"[{target_language}] {text}"
