"""Abstract base class for translation providers."""

from abc import ABC, abstractmethod
from typing import Optional


class Translator(ABC):
    """Abstract base class for translation providers.

    Used to produce a node catalog for a language the flow file does not
    carry yet. Implementations translate one kiosk text at a time.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is available and configured."""
        ...

    @abstractmethod
    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        hint: Optional[str] = None,
    ) -> str:
        """Translate a single kiosk text.

        Args:
            text: Source text (node content, label or choice text).
            source_language: Language code of the text (e.g. "ja").
            target_language: Language code to translate into (e.g. "en").
            hint: Optional short description of where the text is shown.

        Returns:
            Translated text.

        Raises:
            RuntimeError: If the provider call fails.
        """
        ...
