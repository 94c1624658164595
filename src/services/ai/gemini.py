"""Gemini translation provider implementation."""

from typing import Optional

import google.generativeai as genai

from src.core.logging import get_logger
from src.services.ai.base import Translator

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You translate short texts shown on a bank ATM kiosk. "
    "Keep the tone polite and concise. Keep numbers, currency symbols and "
    "placeholders unchanged. Reply with the translated text only."
)

LANGUAGE_NAMES = {
    "ja": "Japanese",
    "en": "English",
    "ko": "Korean",
    "zh": "Chinese",
}


class GeminiTranslator(Translator):
    """Translation provider using Google Gemini API."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash") -> None:
        """Initialize the Gemini provider.

        Args:
            api_key: Google API key for Gemini.
            model: Model name to use.
        """
        self._api_key = api_key
        self._model_name = model
        self._model = None

        if self._api_key:
            genai.configure(api_key=self._api_key)
            self._model = genai.GenerativeModel(
                self._model_name,
                system_instruction=SYSTEM_PROMPT,
            )
            logger.info("GeminiTranslator initialized with model: %s", self._model_name)

    @property
    def name(self) -> str:
        """Return the provider name."""
        return "gemini"

    def is_available(self) -> bool:
        """Check if the provider is available."""
        return bool(self._api_key) and self._model is not None

    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        hint: Optional[str] = None,
    ) -> str:
        """Translate text using Gemini API.

        Raises:
            RuntimeError: If API call fails or provider is not available.
        """
        if not self.is_available():
            raise RuntimeError("GeminiTranslator is not available. Check API key.")

        assert self._model is not None

        source = LANGUAGE_NAMES.get(source_language, source_language)
        target = LANGUAGE_NAMES.get(target_language, target_language)
        prompt = f"Translate from {source} to {target}.\n"
        if hint:
            prompt += f"Context: {hint}\n"
        prompt += f"Text:\n{text}"

        generation_config = genai.types.GenerationConfig(
            max_output_tokens=256,
        )

        try:
            response = self._model.generate_content(
                prompt,
                generation_config=generation_config,
            )
            result: str = response.text.strip()
            return result
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            raise RuntimeError(f"Gemini API error: {e}") from e
