"""Factory for translation providers.

Providers are looked up by name. A provider that cannot be configured, or that
reports itself unavailable once built, is replaced by MockTranslator so catalog
translation still produces a (tagged) catalog offline.
"""

from typing import Callable, Optional

from src.config import settings
from src.core.logging import get_logger
from src.services.ai.base import Translator
from src.services.ai.gemini import GeminiTranslator
from src.services.ai.mock import MockTranslator

logger = get_logger(__name__)

# Short UI strings only; a fast model is enough.
DEFAULT_TRANSLATION_MODEL = "gemini-2.0-flash"


def _build_gemini() -> Optional[Translator]:
    if not settings.AI_API_KEY:
        logger.warning("AI_API_KEY not set, gemini translator unavailable")
        return None
    model = settings.AI_MODEL or DEFAULT_TRANSLATION_MODEL
    logger.debug("Building GeminiTranslator with model: %s", model)
    return GeminiTranslator(api_key=settings.AI_API_KEY, model=model)


_BUILDERS: dict[str, Callable[[], Optional[Translator]]] = {
    "mock": MockTranslator,
    "gemini": _build_gemini,
}


def available_translators() -> list[str]:
    """Registered provider names."""
    return sorted(_BUILDERS)


def get_translator(provider_name: Optional[str] = None) -> Translator:
    """Get a translation provider instance.

    Args:
        provider_name: Optional provider name (case-insensitive). If not
                      specified, uses AI_PROVIDER from config.

    Returns:
        A usable Translator. Falls back to MockTranslator when the requested
        provider is unknown, unconfigured or unavailable.
    """
    name = (provider_name or settings.AI_PROVIDER).lower()

    builder = _BUILDERS.get(name)
    if builder is None:
        logger.warning(
            "Unknown translator '%s' (known: %s), falling back to MockTranslator",
            name,
            ", ".join(available_translators()),
        )
        return MockTranslator()

    translator = builder()
    if translator is None or not translator.is_available():
        logger.warning("Translator '%s' unavailable, falling back to MockTranslator", name)
        return MockTranslator()

    logger.debug("Using %s translator", translator.name)
    return translator
