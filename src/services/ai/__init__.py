"""Translation provider module."""

from src.services.ai.base import Translator
from src.services.ai.factory import get_translator
from src.services.ai.gemini import GeminiTranslator
from src.services.ai.mock import MockTranslator

__all__ = [
    "Translator",
    "GeminiTranslator",
    "MockTranslator",
    "get_translator",
]
