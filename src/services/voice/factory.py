"""Factory for creating voice adapter instances."""

from typing import Optional

from src.config import settings
from src.core.logging import get_logger
from src.services.voice.audio_asset import AudioAssetSpeechOutput
from src.services.voice.base import SpeechInput, SpeechOutput
from src.services.voice.mock import MockSpeechInput, MockSpeechOutput

logger = get_logger(__name__)


def get_speech_output(provider_name: Optional[str] = None) -> SpeechOutput:
    """Get a speech output adapter.

    Args:
        provider_name: Optional adapter name. If not specified,
                      uses TTS_PROVIDER from config.
    """
    name = provider_name or settings.TTS_PROVIDER

    if name == "mock":
        logger.debug("Using MockSpeechOutput")
        return MockSpeechOutput()

    if name == "audio_asset":
        output = AudioAssetSpeechOutput(settings.AUDIO_ASSET_DIR)
        if output.is_available():
            logger.debug("Using AudioAssetSpeechOutput: %s", settings.AUDIO_ASSET_DIR)
            return output
        logger.warning(
            "AUDIO_ASSET_DIR '%s' not found, falling back to MockSpeechOutput",
            settings.AUDIO_ASSET_DIR,
        )
        return MockSpeechOutput()

    logger.warning("Unknown TTS provider '%s', falling back to MockSpeechOutput", name)
    return MockSpeechOutput()


def get_speech_input(provider_name: Optional[str] = None) -> SpeechInput:
    """Get a speech input adapter (STT_PROVIDER from config by default)."""
    name = provider_name or settings.STT_PROVIDER

    if name == "mock":
        logger.debug("Using MockSpeechInput")
        return MockSpeechInput()

    logger.warning("Unknown STT provider '%s', falling back to MockSpeechInput", name)
    return MockSpeechInput()
