"""Voice I/O adapter module."""

from src.services.voice.audio_asset import AudioAssetSpeechOutput
from src.services.voice.base import SpeechInput, SpeechOutput
from src.services.voice.factory import get_speech_input, get_speech_output
from src.services.voice.mock import MockSpeechInput, MockSpeechOutput

__all__ = [
    "AudioAssetSpeechOutput",
    "SpeechInput",
    "SpeechOutput",
    "MockSpeechInput",
    "MockSpeechOutput",
    "get_speech_input",
    "get_speech_output",
]
