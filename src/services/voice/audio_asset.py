"""Pre-recorded audio asset speech output.

Assets live at ``<asset_dir>/<language>/<audio_key>.<ext>``. The kiosk front end
plays the resolved file; this adapter resolves and queues it. Messages without
an audio key, or whose asset is missing, are skipped without error.
"""

from pathlib import Path
from typing import Optional, Union

from src.core.logging import get_logger
from src.services.voice.base import SpeechOutput

logger = get_logger(__name__)

# 우선순위 순
AUDIO_EXTENSIONS = (".wav", ".mp3")


class AudioAssetSpeechOutput(SpeechOutput):
    """Speech output backed by recorded voice files."""

    def __init__(self, asset_dir: Union[str, Path]) -> None:
        self._asset_dir = Path(asset_dir)
        self.queue: list[Path] = []

    @property
    def name(self) -> str:
        return "audio_asset"

    def is_available(self) -> bool:
        return self._asset_dir.is_dir()

    def resolve(self, audio_key: str, language: str) -> Optional[Path]:
        """Return the best asset file for the key, or None."""
        base = self._asset_dir / language
        for ext in AUDIO_EXTENSIONS:
            candidate = base / f"{audio_key}{ext}"
            if candidate.is_file():
                return candidate
        return None

    def speak(
        self,
        text: str,
        language: str,
        audio_key: Optional[str] = None,
        rate: float = 1.0,
    ) -> bool:
        if not text.strip():
            return False
        if not audio_key:
            logger.debug("No audio key for message, skipping playback")
            return False

        path = self.resolve(audio_key, language)
        if path is None:
            logger.info("Audio asset not found (key=%s, lang=%s)", audio_key, language)
            return False

        self.queue.append(path)
        logger.debug("Queued audio asset: %s", path)
        return True
