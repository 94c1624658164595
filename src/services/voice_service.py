"""음성 출력 Service - 세션의 미발화 봇 메시지를 TTS 어댑터로 전달

봇 메시지 1건은 정확히 1회만 발화한다 (엔진의 spoken 표식 사용).
발화 실패도 처리 완료로 본다. 음성은 보조 수단이고 화면 표시가 우선이다.
"""

import logging

from src.core.flow.engine import DialogEngine
from src.services.voice.base import SpeechOutput

logger = logging.getLogger(__name__)


class VoiceOutputService:
    """미발화 메시지 → SpeechOutput"""

    def __init__(self, output: SpeechOutput) -> None:
        self._output = output

    @property
    def output(self) -> SpeechOutput:
        return self._output

    def speak_pending(self, engine: DialogEngine) -> int:
        """미발화 봇 메시지를 순서대로 발화하고 표식. 처리한 메시지 수 반환."""
        rate = engine.catalog.settings.voice_speed
        handled = 0
        for message in engine.unspoken_messages():
            try:
                self._output.speak(
                    message.content,
                    engine.language,
                    audio_key=message.audio_key,
                    rate=rate,
                )
            except Exception:
                logger.exception(
                    "Speech output failed (provider=%s, message=%s)",
                    self._output.name,
                    message.id,
                )
            engine.mark_spoken(message.id)
            handled += 1
        return handled
