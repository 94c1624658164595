"""키오스크 세션 Service - 세션 ID ↔ DialogEngine, 음성 입출력 연결

- 세션마다 DialogEngine 1개. 카탈로그는 CatalogService에서 주입받고 핫스왑 대상 등록.
- 봇 메시지가 추가될 때마다(타이머 콜백 포함) 미발화 메시지를 음성 출력.
- 엔진 예외(InputValidationError, InvalidOperationError)는 그대로 전파. HTTP 변환은 API 계층.
- 마지막 조작 이후 일정 시간 방치된 세션은 expire_idle_sessions로 정리.
"""

import asyncio
import logging
import time
import uuid
from typing import Callable, Optional

from src.core.catalog.models import NodeCatalog
from src.core.event_bus import DialogEvent, EventBus
from src.core.event_types import DialogEventTypes
from src.core.flow.engine import DialogEngine, EngineConfig
from src.core.flow.messages import get_message
from src.core.flow.models import DialogSnapshot
from src.core.flow.scheduler import Scheduler
from src.core.matching.matcher import IntentMatcher, MatchingConfig
from src.core.matching.strategy import ResponseStrategy
from src.services.catalog_service import CatalogService
from src.services.voice.base import SpeechInput
from src.services.voice_service import VoiceOutputService

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    """존재하지 않는 세션 ID"""


class UnsupportedLanguageError(LookupError):
    """카탈로그에 없는 언어"""


class KioskSessionService:
    """키오스크 세션 관리"""

    def __init__(
        self,
        catalog_service: CatalogService,
        scheduler: Scheduler,
        event_bus: EventBus,
        voice_output: VoiceOutputService,
        speech_input: SpeechInput,
        engine_config: Optional[EngineConfig] = None,
        matching_config: Optional[MatchingConfig] = None,
        default_language: str = "ja",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._catalogs = catalog_service
        self._scheduler = scheduler
        self._bus = event_bus
        self._voice = voice_output
        self._stt = speech_input
        self._engine_config = engine_config or EngineConfig()
        self._matcher = IntentMatcher(matching_config)
        self._strategy = ResponseStrategy.from_config(self._matcher.config)
        self._default_language = default_language
        self._sessions: dict[str, DialogEngine] = {}
        self._clock = clock
        self._last_active: dict[str, float] = {}
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        """EventBus 구독 등록"""
        self._bus.subscribe(
            DialogEventTypes.BOT_MESSAGE_APPENDED, self._on_bot_message_appended
        )
        self._bus.subscribe(DialogEventTypes.DIALOG_IDLE, self._on_dialog_idle)
        self._bus.subscribe(
            DialogEventTypes.STAFF_ASSISTANCE_ROUTED, self._on_staff_assistance
        )

    # === 세션 생명주기 ===

    def create_session(
        self, language: Optional[str] = None
    ) -> tuple[str, DialogSnapshot]:
        """세션 생성 후 (세션 ID, 시작 노드 스냅샷) 반환.

        Raises:
            UnsupportedLanguageError: 카탈로그에 없는 언어
        """
        language = language or self._default_language
        catalog = self._get_catalog(language)
        session_id = uuid.uuid4().hex

        engine = DialogEngine(
            catalog,
            self._scheduler,
            matcher=self._matcher,
            strategy=self._strategy,
            config=self._engine_config,
            event_bus=self._bus,
            session_id=session_id,
        )
        self._sessions[session_id] = engine
        self._last_active[session_id] = self._clock()
        self._catalogs.register(engine)
        # 시작 노드 메시지는 등록 전에 추가되므로 여기서 발화
        self._voice.speak_pending(engine)
        logger.info("Session created: %s (language=%s)", session_id, language)
        return session_id, engine.snapshot()

    def delete_session(self, session_id: str) -> None:
        engine = self.get_engine(session_id)
        engine.close()
        self._catalogs.unregister(engine)
        del self._sessions[session_id]
        self._last_active.pop(session_id, None)
        logger.info("Session deleted: %s", session_id)

    def get_engine(self, session_id: str) -> DialogEngine:
        """Raises: SessionNotFoundError"""
        engine = self._sessions.get(session_id)
        if engine is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return engine

    def get_snapshot(self, session_id: str) -> DialogSnapshot:
        return self.get_engine(session_id).render()

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def close(self) -> None:
        """모든 세션 정리 (종료 시)"""
        for session_id in list(self._sessions):
            self.delete_session(session_id)

    # === 방치 세션 만료 ===

    def expire_idle_sessions(self, max_idle_seconds: float) -> list[str]:
        """마지막 조작 후 max_idle_seconds 이상 지난 세션 삭제.

        조작 = 세션 생성과 엔진 조작 API 호출. 상태 조회(get_snapshot)와
        타이머 전이는 활동으로 치지 않는다.

        Returns:
            삭제된 세션 ID 목록
        """
        now = self._clock()
        expired = [
            session_id
            for session_id, last_active in self._last_active.items()
            if now - last_active >= max_idle_seconds
        ]
        for session_id in expired:
            self.delete_session(session_id)
        if expired:
            logger.info("Expired %d idle session(s)", len(expired))
        return expired

    async def expire_idle_periodically(
        self, max_idle_seconds: float, interval_seconds: float
    ) -> None:
        """interval마다 방치 세션 정리. 취소될 때까지 실행."""
        logger.info(
            "Idle session expiry: after %.0fs, checked every %.0fs",
            max_idle_seconds,
            interval_seconds,
        )
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.expire_idle_sessions(max_idle_seconds)
            except Exception:
                logger.exception("Idle session expiry failed")

    # === 엔진 조작 ===

    def select_choice(self, session_id: str, choice_id: str) -> DialogSnapshot:
        return self._use(session_id).select_choice(choice_id)

    def submit_text(self, session_id: str, text: str) -> DialogSnapshot:
        return self._use(session_id).submit_text(text)

    def submit_input(self, session_id: str, value: str) -> DialogSnapshot:
        return self._use(session_id).submit_input(value)

    def submit_confirmation(self, session_id: str, confirmed: bool) -> DialogSnapshot:
        return self._use(session_id).submit_confirmation(confirmed)

    def resolve_pending_confirmation(
        self, session_id: str, confirmed: bool
    ) -> DialogSnapshot:
        return self._use(session_id).resolve_pending_confirmation(confirmed)

    def reset(self, session_id: str) -> DialogSnapshot:
        return self._use(session_id).reset()

    def change_language(self, session_id: str, language: str) -> DialogSnapshot:
        """언어 전환 = 해당 언어 카탈로그로 교체"""
        engine = self._use(session_id)
        catalog = self._get_catalog(language)
        if catalog.language == engine.language:
            return engine.render()
        return engine.swap_catalog(catalog)

    def submit_speech(self, session_id: str, audio: bytes) -> DialogSnapshot:
        """녹음 → STT → 자유 발화. 인식 결과가 비면 재질문."""
        engine = self._use(session_id)
        text = self._stt.transcribe(audio, engine.language)
        if not text:
            logger.info("Empty transcription (session=%s)", session_id)
            return engine.add_bot_message(get_message(engine.language, "fallback"))
        logger.debug("Transcribed (session=%s): %s", session_id, text)
        return engine.submit_text(text)

    # === 이벤트 핸들러 ===

    def _on_bot_message_appended(self, event: DialogEvent) -> None:
        engine = self._sessions.get(event.data.get("session_id"))
        if engine is not None:
            self._voice.speak_pending(engine)

    def _on_dialog_idle(self, event: DialogEvent) -> None:
        logger.warning(
            "Session %s idle at unknown node '%s'",
            event.data.get("session_id"),
            event.data.get("node_id"),
        )

    def _on_staff_assistance(self, event: DialogEvent) -> None:
        logger.info(
            "Staff assistance requested (session=%s, node=%s, amount=%s)",
            event.data.get("session_id"),
            event.data.get("node_id"),
            event.data.get("amount"),
        )

    # === 내부 ===

    def _use(self, session_id: str) -> DialogEngine:
        """조작 대상 엔진 조회 + 마지막 활동 시각 갱신"""
        engine = self.get_engine(session_id)
        self._last_active[session_id] = self._clock()
        return engine

    def _get_catalog(self, language: str) -> NodeCatalog:
        try:
            return self._catalogs.get_catalog(language)
        except KeyError:
            raise UnsupportedLanguageError(f"Unsupported language: {language}") from None
