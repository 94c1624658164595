"""KioskSessionService 테스트"""

import asyncio
from pathlib import Path

import pytest

from src.core.event_bus import EventBus
from src.core.flow.engine import EngineConfig
from src.core.flow.errors import InvalidOperationError
from src.core.flow.messages import get_message
from src.core.flow.scheduler import ManualScheduler
from src.services.catalog_service import CatalogService
from src.services.session_service import (
    KioskSessionService,
    SessionNotFoundError,
    UnsupportedLanguageError,
)
from src.services.voice.mock import MockSpeechInput, MockSpeechOutput
from src.services.voice_service import VoiceOutputService


@pytest.fixture()
def catalog_service(flow_path: Path) -> CatalogService:
    service = CatalogService(flow_path)
    service.load()
    return service


@pytest.fixture()
def service(
    catalog_service: CatalogService,
    scheduler: ManualScheduler,
    speech_output: MockSpeechOutput,
) -> KioskSessionService:
    return KioskSessionService(
        catalog_service=catalog_service,
        scheduler=scheduler,
        event_bus=EventBus(),
        voice_output=VoiceOutputService(speech_output),
        speech_input=MockSpeechInput(),
        engine_config=EngineConfig(amount_ceiling=50_000),
    )


@pytest.fixture()
def session_id(service: KioskSessionService, scheduler: ManualScheduler) -> str:
    """거래 선택 노드까지 진행한 세션"""
    session_id, _ = service.create_session()
    scheduler.advance(2.0)
    return session_id


# ── 생명주기 ──


class TestLifecycle:
    def test_create_default_language(
        self, service: KioskSessionService, catalog_service: CatalogService
    ) -> None:
        session_id, snapshot = service.create_session()
        assert snapshot.language == "ja"
        assert snapshot.current_node_id == "start"
        assert service.session_count == 1
        assert catalog_service.engine_count == 1
        assert service.get_engine(session_id).session_id == session_id

    def test_create_unsupported_language(self, service: KioskSessionService) -> None:
        with pytest.raises(UnsupportedLanguageError):
            service.create_session("fr")

    def test_unknown_session(self, service: KioskSessionService) -> None:
        with pytest.raises(SessionNotFoundError):
            service.get_engine("nope")

    def test_delete(
        self,
        service: KioskSessionService,
        catalog_service: CatalogService,
        scheduler: ManualScheduler,
    ) -> None:
        session_id, _ = service.create_session()
        service.delete_session(session_id)
        assert service.session_count == 0
        assert catalog_service.engine_count == 0
        assert scheduler.pending_count == 0
        with pytest.raises(SessionNotFoundError):
            service.get_snapshot(session_id)

    def test_close_removes_all(self, service: KioskSessionService) -> None:
        service.create_session("ja")
        service.create_session("en")
        service.close()
        assert service.session_count == 0

    def test_sessions_are_independent(
        self, service: KioskSessionService, session_id: str
    ) -> None:
        other_id, _ = service.create_session("en")
        service.select_choice(session_id, "deposit")
        assert service.get_snapshot(other_id).current_node_id == "start"


# ── 음성 출력 ──


class TestSpeech:
    def test_start_message_spoken_on_create(
        self, service: KioskSessionService, speech_output: MockSpeechOutput
    ) -> None:
        service.create_session()
        assert speech_output.spoken[0][0] == "下記から取引メニューをお選びください。"

    def test_timer_driven_message_spoken(
        self, session_id: str, speech_output: MockSpeechOutput
    ) -> None:
        assert [s[0] for s in speech_output.spoken] == [
            "下記から取引メニューをお選びください。",
            "ご希望の取引を選択してください。",
        ]

    def test_each_message_spoken_once(
        self,
        service: KioskSessionService,
        session_id: str,
        speech_output: MockSpeechOutput,
    ) -> None:
        service.submit_text(session_id, "天気はどうですか")
        service.get_snapshot(session_id)
        texts = [s[0] for s in speech_output.spoken]
        assert texts.count(get_message("ja", "fallback")) == 1
        assert service.get_engine(session_id).unspoken_messages() == []

    def test_submit_speech(self, service: KioskSessionService, session_id: str) -> None:
        snapshot = service.submit_speech(session_id, "預入をお願いします".encode())
        assert snapshot.current_node_id == "deposit_amount"

    def test_empty_speech_reprompts(
        self, service: KioskSessionService, session_id: str
    ) -> None:
        snapshot = service.submit_speech(session_id, b"  ")
        assert snapshot.current_node_id == "transaction_type"
        assert snapshot.history[-1].content == get_message("ja", "fallback")


# ── 조작 위임 ──


class TestOperations:
    def test_full_deposit_flow(self, service: KioskSessionService, session_id: str) -> None:
        service.select_choice(session_id, "deposit")
        service.submit_input(session_id, "30000")
        snapshot = service.submit_confirmation(session_id, True)
        assert snapshot.current_node_id == "qr_code_display"
        assert snapshot.field_values["depositAmount"] == "30000"

    def test_configured_ceiling(self, service: KioskSessionService, session_id: str) -> None:
        service.select_choice(session_id, "deposit")
        snapshot = service.submit_input(session_id, "60000")
        assert snapshot.current_node_id == "staff_assistance_amount"

    def test_pending_resolution(self, service: KioskSessionService, session_id: str) -> None:
        service.submit_text(session_id, "お預け入れをお願いします")
        snapshot = service.resolve_pending_confirmation(session_id, True)
        assert snapshot.current_node_id == "deposit_amount"

    def test_invalid_operation_propagates(
        self, service: KioskSessionService, session_id: str
    ) -> None:
        with pytest.raises(InvalidOperationError):
            service.submit_confirmation(session_id, True)

    def test_reset(self, service: KioskSessionService, session_id: str) -> None:
        service.select_choice(session_id, "transfer")
        assert service.reset(session_id).current_node_id == "start"


class TestChangeLanguage:
    def test_switch(self, service: KioskSessionService, session_id: str) -> None:
        snapshot = service.change_language(session_id, "en")
        assert snapshot.language == "en"
        assert snapshot.history[-1].content == "Please select your desired transaction."

    def test_same_language_is_rerender(
        self, service: KioskSessionService, session_id: str
    ) -> None:
        before = len(service.get_snapshot(session_id).history)
        snapshot = service.change_language(session_id, "ja")
        assert len(snapshot.history) == before

    def test_unsupported(self, service: KioskSessionService, session_id: str) -> None:
        with pytest.raises(UnsupportedLanguageError):
            service.change_language(session_id, "fr")


# ── 방치 세션 만료 ──


class TestIdleExpiry:
    @pytest.fixture()
    def service(
        self,
        catalog_service: CatalogService,
        scheduler: ManualScheduler,
        speech_output: MockSpeechOutput,
    ) -> KioskSessionService:
        """스케줄러 시각을 시계로 쓰는 서비스"""
        return KioskSessionService(
            catalog_service=catalog_service,
            scheduler=scheduler,
            event_bus=EventBus(),
            voice_output=VoiceOutputService(speech_output),
            speech_input=MockSpeechInput(),
            clock=lambda: scheduler.now,
        )

    def test_idle_session_expired(
        self,
        service: KioskSessionService,
        catalog_service: CatalogService,
        scheduler: ManualScheduler,
    ) -> None:
        session_id, _ = service.create_session()
        scheduler.advance(600.0)
        assert service.expire_idle_sessions(600.0) == [session_id]
        assert service.session_count == 0
        assert catalog_service.engine_count == 0
        with pytest.raises(SessionNotFoundError):
            service.get_snapshot(session_id)

    def test_operation_keeps_session_alive(
        self, service: KioskSessionService, scheduler: ManualScheduler
    ) -> None:
        session_id, _ = service.create_session()
        scheduler.advance(500.0)
        service.select_choice(session_id, "deposit")
        scheduler.advance(500.0)
        assert service.expire_idle_sessions(600.0) == []
        assert service.session_count == 1

    def test_state_read_is_not_activity(
        self, service: KioskSessionService, scheduler: ManualScheduler
    ) -> None:
        session_id, _ = service.create_session()
        scheduler.advance(500.0)
        service.get_snapshot(session_id)
        scheduler.advance(100.0)
        assert service.expire_idle_sessions(600.0) == [session_id]

    def test_only_stale_sessions_expired(
        self, service: KioskSessionService, scheduler: ManualScheduler
    ) -> None:
        old_id, _ = service.create_session()
        scheduler.advance(400.0)
        new_id, _ = service.create_session("en")
        scheduler.advance(200.0)
        assert service.expire_idle_sessions(600.0) == [old_id]
        assert service.get_snapshot(new_id).language == "en"

    def test_failed_operation_still_counts(
        self, service: KioskSessionService, scheduler: ManualScheduler
    ) -> None:
        """거부된 조작도 사용자가 키오스크 앞에 있다는 신호"""
        session_id, _ = service.create_session()
        scheduler.advance(500.0)
        with pytest.raises(InvalidOperationError):
            service.submit_input(session_id, "100")
        scheduler.advance(500.0)
        assert service.expire_idle_sessions(600.0) == []

    def test_periodic_expiry_survives_error(
        self, service: KioskSessionService, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[float] = []

        def expire(max_idle_seconds: float) -> list[str]:
            calls.append(max_idle_seconds)
            if len(calls) == 1:
                raise RuntimeError("engine close failed")
            raise asyncio.CancelledError

        monkeypatch.setattr(service, "expire_idle_sessions", expire)
        with pytest.raises(asyncio.CancelledError):
            asyncio.run(service.expire_idle_periodically(600.0, 0))
        assert calls == [600.0, 600.0]
