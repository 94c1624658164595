"""EventBus - 대화 엔진 → 서비스 이벤트 통신 인프라

규칙:
- 엔진은 구독자를 직접 알지 못한다 (음성 출력, 모니터링 등)
- 이벤트는 식별자와 짧은 텍스트만 전달한다
- 전파 깊이 최대 MAX_DEPTH 단계
- 한 조작(chain) 안에서 동일 키 이벤트 중복 발행 금지
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 한 조작 내 이벤트 전파 최대 깊이


@dataclass
class DialogEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: 이벤트 유형 (예: "node_entered", "bot_message_appended")
        data: 이벤트 데이터 (ID 위주, 무거운 객체 금지)
        source: 발행한 컴포넌트 이름
        dedupe_key: 같은 유형을 한 chain에서 여러 번 발행할 때 구분 키
            (예: 메시지 ID). None이면 source:event_type 기준으로 1회만 허용.
    """

    event_type: str
    data: Dict[str, Any]
    source: str
    dedupe_key: Optional[str] = None

    # 내부 추적용 (외부에서 설정하지 않음)
    _depth: int = field(default=0, repr=False)

    @property
    def chain_key(self) -> str:
        base = f"{self.source}:{self.event_type}"
        return f"{base}:{self.dedupe_key}" if self.dedupe_key else base


# 핸들러 타입: DialogEvent를 받는 callable
EventHandler = Callable[[DialogEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe(DialogEventTypes.DIALOG_IDLE, monitor.handle_idle)
        engine = DialogEngine(catalog, scheduler, event_bus=bus)
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: Set[str] = set()

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 등록"""
        self._handlers[event_type].append(handler)
        logger.debug("EventBus 구독: %s → %s", event_type, handler.__qualname__)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 해제"""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    "EventBus 구독 해제: %s → %s", event_type, handler.__qualname__
                )
            except ValueError:
                logger.warning(
                    "핸들러 미등록: %s → %s", event_type, handler.__qualname__
                )

    def emit(self, event: DialogEvent) -> None:
        """이벤트 발행. 등록된 핸들러를 동기 호출.

        안전장치:
        1. 전파 깊이 MAX_DEPTH 초과 시 무시
        2. 같은 chain_key 중복 발행 시 무시
        3. 핸들러 예외는 로그만 남기고 다음 핸들러 계속
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                "EventBus 전파 깊이 초과 (%d): %s 무시됨", MAX_DEPTH, event.chain_key
            )
            return

        chain_key = event.chain_key
        if chain_key in self._emitted_in_chain:
            logger.warning("EventBus 중복 이벤트 차단: %s", chain_key)
            return

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug("EventBus: %s 구독자 없음", event.event_type)
            return

        logger.debug(
            "EventBus 전파: %s (source=%s, depth=%d, handlers=%d)",
            event.event_type,
            event.source,
            self._current_depth,
            len(handlers),
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "EventBus 핸들러 에러: %s (event=%s)",
                        handler.__qualname__,
                        event.event_type,
                    )
        finally:
            self._current_depth -= 1

    def reset_chain(self) -> None:
        """조작 1회 시작 시 호출. 중복 추적 초기화.

        핸들러 안에서 시작된 조작은 바깥 chain을 이어간다.
        """
        if self._current_depth > 0:
            return
        self._emitted_in_chain.clear()
        self._current_depth = 0

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        """등록된 총 핸들러 수"""
        return sum(len(h) for h in self._handlers.values())
