"""대화 엔진 - 노드 그래프 상태 기계

현재 노드 종류별 동작:
- Message: 진입 시 봇 메시지 1건 (중복 방지). next가 있으면 체류 시간 후 자동 전이.
  시스템에서 유일한 암묵적 전이다.
- Choice: select_choice(탭) 또는 submit_text(자유 발화 → 매처 + 응답 전략).
- Input: submit_input 검증 후 fieldValues 저장 → next. 금액 한도 초과 시 직원 호출 노드.
- Confirmation: submit_confirmation(True) → next, (False) → 거래 선택 앵커 노드.

확인 대기(PendingConfirmation) 오버레이가 있으면 자유 발화는 일반 매칭 전에
예/아니오 판정으로 가로챈다.

상태는 조작마다 새 DialogState로 교체되고, 지연 콜백은 예약 당시 노드 ID와
현재 노드 ID를 비교해 낡은 호출이면 아무것도 하지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from src.core.catalog.models import (
    Choice,
    ChoiceNode,
    ConfirmationNode,
    InputNode,
    MessageNode,
    Node,
    NodeCatalog,
)
from src.core.event_bus import DialogEvent, EventBus
from src.core.event_types import DialogEventTypes
from src.core.flow.errors import InvalidOperationError
from src.core.flow.messages import (
    YES_CHOICE_ID,
    format_choice_list,
    get_message,
    yes_no_choices,
    yes_no_utterance,
)
from src.core.flow.models import (
    ChatMessage,
    DialogSnapshot,
    DialogState,
    DialogStatus,
    PendingConfirmation,
    Role,
)
from src.core.flow.scheduler import ScheduledCall, Scheduler
from src.core.flow.validation import validate_input_value
from src.core.matching.matcher import IntentMatcher, MatchResult
from src.core.matching.strategy import (
    ALTERNATIVES_LIMIT,
    ResponseStrategy,
    ResponseTier,
)

logger = logging.getLogger(__name__)

# 타이머 슬롯
AUTO_ADVANCE = "auto_advance"
THINKING = "thinking"


@dataclass(frozen=True)
class EngineConfig:
    """엔진 동작 상수"""

    dwell_seconds: float = 2.0
    thinking_delay_seconds: float = 0.0
    amount_ceiling: int = 200_000
    staff_assistance_node_id: str = "staff_assistance_amount"
    transaction_anchor_node_id: str = "transaction_type"
    end_node_id: str = "end"

    @classmethod
    def from_settings(cls, settings: Any) -> "EngineConfig":
        """src.config.Settings 호환 객체에서 생성 (Core는 설정 모듈을 import하지 않음)"""
        return cls(
            dwell_seconds=settings.DWELL_SECONDS,
            thinking_delay_seconds=settings.THINKING_DELAY_SECONDS,
            amount_ceiling=settings.AMOUNT_CEILING,
            staff_assistance_node_id=settings.STAFF_ASSISTANCE_NODE_ID,
            transaction_anchor_node_id=settings.TRANSACTION_ANCHOR_NODE_ID,
            end_node_id=settings.END_NODE_ID,
        )


@dataclass
class _Timer:
    node_id: str
    handle: ScheduledCall


class DialogEngine:
    """키오스크 대화 세션 1개의 상태 기계

    사용 패턴:
        engine = DialogEngine(catalog, AsyncioScheduler())
        snapshot = engine.submit_text("お金を預けたい")
        snapshot = engine.resolve_pending_confirmation(True)
    """

    SOURCE = "dialog_engine"

    def __init__(
        self,
        catalog: NodeCatalog,
        scheduler: Scheduler,
        matcher: Optional[IntentMatcher] = None,
        strategy: Optional[ResponseStrategy] = None,
        config: Optional[EngineConfig] = None,
        event_bus: Optional[EventBus] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._catalog = catalog
        self._scheduler = scheduler
        self._matcher = matcher or IntentMatcher()
        self._strategy = strategy or ResponseStrategy.from_config(self._matcher.config)
        self._config = config or EngineConfig()
        self._bus = event_bus
        self.session_id = session_id

        self._timers: dict[str, _Timer] = {}
        # 노드 방문 번호. 같은 방문 안에서 재렌더링해도 진입 메시지는 1회.
        self._visit = 0
        self._rendered_visit: Optional[int] = None

        self._state = DialogState(current_node_id=catalog.start_node_id)
        self._begin()
        self._enter_current()

    # === 조회 ===

    @property
    def catalog(self) -> NodeCatalog:
        return self._catalog

    @property
    def language(self) -> str:
        return self._catalog.language

    @property
    def state(self) -> DialogState:
        return self._state

    @property
    def current_node(self) -> Optional[Node]:
        return self._catalog.get(self._state.current_node_id)

    def snapshot(self) -> DialogSnapshot:
        node = self.current_node
        return DialogSnapshot(
            state=self._state,
            language=self.language,
            status=DialogStatus.ACTIVE if node is not None else DialogStatus.IDLE,
            current_node=node,
        )

    def unspoken_messages(self) -> list[ChatMessage]:
        """아직 음성 출력하지 않은 봇 메시지"""
        return [m for m in self._state.history if m.role is Role.BOT and not m.spoken]

    def mark_spoken(self, message_id: str) -> None:
        """음성 출력 완료 표식. 이력에서 유일하게 갱신되는 필드."""
        history = tuple(
            replace(m, spoken=True) if m.id == message_id else m
            for m in self._state.history
        )
        self._state = replace(self._state, history=history)

    # === 공개 조작 ===

    def select_choice(self, choice_id: str) -> DialogSnapshot:
        """선택지 탭"""
        self._begin()
        node = self._require(ChoiceNode, "select_choice")
        choice = node.get_choice(choice_id)
        if choice is None:
            raise InvalidOperationError(
                f"Choice '{choice_id}' not found in node '{node.id}'"
            )
        self._select(choice)
        return self.snapshot()

    def submit_text(self, utterance: str) -> DialogSnapshot:
        """자유 발화 (음성 인식 결과 또는 타이핑)"""
        self._begin()
        node = self.current_node
        pending = self._state.pending_confirmation

        if pending is None and not (isinstance(node, ChoiceNode) and node.choices):
            logger.debug(
                "Free text ignored on node '%s' (no choices)",
                self._state.current_node_id,
            )
            return self.snapshot()

        self._append_user(utterance)
        node_id = self._state.current_node_id
        if pending is not None:
            self._after_thinking(node_id, lambda: self._react_to_confirmation_text(utterance))
        else:
            self._after_thinking(node_id, lambda: self._react_to_text(utterance))
        return self.snapshot()

    def resolve_pending_confirmation(self, confirmed: bool) -> DialogSnapshot:
        """확인 질문에 대한 예/아니오 (버튼)"""
        self._begin()
        if self._state.pending_confirmation is None:
            raise InvalidOperationError("No pending confirmation to resolve")
        self._cancel_timer(THINKING)
        self._resolve(confirmed)
        return self.snapshot()

    def submit_input(self, value: str) -> DialogSnapshot:
        """입력 노드 값 제출

        Raises:
            InputValidationError: 검증 실패 (상태 변경 없음)
        """
        self._begin()
        node = self._require(InputNode, "submit_input")
        amount = validate_input_value(node, value, self.language)

        if amount is not None and amount > self._config.amount_ceiling:
            self._append_user(value)
            logger.info(
                "Amount %d exceeds ceiling %d on '%s', routing to staff assistance",
                amount,
                self._config.amount_ceiling,
                node.id,
            )
            self._emit(
                DialogEventTypes.STAFF_ASSISTANCE_ROUTED,
                {"node_id": node.id, "amount": amount},
            )
            self._transition(self._config.staff_assistance_node_id)
            return self.snapshot()

        self._state = self._state.with_field(node.field_key, value)
        self._emit(
            DialogEventTypes.FIELD_STORED, {"node_id": node.id, "field": node.field_key}
        )
        self._append_user(value)
        self._transition(node.next or self._config.end_node_id)
        return self.snapshot()

    def submit_confirmation(self, confirmed: bool) -> DialogSnapshot:
        """확인 노드 응답. 아니오는 선언된 next와 무관하게 거래 선택으로 되돌아간다."""
        self._begin()
        node = self._require(ConfirmationNode, "submit_confirmation")
        self._append_user(get_message(self.language, "yes" if confirmed else "no"))
        if confirmed:
            self._transition(node.next or self._config.end_node_id)
        else:
            self._transition(self._config.transaction_anchor_node_id)
        return self.snapshot()

    def add_bot_message(self, content: str, audio_key: Optional[str] = None) -> DialogSnapshot:
        """호스트가 직접 안내 문구를 추가 (예: 음성 인식 실패 안내)"""
        self._begin()
        self._append_bot(content, audio_key=audio_key)
        return self.snapshot()

    def reset(self) -> DialogSnapshot:
        """시작 노드로 복귀. 이력/입력값/확인 대기/타이머 모두 초기화."""
        self._begin()
        self._cancel_timers()
        self._state = DialogState(current_node_id=self._catalog.start_node_id)
        self._visit += 1
        logger.info("Dialog reset (session=%s)", self.session_id)
        self._emit(DialogEventTypes.DIALOG_RESET, {})
        self._enter_current()
        return self.snapshot()

    def swap_catalog(self, catalog: NodeCatalog) -> DialogSnapshot:
        """카탈로그 교체 (외부 갱신, 언어 전환).

        현재 노드 ID가 새 카탈로그에 있으면 그대로 이어가고, 없으면 IDLE.
        """
        self._begin()
        self._cancel_timers()
        previous_language = self._catalog.language
        self._catalog = catalog

        pending = self._state.pending_confirmation
        node = self.current_node
        if pending is not None and not (
            isinstance(node, ChoiceNode) and node.get_choice(pending.choice.id)
        ):
            self._state = replace(self._state, pending_confirmation=None)

        self._emit(
            DialogEventTypes.CATALOG_SWAPPED,
            {"from_language": previous_language, "to_language": catalog.language},
        )
        # 언어가 바뀌면 현재 노드 안내를 새 언어로 한 번 더 보여준다
        if catalog.language != previous_language and isinstance(
            node, (MessageNode, ChoiceNode)
        ):
            self._rendered_visit = self._visit
            self._append_bot(node.content, node_id=node.id, audio_key=node.voice_key)
        self._enter_current()
        return self.snapshot()

    def close(self) -> None:
        """세션 종료. 예약된 지연 호출만 취소하고 상태는 그대로 둔다."""
        self._cancel_timers()

    def render(self) -> DialogSnapshot:
        """현재 노드 재렌더링. 실제 전이가 없으면 이력은 늘지 않는다."""
        self._begin()
        self._enter_current()
        return self.snapshot()

    # === 전이 ===

    def _select(self, choice: Choice) -> None:
        self._append_user(choice.text)
        self._transition(choice.next)

    def _transition(self, target_id: str) -> None:
        self._cancel_timers()
        source_id = self._state.current_node_id
        self._state = replace(
            self._state, current_node_id=target_id, pending_confirmation=None
        )
        self._visit += 1
        logger.info(
            "Dialog transition: %s -> %s (session=%s)",
            source_id,
            target_id,
            self.session_id,
        )
        self._enter_current()

    def _enter_current(self) -> None:
        node = self.current_node
        if node is None:
            logger.warning(
                "Node '%s' not found in '%s' catalog, dialog idle",
                self._state.current_node_id,
                self.language,
            )
            self._emit(
                DialogEventTypes.DIALOG_IDLE,
                {"node_id": self._state.current_node_id},
            )
            return

        if self._rendered_visit != self._visit:
            self._rendered_visit = self._visit
            self._emit(
                DialogEventTypes.NODE_ENTERED,
                {"node_id": node.id, "kind": node.kind.value},
                dedupe_key=f"{node.id}#{self._visit}",
            )
            if isinstance(node, (MessageNode, ChoiceNode)):
                self._render_entry(node)

        if isinstance(node, MessageNode) and node.next:
            self._schedule_auto_advance(node)

    def _render_entry(self, node: MessageNode | ChoiceNode) -> None:
        last = self._state.last_message
        if last is not None and (last.content == node.content or last.node_id == node.id):
            return
        self._append_bot(node.content, node_id=node.id, audio_key=node.voice_key)

    # === 자유 발화 처리 ===

    def _react_to_text(self, utterance: str) -> None:
        node = self.current_node
        if not isinstance(node, ChoiceNode):
            return

        matches = self._matcher.find_best_matches(utterance, node.choices)
        best: Optional[MatchResult] = matches[0] if matches else None
        decision = self._strategy.determine(best)
        self._emit(
            DialogEventTypes.MATCH_RESOLVED,
            {
                "node_id": node.id,
                "tier": decision.tier.value,
                "choice_id": best.choice.id if best else None,
                "confidence": best.confidence if best else 0.0,
            },
        )
        logger.debug(
            "Match on '%s': tier=%s best=%s",
            node.id,
            decision.tier.value,
            f"{best.choice.id}({best.confidence:.3f})" if best else None,
        )

        if decision.tier is ResponseTier.DIRECT:
            self._select(best.choice)
        elif decision.tier is ResponseTier.CONFIRMATION:
            self._state = replace(
                self._state,
                pending_confirmation=PendingConfirmation(
                    choice=best.choice, match_result=best, node_id=node.id
                ),
            )
            self._append_bot(
                get_message(self.language, "confirm_choice", choice=best.choice.text)
            )
        elif decision.tier is ResponseTier.CHOICES:
            texts = [m.choice.text for m in matches[:ALTERNATIVES_LIMIT]]
            self._append_bot(format_choice_list(self.language, texts))
        else:
            self._append_bot(get_message(self.language, "fallback"))

    def _react_to_confirmation_text(self, utterance: str) -> None:
        pending = self._state.pending_confirmation
        if pending is None:
            return
        best = self._matcher.get_best_match(
            yes_no_utterance(utterance, self.language), yes_no_choices(self.language)
        )
        if best is not None and best.confidence >= self._strategy.medium:
            self._resolve(best.choice.id == YES_CHOICE_ID)
            return
        self._append_bot(
            get_message(self.language, "confirm_choice", choice=pending.choice.text)
        )

    def _resolve(self, confirmed: bool) -> None:
        pending = self._state.pending_confirmation
        self._state = replace(self._state, pending_confirmation=None)
        if confirmed:
            self._select(pending.choice)
        else:
            self._append_bot(get_message(self.language, "apology"))

    # === 타이머 ===

    def _schedule_auto_advance(self, node: MessageNode) -> None:
        existing = self._timers.get(AUTO_ADVANCE)
        if existing is not None and existing.node_id == node.id:
            return
        self._schedule(AUTO_ADVANCE, node.id, self._config.dwell_seconds, self._auto_advance)

    def _auto_advance(self) -> None:
        node = self.current_node
        if isinstance(node, MessageNode) and node.next:
            self._transition(node.next)

    def _after_thinking(self, node_id: str, reaction: Callable[[], None]) -> None:
        delay = self._config.thinking_delay_seconds
        if delay <= 0:
            reaction()
            return
        # 새 발화가 이전 발화의 대기 중 응답을 대체한다
        self._cancel_timer(THINKING)
        self._schedule(THINKING, node_id, delay, reaction)

    def _schedule(
        self, slot: str, node_id: str, delay: float, action: Callable[[], None]
    ) -> None:
        timer: Optional[_Timer] = None

        def fire() -> None:
            if self._timers.get(slot) is timer:
                del self._timers[slot]
            if self._state.current_node_id != node_id:
                logger.debug("Stale %s timer for '%s' ignored", slot, node_id)
                return
            self._begin()
            action()

        timer = _Timer(node_id=node_id, handle=self._scheduler.call_later(delay, fire))
        self._timers[slot] = timer

    def _cancel_timer(self, slot: str) -> None:
        timer = self._timers.pop(slot, None)
        if timer is not None:
            timer.handle.cancel()

    def _cancel_timers(self) -> None:
        for slot in list(self._timers):
            self._cancel_timer(slot)

    # === 내부 유틸 ===

    def _require(self, node_type: type, operation: str) -> Any:
        node = self.current_node
        if not isinstance(node, node_type):
            kind = node.kind.value if node is not None else "idle"
            raise InvalidOperationError(
                f"{operation} is not valid on node "
                f"'{self._state.current_node_id}' ({kind})"
            )
        return node

    def _append_user(self, content: str) -> None:
        message = ChatMessage.user(content)
        self._state = self._state.append(message)
        self._emit(
            DialogEventTypes.USER_MESSAGE_APPENDED,
            {"message_id": message.id, "text": content},
            dedupe_key=message.id,
        )

    def _append_bot(
        self,
        content: str,
        node_id: Optional[str] = None,
        audio_key: Optional[str] = None,
    ) -> None:
        message = ChatMessage.bot(content, node_id=node_id, audio_key=audio_key)
        self._state = self._state.append(message)
        self._emit(
            DialogEventTypes.BOT_MESSAGE_APPENDED,
            {
                "message_id": message.id,
                "text": content,
                "audio_key": audio_key,
                "language": self.language,
            },
            dedupe_key=message.id,
        )

    def _begin(self) -> None:
        if self._bus is not None:
            self._bus.reset_chain()

    def _emit(
        self, event_type: str, data: dict, dedupe_key: Optional[str] = None
    ) -> None:
        if self._bus is None:
            return
        payload = {"session_id": self.session_id, **data}
        self._bus.emit(
            DialogEvent(
                event_type=event_type,
                data=payload,
                source=self.SOURCE,
                dedupe_key=dedupe_key,
            )
        )
