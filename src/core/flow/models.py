"""대화 상태 도메인 모델 (불변)

DialogState는 조작마다 통째로 교체된다. 부분 변경은 외부에 보이지 않으며,
지연 콜백은 예약 당시 노드 ID와 현재 노드 ID를 비교해 낡은 호출을 무시한다.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from src.core.catalog.models import Choice, Node
from src.core.matching.matcher import MatchResult


class Role(str, Enum):
    BOT = "bot"
    USER = "user"


class DialogStatus(str, Enum):
    """ACTIVE: 현재 노드가 카탈로그에 있음 / IDLE: 현재 노드 ID를 해석할 수 없음"""

    ACTIVE = "active"
    IDLE = "idle"


@dataclass(frozen=True)
class ChatMessage:
    """대화 이력 1건 (추가 전용)

    node_id: 노드 진입 시 렌더링된 봇 메시지의 노드 (중복 방지 표식)
    spoken: 음성 출력 완료 표식. 이 필드만 추가 후 갱신될 수 있다.
    """

    role: Role
    content: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    node_id: Optional[str] = None
    audio_key: Optional[str] = None
    spoken: bool = False

    @classmethod
    def bot(
        cls,
        content: str,
        node_id: Optional[str] = None,
        audio_key: Optional[str] = None,
    ) -> "ChatMessage":
        return cls(role=Role.BOT, content=content, node_id=node_id, audio_key=audio_key)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=Role.USER, content=content)


@dataclass(frozen=True)
class PendingConfirmation:
    """중간 신뢰도 매칭에 대한 예/아니오 확인 대기"""

    choice: Choice
    match_result: MatchResult
    node_id: str


@dataclass(frozen=True)
class DialogState:
    current_node_id: str
    history: tuple[ChatMessage, ...] = ()
    field_values: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    pending_confirmation: Optional[PendingConfirmation] = None

    def __post_init__(self) -> None:
        if not isinstance(self.field_values, MappingProxyType):
            object.__setattr__(
                self, "field_values", MappingProxyType(dict(self.field_values))
            )

    @property
    def last_message(self) -> Optional[ChatMessage]:
        return self.history[-1] if self.history else None

    def append(self, *messages: ChatMessage) -> "DialogState":
        return replace(self, history=self.history + messages)

    def with_field(self, key: str, value: str) -> "DialogState":
        values = dict(self.field_values)
        values[key] = value
        return replace(self, field_values=MappingProxyType(values))


@dataclass(frozen=True)
class DialogSnapshot:
    """프레젠테이션 계층이 매 조작 후 읽는 불변 스냅샷"""

    state: DialogState
    language: str
    status: DialogStatus
    current_node: Optional[Node]

    @property
    def current_node_id(self) -> str:
        return self.state.current_node_id

    @property
    def current_choices(self) -> tuple[Choice, ...]:
        return getattr(self.current_node, "choices", ())

    @property
    def pending_confirmation(self) -> Optional[PendingConfirmation]:
        return self.state.pending_confirmation

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        return self.state.history

    @property
    def field_values(self) -> Mapping[str, str]:
        return self.state.field_values
