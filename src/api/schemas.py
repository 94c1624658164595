"""API request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.core.catalog.models import ChoiceNode, ConfirmationNode, InputNode, Node
from src.core.flow.models import ChatMessage, DialogSnapshot
from src.core.flow.validation import format_field_value


# === Request Schemas ===


class CreateSessionRequest(BaseModel):
    """세션 생성 요청"""

    language: Optional[str] = Field(
        None, min_length=2, max_length=10, description="언어 코드 (생략 시 기본 언어)"
    )


class ChoiceRequest(BaseModel):
    """선택지 탭"""

    choice_id: str = Field(..., min_length=1, description="선택지 ID")


class TextRequest(BaseModel):
    """자유 발화 (타이핑 또는 인식 결과)"""

    text: str = Field(..., max_length=500, description="발화 텍스트")


class InputRequest(BaseModel):
    """입력 노드 값"""

    value: str = Field(..., max_length=100, description="입력값")


class ConfirmRequest(BaseModel):
    """예/아니오"""

    confirmed: bool = Field(..., description="True=예, False=아니오")


class LanguageRequest(BaseModel):
    """언어 전환"""

    language: str = Field(..., min_length=2, max_length=10, description="언어 코드")


class TranslateCatalogRequest(BaseModel):
    """카탈로그 번역 요청"""

    source_language: str = Field(..., min_length=2, max_length=10)
    target_language: str = Field(..., min_length=2, max_length=10)


# === Response Schemas ===


class ChoiceInfo(BaseModel):
    """선택지 정보"""

    id: str
    text: str


class NodeInfo(BaseModel):
    """현재 노드 정보"""

    id: str
    kind: str
    content: str
    field: Optional[str] = None
    label: Optional[str] = None
    voice_key: Optional[str] = None


class MessageInfo(BaseModel):
    """대화 이력 1건"""

    id: str
    role: str
    content: str
    timestamp: datetime
    node_id: Optional[str] = None
    audio_key: Optional[str] = None
    spoken: bool = False


class PendingConfirmationInfo(BaseModel):
    """확인 대기 정보"""

    choice_id: str
    choice_text: str
    confidence: float


class SessionResponse(BaseModel):
    """세션 스냅샷"""

    session_id: str
    language: str
    status: str
    current_node_id: str
    current_node: Optional[NodeInfo] = None
    choices: list[ChoiceInfo] = []
    pending_confirmation: Optional[PendingConfirmationInfo] = None
    history: list[MessageInfo] = []
    field_values: dict[str, str] = {}
    display_values: dict[str, str] = {}


class CatalogInfo(BaseModel):
    """로드된 flow 요약"""

    version: str
    store_name: str
    languages: list[str]
    node_counts: dict[str, int]


class RefreshResponse(BaseModel):
    """카탈로그 갱신 결과"""

    changed: bool
    version: str


class ErrorResponse(BaseModel):
    """에러 응답"""

    error: str
    detail: Optional[str] = None


# === 변환 ===


def _node_info(node: Optional[Node]) -> Optional[NodeInfo]:
    if node is None:
        return None
    field = label = None
    if isinstance(node, (InputNode, ConfirmationNode)):
        field, label = node.field, node.label
    return NodeInfo(
        id=node.id,
        kind=node.kind.value,
        content=node.content,
        field=field,
        label=label,
        voice_key=node.voice_key,
    )


def _message_info(message: ChatMessage) -> MessageInfo:
    return MessageInfo(
        id=message.id,
        role=message.role.value,
        content=message.content,
        timestamp=message.timestamp,
        node_id=message.node_id,
        audio_key=message.audio_key,
        spoken=message.spoken,
    )


def build_session_response(session_id: str, snapshot: DialogSnapshot) -> SessionResponse:
    """DialogSnapshot → SessionResponse"""
    node = snapshot.current_node
    choices = node.choices if isinstance(node, ChoiceNode) else ()
    pending = snapshot.pending_confirmation
    return SessionResponse(
        session_id=session_id,
        language=snapshot.language,
        status=snapshot.status.value,
        current_node_id=snapshot.current_node_id,
        current_node=_node_info(node),
        choices=[ChoiceInfo(id=c.id, text=c.text) for c in choices],
        pending_confirmation=(
            PendingConfirmationInfo(
                choice_id=pending.choice.id,
                choice_text=pending.choice.text,
                confidence=pending.match_result.confidence,
            )
            if pending
            else None
        ),
        history=[_message_info(m) for m in snapshot.history],
        field_values=dict(snapshot.field_values),
        display_values={
            key: format_field_value(key, value)
            for key, value in snapshot.field_values.items()
        },
    )
