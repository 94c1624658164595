"""대화 노드 카탈로그 도메인 모델 (I/O 무관)

노드 그래프는 문자열 ID로만 참조한다. 간선은 전이 시점에 조회로 해석하므로
순환(예: "처음으로" → start)도 특별 처리가 필요 없다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Union


class NodeKind(str, Enum):
    """노드 종류"""

    MESSAGE = "message"
    CHOICE = "choice"
    INPUT = "input"
    CONFIRMATION = "confirmation"


@dataclass(frozen=True)
class Choice:
    """Choice 노드에 붙는 선택지 1개"""

    id: str
    text: str
    next: str
    keywords: tuple[str, ...] = ()
    exclude_keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class MessageNode:
    """안내 메시지. next가 있으면 체류 시간 후 자동 전이."""

    id: str
    content: str
    next: Optional[str] = None
    voice_key: Optional[str] = None
    reading: Optional[str] = None

    @property
    def kind(self) -> NodeKind:
        return NodeKind.MESSAGE


@dataclass(frozen=True)
class ChoiceNode:
    """선택지 제시 노드. 선택지마다 자기 next를 가진다."""

    id: str
    content: str
    choices: tuple[Choice, ...]
    voice_key: Optional[str] = None
    reading: Optional[str] = None

    @property
    def kind(self) -> NodeKind:
        return NodeKind.CHOICE

    def get_choice(self, choice_id: str) -> Optional[Choice]:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


@dataclass(frozen=True)
class InputNode:
    """값 입력 노드 (금액, 계좌번호 등)"""

    id: str
    content: str
    field: Optional[str] = None
    label: Optional[str] = None
    next: Optional[str] = None
    voice_key: Optional[str] = None

    @property
    def kind(self) -> NodeKind:
        return NodeKind.INPUT

    @property
    def field_key(self) -> str:
        """fieldValues 저장 키. field가 없으면 노드 ID."""
        return self.field or self.id


@dataclass(frozen=True)
class ConfirmationNode:
    """입력값 확인 노드"""

    id: str
    content: str
    field: Optional[str] = None
    label: Optional[str] = None
    next: Optional[str] = None
    voice_key: Optional[str] = None

    @property
    def kind(self) -> NodeKind:
        return NodeKind.CONFIRMATION


Node = Union[MessageNode, ChoiceNode, InputNode, ConfirmationNode]


@dataclass(frozen=True)
class LanguageSettings:
    """언어별 키오스크 설정"""

    auto_stop_seconds: float = 3.0
    voice_speed: float = 1.0
    qr_password: str = ""
    qr_expiry_minutes: int = 30
    language_selection: bool = True


@dataclass(frozen=True)
class NodeCatalog:
    """한 언어의 노드 테이블 (세션 단위 불변)"""

    language: str
    nodes: Mapping[str, Node]
    start_node_id: str = "start"
    settings: LanguageSettings = field(default_factory=LanguageSettings)

    def __post_init__(self) -> None:
        # 외부에서 넘긴 dict를 복사해 읽기 전용으로 고정
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def edges(self) -> Iterator[tuple[str, str]]:
        """(출발 노드 ID, 도착 노드 ID) 간선 전체"""
        for node in self.nodes.values():
            if isinstance(node, ChoiceNode):
                for choice in node.choices:
                    yield node.id, choice.next
            elif node.next:
                yield node.id, node.next

    def dangling_references(self) -> list[tuple[str, str]]:
        """카탈로그에 없는 노드를 가리키는 간선 목록.

        도달하지 않는 한 에러가 아니므로 경고 용도로만 쓴다.
        """
        return [(src, dst) for src, dst in self.edges() if dst not in self.nodes]

    def with_nodes(self, nodes: Mapping[str, Node]) -> "NodeCatalog":
        return NodeCatalog(
            language=self.language,
            nodes=nodes,
            start_node_id=self.start_node_id,
            settings=self.settings,
        )


@dataclass(frozen=True)
class FlowDocument:
    """여러 언어의 카탈로그 묶음 (flow JSON 1개)"""

    version: str
    store_name: str
    catalogs: Mapping[str, NodeCatalog]

    def __post_init__(self) -> None:
        object.__setattr__(self, "catalogs", MappingProxyType(dict(self.catalogs)))

    @property
    def languages(self) -> list[str]:
        return list(self.catalogs.keys())

    def get_nodes(self, language: str) -> Mapping[str, Node]:
        return self.get_catalog(language).nodes

    def get_catalog(self, language: str) -> NodeCatalog:
        try:
            return self.catalogs[language]
        except KeyError:
            raise KeyError(f"Unknown language: {language}") from None
