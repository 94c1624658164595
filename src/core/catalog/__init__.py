"""노드 카탈로그 Core 패키지

언어별 대화 노드 그래프 (ID 인덱스 테이블) + flow JSON 로더.
"""

from src.core.catalog.models import (
    Choice,
    ChoiceNode,
    ConfirmationNode,
    FlowDocument,
    InputNode,
    LanguageSettings,
    MessageNode,
    Node,
    NodeCatalog,
    NodeKind,
)
from src.core.catalog.loader import (
    CatalogFormatError,
    load_flow_file,
    node_to_dict,
    parse_flow,
    parse_language,
    parse_node,
)

__all__ = [
    "Choice",
    "ChoiceNode",
    "ConfirmationNode",
    "FlowDocument",
    "InputNode",
    "LanguageSettings",
    "MessageNode",
    "Node",
    "NodeCatalog",
    "NodeKind",
    "CatalogFormatError",
    "load_flow_file",
    "node_to_dict",
    "parse_flow",
    "parse_language",
    "parse_node",
]
