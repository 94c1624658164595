"""flow JSON → FlowDocument 변환

JSON 구조:
    {"version", "storeName", "languages": {"ja": {"languageSelection",
     "settings": {...}, "nodes": {node_id: {...}}}}}

qr_display 노드는 QR 렌더링이 외부 책임이므로 종단 메시지 노드로 읽는다.
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

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
)

logger = logging.getLogger(__name__)

DEFAULT_START_NODE_ID = "start"

# qr_display → message
_MESSAGE_TYPES = {"message", "qr_display"}


class CatalogFormatError(ValueError):
    """flow JSON 구조 오류"""


def load_flow_file(path: Union[str, Path]) -> FlowDocument:
    """파일에서 flow JSON 로드"""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CatalogFormatError(f"Invalid flow JSON in {path}: {exc}") from exc
    return parse_flow(raw)


def parse_flow(raw: Any) -> FlowDocument:
    """dict(JSON) → FlowDocument. 언어마다 dangling 간선을 경고로 남긴다."""
    if not isinstance(raw, dict):
        raise CatalogFormatError("Flow document must be an object")

    languages = raw.get("languages")
    if not isinstance(languages, dict) or not languages:
        raise CatalogFormatError("Flow document has no 'languages'")

    catalogs: dict[str, NodeCatalog] = {}
    for language, lang_raw in languages.items():
        catalog = parse_language(language, lang_raw)
        for src, dst in catalog.dangling_references():
            logger.warning(
                "Dangling reference in '%s' catalog: %s -> %s", language, src, dst
            )
        catalogs[language] = catalog

    return FlowDocument(
        version=str(raw.get("version", "1.0")),
        store_name=str(raw.get("storeName", "")),
        catalogs=catalogs,
    )


def parse_language(language: str, raw: Any) -> NodeCatalog:
    """언어 1개 분량의 카탈로그 파싱"""
    if not isinstance(raw, dict):
        raise CatalogFormatError(f"Language '{language}' must be an object")

    nodes_raw = raw.get("nodes")
    if not isinstance(nodes_raw, dict):
        raise CatalogFormatError(f"Language '{language}' has no 'nodes'")

    nodes: dict[str, Node] = {}
    for key, node_raw in nodes_raw.items():
        node = parse_node(key, node_raw)
        nodes[node.id] = node

    settings = _parse_settings(
        raw.get("settings") or {}, bool(raw.get("languageSelection", True))
    )

    return NodeCatalog(
        language=language,
        nodes=nodes,
        start_node_id=DEFAULT_START_NODE_ID,
        settings=settings,
    )


def parse_node(key: str, raw: Any) -> Node:
    """노드 1개 파싱. type에 맞지 않는 필드는 버린다."""
    if not isinstance(raw, dict):
        raise CatalogFormatError(f"Node '{key}' must be an object")

    node_id = str(raw.get("id") or key)
    node_type = raw.get("type")
    content = str(raw.get("content", ""))
    voice_key = raw.get("voiceFile") or None
    next_id = raw.get("next") or None

    # choices가 있으면 type 표기와 무관하게 Choice 노드
    if node_type == "choice" or raw.get("choices"):
        choices_raw = raw.get("choices") or []
        if not isinstance(choices_raw, list):
            raise CatalogFormatError(f"Node '{node_id}' choices must be a list")
        return ChoiceNode(
            id=node_id,
            content=content,
            choices=tuple(_parse_choice(node_id, c) for c in choices_raw),
            voice_key=voice_key,
            reading=raw.get("reading"),
        )

    if node_type in _MESSAGE_TYPES:
        return MessageNode(
            id=node_id,
            content=content,
            next=next_id,
            voice_key=voice_key,
            reading=raw.get("reading"),
        )

    if node_type == "input":
        return InputNode(
            id=node_id,
            content=content,
            field=raw.get("field") or None,
            label=raw.get("label") or None,
            next=next_id,
            voice_key=voice_key,
        )

    if node_type == "confirmation":
        return ConfirmationNode(
            id=node_id,
            content=content,
            field=raw.get("field") or None,
            label=raw.get("label") or None,
            next=next_id,
            voice_key=voice_key,
        )

    raise CatalogFormatError(f"Node '{node_id}' has unknown type '{node_type}'")


def _parse_choice(node_id: str, raw: Any) -> Choice:
    if not isinstance(raw, dict):
        raise CatalogFormatError(f"Choice in node '{node_id}' must be an object")
    if not raw.get("id") or not raw.get("next"):
        raise CatalogFormatError(
            f"Choice in node '{node_id}' requires 'id' and 'next'"
        )
    return Choice(
        id=str(raw["id"]),
        text=str(raw.get("text", "")),
        next=str(raw["next"]),
        keywords=tuple(str(k) for k in raw.get("keywords") or []),
        exclude_keywords=tuple(str(k) for k in raw.get("excludeKeywords") or []),
    )


def _parse_settings(raw: dict, language_selection: bool) -> LanguageSettings:
    if not isinstance(raw, dict):
        logger.warning("Language settings is not an object, using defaults")
        return LanguageSettings(language_selection=language_selection)
    try:
        return LanguageSettings(
            auto_stop_seconds=float(raw.get("autoStopSeconds", 3)),
            voice_speed=float(raw.get("voiceSpeed", 1.0)),
            qr_password=str(raw.get("qrPassword", "")),
            qr_expiry_minutes=int(raw.get("qrExpiryMinutes", 30)),
            language_selection=language_selection,
        )
    except (TypeError, ValueError) as exc:
        raise CatalogFormatError(f"Invalid language settings: {exc}") from exc


def node_to_dict(node: Node) -> dict:
    """Node → flow JSON 노드 표현 (API 응답, 번역 결과 저장용)"""
    data: dict[str, Any] = {
        "id": node.id,
        "type": node.kind.value,
        "content": node.content,
    }
    if node.voice_key:
        data["voiceFile"] = node.voice_key
    if isinstance(node, ChoiceNode):
        data["choices"] = [
            {
                "id": c.id,
                "text": c.text,
                "keywords": list(c.keywords),
                "excludeKeywords": list(c.exclude_keywords),
                "next": c.next,
            }
            for c in node.choices
        ]
        return data
    if node.next:
        data["next"] = node.next
    if isinstance(node, (InputNode, ConfirmationNode)):
        if node.field:
            data["field"] = node.field
        if node.label:
            data["label"] = node.label
    return data
