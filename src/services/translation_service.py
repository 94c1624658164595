"""카탈로그 번역 Service - 기존 언어 카탈로그로 새 언어 카탈로그 생성

노드 ID, 간선, 음성 키는 그대로 두고 표시 문구만 번역한다.
선택지 키워드는 유지하고 번역된 선택지 텍스트를 키워드로 추가한다.
번역 실패 시 원문을 쓴다.
"""

import logging
from dataclasses import replace
from typing import Optional

from src.core.catalog.models import (
    Choice,
    ChoiceNode,
    ConfirmationNode,
    InputNode,
    Node,
    NodeCatalog,
)
from src.services.ai.base import Translator

logger = logging.getLogger(__name__)


class TranslationService:
    """Translator 단일 관문"""

    def __init__(self, translator: Translator) -> None:
        self._translator = translator
        self._cache: dict[tuple[str, str, str], str] = {}

    @property
    def translator(self) -> Translator:
        return self._translator

    def translate_text(
        self,
        text: str,
        source_language: str,
        target_language: str,
        hint: Optional[str] = None,
    ) -> str:
        if not text.strip() or source_language == target_language:
            return text

        key = (text, source_language, target_language)
        if key in self._cache:
            return self._cache[key]

        try:
            translated = self._translator.translate(
                text, source_language, target_language, hint=hint
            )
        except RuntimeError as e:
            logger.warning("Translation failed, using source text: %s", e)
            return text

        if not translated:
            return text
        self._cache[key] = translated
        return translated

    def translate_catalog(
        self, catalog: NodeCatalog, target_language: str
    ) -> NodeCatalog:
        """catalog(원본 언어) → target_language 카탈로그"""
        source = catalog.language
        nodes = {
            node_id: self._translate_node(node, source, target_language)
            for node_id, node in catalog.nodes.items()
        }
        logger.info(
            "Catalog translated %s -> %s (%d nodes, provider=%s)",
            source,
            target_language,
            len(nodes),
            self._translator.name,
        )
        return NodeCatalog(
            language=target_language,
            nodes=nodes,
            start_node_id=catalog.start_node_id,
            settings=catalog.settings,
        )

    def _translate_node(self, node: Node, source: str, target: str) -> Node:
        content = self.translate_text(node.content, source, target, hint="kiosk message")
        if isinstance(node, ChoiceNode):
            choices = tuple(self._translate_choice(c, source, target) for c in node.choices)
            return replace(node, content=content, choices=choices, reading=None)
        if isinstance(node, (InputNode, ConfirmationNode)):
            label = (
                self.translate_text(node.label, source, target, hint="input label")
                if node.label
                else node.label
            )
            return replace(node, content=content, label=label)
        return replace(node, content=content, reading=None)

    def _translate_choice(self, choice: Choice, source: str, target: str) -> Choice:
        text = self.translate_text(choice.text, source, target, hint="button label")
        keywords = choice.keywords
        if text != choice.text and text not in keywords:
            keywords = keywords + (text,)
        return replace(choice, text=text, keywords=keywords)
