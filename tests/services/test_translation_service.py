"""TranslationService 테스트"""

from typing import Optional

from src.core.catalog.models import NodeCatalog
from src.services.ai.base import Translator
from src.services.ai.mock import MockTranslator
from src.services.translation_service import TranslationService


class BrokenTranslator(Translator):
    @property
    def name(self) -> str:
        return "broken"

    def is_available(self) -> bool:
        return False

    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        hint: Optional[str] = None,
    ) -> str:
        raise RuntimeError("offline")


class CountingTranslator(MockTranslator):
    def __init__(self) -> None:
        self.calls = 0

    def translate(self, text, source_language, target_language, hint=None):
        self.calls += 1
        return super().translate(text, source_language, target_language, hint)


class TestTranslateCatalog:
    def test_structure_preserved(self, ja_catalog: NodeCatalog) -> None:
        service = TranslationService(MockTranslator())
        ko = service.translate_catalog(ja_catalog, "ko")

        assert ko.language == "ko"
        assert set(ko.nodes) == set(ja_catalog.nodes)
        assert ko.start_node_id == ja_catalog.start_node_id
        assert ko.dangling_references() == []

    def test_texts_translated(self, ja_catalog: NodeCatalog) -> None:
        ko = TranslationService(MockTranslator()).translate_catalog(ja_catalog, "ko")

        assert ko.get("start").content == "[ko] 下記から取引メニューをお選びください。"
        assert ko.get("start").voice_key == "welcome_3"
        assert ko.get("deposit_amount").label == "[ko] 預入金額（円）"
        assert ko.get("deposit_amount").field == "depositAmount"

    def test_choice_keywords_extended(self, ja_catalog: NodeCatalog) -> None:
        ko = TranslationService(MockTranslator()).translate_catalog(ja_catalog, "ko")
        deposit = ko.get("transaction_type").get_choice("deposit")

        assert deposit.text == "[ko] 預入"
        assert deposit.next == "deposit_amount"
        assert deposit.keywords[-1] == "[ko] 預入"
        assert "入金" in deposit.keywords
        assert deposit.exclude_keywords == ("出金", "引き出し", "振込")

    def test_failure_keeps_source_text(self, ja_catalog: NodeCatalog) -> None:
        ko = TranslationService(BrokenTranslator()).translate_catalog(ja_catalog, "ko")
        assert ko.get("start").content == ja_catalog.get("start").content
        assert ko.get("transaction_type").get_choice("deposit").keywords == (
            ja_catalog.get("transaction_type").get_choice("deposit").keywords
        )


class TestTranslateText:
    def test_cached(self) -> None:
        translator = CountingTranslator()
        service = TranslationService(translator)
        service.translate_text("預入", "ja", "en")
        service.translate_text("預入", "ja", "en")
        assert translator.calls == 1

    def test_same_language_or_blank_skipped(self) -> None:
        translator = CountingTranslator()
        service = TranslationService(translator)
        assert service.translate_text("預入", "ja", "ja") == "預入"
        assert service.translate_text("  ", "ja", "en") == "  "
        assert translator.calls == 0
