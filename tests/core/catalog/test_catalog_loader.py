"""flow JSON 로더 + 카탈로그 모델 테스트"""

import json
import logging
from pathlib import Path

import pytest

from src.core.catalog.loader import (
    CatalogFormatError,
    load_flow_file,
    node_to_dict,
    parse_flow,
    parse_node,
)
from src.core.catalog.models import (
    ChoiceNode,
    ConfirmationNode,
    FlowDocument,
    InputNode,
    MessageNode,
    NodeKind,
)


def _flow(nodes: dict) -> dict:
    return {"version": "2.0", "storeName": "Test", "languages": {"ja": {"nodes": nodes}}}


# ── 번들 flow ──


class TestBundledFlow:
    def test_languages(self, flow_document: FlowDocument) -> None:
        assert flow_document.languages == ["ja", "en"]
        assert flow_document.store_name == "AIアシスタント - 銀行ATM"

    def test_node_kinds(self, flow_document: FlowDocument) -> None:
        nodes = flow_document.get_nodes("ja")
        assert isinstance(nodes["start"], MessageNode)
        assert isinstance(nodes["transaction_type"], ChoiceNode)
        assert isinstance(nodes["deposit_amount"], InputNode)
        assert isinstance(nodes["deposit_confirmation"], ConfirmationNode)

    def test_qr_display_is_terminal_message(self, flow_document: FlowDocument) -> None:
        node = flow_document.get_nodes("en")["qr_code_display"]
        assert node.kind is NodeKind.MESSAGE
        assert node.next is None

    def test_no_dangling_references(self, flow_document: FlowDocument) -> None:
        for language in flow_document.languages:
            assert flow_document.get_catalog(language).dangling_references() == []

    def test_same_node_ids_per_language(self, flow_document: FlowDocument) -> None:
        assert set(flow_document.get_nodes("ja")) == set(flow_document.get_nodes("en"))

    def test_voice_key_and_settings(self, flow_document: FlowDocument) -> None:
        catalog = flow_document.get_catalog("ja")
        assert catalog.get("start").voice_key == "welcome_3"
        assert catalog.settings.qr_password == "1234"
        assert catalog.settings.voice_speed == 1.0

    def test_unknown_language(self, flow_document: FlowDocument) -> None:
        with pytest.raises(KeyError):
            flow_document.get_catalog("fr")


# ── 파싱 ──


class TestParseNode:
    def test_choice_fields(self) -> None:
        node = parse_node(
            "menu",
            {
                "type": "choice",
                "content": "?",
                "choices": [
                    {
                        "id": "a",
                        "text": "A",
                        "keywords": ["alpha"],
                        "excludeKeywords": ["beta"],
                        "next": "n1",
                    }
                ],
            },
        )
        assert node.id == "menu"
        choice = node.get_choice("a")
        assert choice.keywords == ("alpha",)
        assert choice.exclude_keywords == ("beta",)
        assert node.get_choice("missing") is None

    def test_choices_imply_choice_node(self) -> None:
        node = parse_node(
            "x", {"type": "message", "content": "", "choices": [{"id": "a", "next": "b"}]}
        )
        assert isinstance(node, ChoiceNode)

    def test_choice_requires_next(self) -> None:
        with pytest.raises(CatalogFormatError):
            parse_node("x", {"type": "choice", "choices": [{"id": "a", "text": "A"}]})

    def test_unknown_type(self) -> None:
        with pytest.raises(CatalogFormatError):
            parse_node("x", {"type": "video", "content": ""})

    def test_input_field_key_defaults_to_node_id(self) -> None:
        node = parse_node("account", {"type": "input", "content": ""})
        assert node.field_key == "account"

    def test_node_to_dict(self) -> None:
        node = parse_node(
            "amount",
            {"type": "input", "content": "金額", "field": "amt", "label": "L", "next": "c"},
        )
        assert node_to_dict(node) == {
            "id": "amount",
            "type": "input",
            "content": "金額",
            "next": "c",
            "field": "amt",
            "label": "L",
        }


class TestParseFlow:
    def test_not_an_object(self) -> None:
        with pytest.raises(CatalogFormatError):
            parse_flow([])

    def test_missing_languages(self) -> None:
        with pytest.raises(CatalogFormatError):
            parse_flow({"version": "1.0"})

    def test_dangling_reference_is_warning_only(self, caplog) -> None:
        raw = _flow({"start": {"type": "message", "content": "hi", "next": "nowhere"}})
        with caplog.at_level(logging.WARNING, logger="src.core.catalog.loader"):
            document = parse_flow(raw)
        catalog = document.get_catalog("ja")
        assert catalog.dangling_references() == [("start", "nowhere")]
        assert "nowhere" in caplog.text

    def test_invalid_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "flow.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogFormatError):
            load_flow_file(path)

    def test_non_utf8_file(self, tmp_path: Path) -> None:
        path = tmp_path / "flow.json"
        path.write_bytes(b"\xff\xfe{bad")
        with pytest.raises(CatalogFormatError):
            load_flow_file(path)

    @pytest.mark.parametrize(
        "settings", [{"voiceSpeed": "fast"}, {"qrExpiryMinutes": None}]
    )
    def test_invalid_settings_value(self, settings: dict) -> None:
        raw = _flow({"start": {"type": "message", "content": "hi"}})
        raw["languages"]["ja"]["settings"] = settings
        with pytest.raises(CatalogFormatError):
            parse_flow(raw)

    def test_catalog_is_read_only(self) -> None:
        catalog = parse_flow(_flow({"start": {"type": "message", "content": ""}})).get_catalog("ja")
        with pytest.raises(TypeError):
            catalog.nodes["new"] = catalog.get("start")

    def test_document_equality(self) -> None:
        raw = _flow({"start": {"type": "message", "content": "hi"}})
        assert parse_flow(raw) == parse_flow(json.loads(json.dumps(raw)))
