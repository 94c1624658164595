"""Shared test fixtures."""

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from src.core.catalog.loader import load_flow_file
from src.core.catalog.models import FlowDocument, NodeCatalog
from src.core.event_bus import EventBus
from src.core.flow.scheduler import ManualScheduler
from src.main import app
from src.services.session_service import KioskSessionService
from src.services.voice.mock import MockSpeechInput, MockSpeechOutput
from src.services.voice_service import VoiceOutputService

FLOW_PATH = Path(__file__).resolve().parent.parent / "src" / "data" / "atm_flow.json"


@pytest.fixture()
def flow_path() -> Path:
    """Bundled ATM flow file."""
    return FLOW_PATH


@pytest.fixture()
def flow_document() -> FlowDocument:
    return load_flow_file(FLOW_PATH)


@pytest.fixture()
def ja_catalog(flow_document: FlowDocument) -> NodeCatalog:
    return flow_document.get_catalog("ja")


@pytest.fixture()
def en_catalog(flow_document: FlowDocument) -> NodeCatalog:
    return flow_document.get_catalog("en")


@pytest.fixture()
def scheduler() -> ManualScheduler:
    """Deterministic scheduler; tests advance time explicitly."""
    return ManualScheduler()


@pytest.fixture()
def speech_output() -> MockSpeechOutput:
    return MockSpeechOutput()


@pytest.fixture()
def client(
    scheduler: ManualScheduler, speech_output: MockSpeechOutput
) -> Iterator[TestClient]:
    """FastAPI TestClient whose sessions run on a ManualScheduler."""
    with TestClient(app) as test_client:
        app.state.session_service = KioskSessionService(
            catalog_service=app.state.catalog_service,
            scheduler=scheduler,
            event_bus=EventBus(),
            voice_output=VoiceOutputService(speech_output),
            speech_input=MockSpeechInput(),
        )
        yield test_client
