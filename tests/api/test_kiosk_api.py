"""Kiosk session API 테스트"""

import pytest
from fastapi.testclient import TestClient

from src.core.flow.scheduler import ManualScheduler


@pytest.fixture()
def session_id(client: TestClient, scheduler: ManualScheduler) -> str:
    """거래 선택 노드까지 진행한 세션"""
    response = client.post("/sessions", json={"language": "ja"})
    assert response.status_code == 201
    scheduler.advance(2.0)
    return response.json()["session_id"]


# ── 세션 생성 / 조회 ──


class TestCreateSession:
    def test_create(self, client: TestClient) -> None:
        response = client.post("/sessions", json={})
        assert response.status_code == 201
        data = response.json()
        assert data["language"] == "ja"
        assert data["status"] == "active"
        assert data["current_node_id"] == "start"
        assert data["current_node"]["kind"] == "message"
        assert len(data["history"]) == 1
        assert data["history"][0]["role"] == "bot"
        assert data["history"][0]["audio_key"] == "welcome_3"

    def test_unsupported_language(self, client: TestClient) -> None:
        response = client.post("/sessions", json={"language": "fr"})
        assert response.status_code == 422

    def test_get_after_dwell(self, client: TestClient, session_id: str) -> None:
        data = client.get(f"/sessions/{session_id}").json()
        assert data["current_node_id"] == "transaction_type"
        assert [c["id"] for c in data["choices"]] == ["deposit", "payout", "transfer"]

    def test_unknown_session(self, client: TestClient) -> None:
        assert client.get("/sessions/nope").status_code == 404
        response = client.post("/sessions/nope/choice", json={"choice_id": "deposit"})
        assert response.status_code == 404

    def test_delete(self, client: TestClient, session_id: str) -> None:
        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.get(f"/sessions/{session_id}").status_code == 404
        assert client.delete(f"/sessions/{session_id}").status_code == 404


# ── 조작 ──


class TestDepositFlow:
    def test_tap_input_confirm(self, client: TestClient, session_id: str) -> None:
        data = client.post(
            f"/sessions/{session_id}/choice", json={"choice_id": "deposit"}
        ).json()
        assert data["current_node"]["kind"] == "input"
        assert data["current_node"]["label"] == "預入金額（円）"

        data = client.post(f"/sessions/{session_id}/input", json={"value": "12,345"}).json()
        assert data["current_node_id"] == "deposit_confirmation"
        assert data["field_values"] == {"depositAmount": "12,345"}
        assert data["display_values"] == {"depositAmount": "¥12,345"}

        data = client.post(
            f"/sessions/{session_id}/confirmation", json={"confirmed": True}
        ).json()
        assert data["current_node_id"] == "qr_code_display"

    def test_validation_error(self, client: TestClient, session_id: str) -> None:
        client.post(f"/sessions/{session_id}/choice", json={"choice_id": "deposit"})
        response = client.post(f"/sessions/{session_id}/input", json={"value": "abc"})
        assert response.status_code == 422
        assert response.json()["detail"] == {
            "field": "depositAmount",
            "message": "正しい金額を入力してください",
        }

    def test_over_ceiling(self, client: TestClient, session_id: str) -> None:
        client.post(f"/sessions/{session_id}/choice", json={"choice_id": "deposit"})
        data = client.post(f"/sessions/{session_id}/input", json={"value": "300000"}).json()
        assert data["current_node_id"] == "staff_assistance_amount"
        assert data["field_values"] == {}

    def test_confirmation_rejected(self, client: TestClient, session_id: str) -> None:
        client.post(f"/sessions/{session_id}/choice", json={"choice_id": "payout"})
        client.post(f"/sessions/{session_id}/input", json={"value": "1000"})
        data = client.post(
            f"/sessions/{session_id}/confirmation", json={"confirmed": False}
        ).json()
        assert data["current_node_id"] == "transaction_type"


class TestFreeText:
    def test_direct(self, client: TestClient, session_id: str) -> None:
        data = client.post(
            f"/sessions/{session_id}/text", json={"text": "預入をお願いします"}
        ).json()
        assert data["current_node_id"] == "deposit_amount"

    def test_pending_confirmation(self, client: TestClient, session_id: str) -> None:
        data = client.post(
            f"/sessions/{session_id}/text", json={"text": "お預け入れをお願いします"}
        ).json()
        assert data["pending_confirmation"]["choice_id"] == "deposit"
        assert data["pending_confirmation"]["confidence"] == pytest.approx(0.7)

        data = client.post(
            f"/sessions/{session_id}/resolve", json={"confirmed": True}
        ).json()
        assert data["current_node_id"] == "deposit_amount"
        assert data["pending_confirmation"] is None

    def test_resolve_without_pending(self, client: TestClient, session_id: str) -> None:
        response = client.post(f"/sessions/{session_id}/resolve", json={"confirmed": True})
        assert response.status_code == 409

    def test_speech(self, client: TestClient, session_id: str) -> None:
        response = client.post(
            f"/sessions/{session_id}/speech",
            content="振込".encode(),
            headers={"Content-Type": "application/octet-stream"},
        )
        assert response.status_code == 200
        assert response.json()["current_node_id"] == "transfer_country"


class TestOtherOperations:
    def test_wrong_node_kind(self, client: TestClient, session_id: str) -> None:
        response = client.post(f"/sessions/{session_id}/input", json={"value": "1000"})
        assert response.status_code == 409

    def test_unknown_choice(self, client: TestClient, session_id: str) -> None:
        response = client.post(f"/sessions/{session_id}/choice", json={"choice_id": "loan"})
        assert response.status_code == 409

    def test_reset(self, client: TestClient, session_id: str) -> None:
        client.post(f"/sessions/{session_id}/choice", json={"choice_id": "transfer"})
        data = client.post(f"/sessions/{session_id}/reset").json()
        assert data["current_node_id"] == "start"
        assert len(data["history"]) == 1

    def test_language(self, client: TestClient, session_id: str) -> None:
        data = client.post(
            f"/sessions/{session_id}/language", json={"language": "en"}
        ).json()
        assert data["language"] == "en"
        assert data["choices"][0]["text"] == "Deposit"

    def test_history_marked_spoken(self, client: TestClient, session_id: str) -> None:
        data = client.get(f"/sessions/{session_id}").json()
        assert all(m["spoken"] for m in data["history"] if m["role"] == "bot")
