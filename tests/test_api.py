"""
HTTP-level tests for the worker and memory routes.
"""

import pytest
from fastapi.testclient import TestClient

from app.services.pipeline import ErrorPipeline

EMPTY_MEMORY = {
    "totalErrors": 0,
    "lastProcessed": "",
    "workflows": [],
    "statistics": {
        "errorTypes": {},
        "severityCount": {},
        "averageProcessingTime": 0.0,
    },
}


class TestProcessError:
    def test_success_response(self, client: TestClient) -> None:
        response = client.post(
            "/api/worker",
            json={"error": "Network timeout while fetching", "eventId": "evt-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["workflow"]["errorType"] == "Network Error"
        assert body["workflow"]["severity"] == "low"
        assert len(body["workflow"]["suggestions"]) == 6
        assert "processedAt" in body["workflow"]
        assert body["memory"]["totalErrors"] == 1
        assert body["memory"]["lastProcessed"] == "Network timeout while fetching"
        assert body["memory"]["workflows"][0]["id"] == "evt-1"

    def test_error_text_alias_and_generated_event_id(self, client: TestClient) -> None:
        response = client.post("/api/worker", json={"errorText": "fatal exception"})

        assert response.status_code == 200
        record = response.json()["memory"]["workflows"][0]
        assert record["id"]
        assert record["result"]["severity"] == "critical"

    def test_blank_input_is_400(self, client: TestClient) -> None:
        response = client.post("/api/worker", json={"error": "   ", "eventId": "evt-1"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid input"}
        assert client.get("/api/worker/memory").json() == EMPTY_MEMORY

    def test_missing_error_is_400(self, client: TestClient) -> None:
        response = client.post("/api/worker", json={"eventId": "evt-1"})
        assert response.status_code == 400

    @pytest.mark.parametrize("event_id", ["", "   ", None])
    def test_blank_event_id_gets_generated(self, client: TestClient, event_id) -> None:
        response = client.post("/api/worker", json={"error": "TypeError boom", "eventId": event_id})

        assert response.status_code == 200
        record = response.json()["memory"]["workflows"][0]
        assert record["id"].strip()
        assert len(record["id"]) == 32

    def test_numeric_event_id_is_stringified(self, client: TestClient) -> None:
        response = client.post("/api/worker", json={"error": "TypeError boom", "eventId": 42})

        assert response.status_code == 200
        assert response.json()["memory"]["workflows"][0]["id"] == "42"

    def test_body_that_is_not_json_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/worker",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid input"}
        assert client.get("/api/worker/memory").json() == EMPTY_MEMORY

    def test_wrongly_typed_field_is_400(self, client: TestClient) -> None:
        response = client.post("/api/worker", json={"error": ["a", "b"], "eventId": "evt-1"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid input"}

    def test_unexpected_failure_is_500(self, client: TestClient) -> None:
        state = client.app.state

        def broken(text: str):
            raise RuntimeError("boom")

        state.pipeline = ErrorPipeline(
            hub=state.hub,
            store=state.store,
            classifier=broken,
            validation_delay=0,
            workflow_delay=0,
        )
        response = client.post("/api/worker", json={"error": "TypeError", "eventId": "evt-1"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Processing failed"}
        assert client.get("/api/worker/memory").json()["totalErrors"] == 0


class TestMemory:
    def test_initially_empty(self, client: TestClient) -> None:
        assert client.get("/api/worker/memory").json() == EMPTY_MEMORY

    def test_reset(self, client: TestClient) -> None:
        for i in range(3):
            client.post("/api/worker", json={"error": f"SyntaxError {i}", "eventId": f"e{i}"})
        assert client.get("/api/worker/memory").json()["totalErrors"] == 3

        response = client.post("/api/worker/memory/reset")

        assert response.status_code == 200
        assert response.json() == EMPTY_MEMORY
        assert client.get("/api/worker/memory").json() == EMPTY_MEMORY

    def test_history_capped(self, client: TestClient) -> None:
        for i in range(12):
            client.post("/api/worker", json={"error": f"warning {i}", "eventId": f"e{i}"})

        memory = client.get("/api/worker/memory").json()
        assert memory["totalErrors"] == 12
        assert [w["id"] for w in memory["workflows"]] == [f"e{i}" for i in range(11, 1, -1)]
        assert memory["statistics"]["severityCount"] == {"medium": 12}


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "ok", "subscribers": 0}
