"""Tests for the HTTP API."""
import json

import pytest
from fastapi.testclient import TestClient

from flowfix.main import app


@pytest.fixture
def client():
    return TestClient(app)


CANDIDATE = {
    "name": "Lead intake",
    "nodes": [
        {"name": "Save", "type": "googleSheets"},
        {"name": "Hook", "type": "webhook"},
        {"name": "Save"},
    ],
    "connections": {"Hook": {"main": [["Save"]]}},
}


class TestNormalizeEndpoint:

    def test_normalize_parsed_workflow(self, client):
        response = client.post("/api/normalize", json={"workflow": CANDIDATE})

        assert response.status_code == 200
        data = response.json()
        assert data["node_count"] == 3
        assert data["connection_count"] == 2
        assert [node["name"] for node in data["workflow"]["nodes"]] == ["Hook", "Save", "Save 2"]
        assert "renamed duplicate node 'Save' to 'Save 2'" in data["repairs"]

    def test_normalize_llm_reply_text(self, client):
        text = f"Here is the workflow:\n```json\n{json.dumps(CANDIDATE)}\n```"

        response = client.post("/api/normalize", json={"text": text})

        assert response.status_code == 200
        assert response.json()["workflow"]["name"] == "Lead intake"

    def test_empty_node_list_is_rejected(self, client):
        response = client.post("/api/normalize", json={"workflow": {"nodes": []}})

        assert response.status_code == 422
        assert "no nodes" in response.json()["detail"]

    def test_unparseable_text_is_rejected(self, client):
        response = client.post("/api/normalize", json={"text": "Sorry, I can't help with that."})

        assert response.status_code == 422
        assert "Could not extract valid JSON" in response.json()["detail"]

    @pytest.mark.parametrize("body", [{}, {"workflow": CANDIDATE, "text": "{}"}])
    def test_exactly_one_source_required(self, client, body):
        response = client.post("/api/normalize", json=body)

        assert response.status_code == 422


class TestValidateEndpoint:

    def test_normalized_output_is_valid(self, client):
        workflow = client.post("/api/normalize", json={"workflow": CANDIDATE}).json()["workflow"]

        response = client.post("/api/validate", json={"workflow": workflow})

        assert response.status_code == 200
        assert response.json() == {"valid": True, "errors": []}

    def test_raw_candidate_reports_errors(self, client):
        response = client.post("/api/validate", json={"workflow": CANDIDATE})

        data = response.json()
        assert data["valid"] is False
        assert "Node missing id: Save" in data["errors"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
