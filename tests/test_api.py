import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from duplicate_review.api.deps import get_detection_client
from duplicate_review.main import app
from duplicate_review.services.detection_client import DetectionBackendClient


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def backend(sample_payload):
    """Detection backend double; records every request it receives."""
    state = {"requests": [], "status": 200, "body": sample_payload}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return httpx.Response(state["status"], json=state["body"])

    detection_client = DetectionBackendClient(
        "http://backend.test/api",
        max_retries=2,
        retry_multiplier=0,
        transport=httpx.MockTransport(handler),
    )
    app.dependency_overrides[get_detection_client] = lambda: detection_client
    yield state
    asyncio.run(detection_client.aclose())


def test_root_and_health(client):
    assert client.get("/").json()["endpoints"]["comparison"] == "/api/v1/comparison"

    health = client.get("/api/v1/health/")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    assert client.get("/api/v1/health/live").json() == {"status": "alive"}

    ready = client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json()["ready"] is True


def test_request_id_is_echoed(client):
    response = client.get("/api/v1/health/live", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers


def test_highlight_endpoint(client):
    response = client.post(
        "/api/v1/comparison/highlight",
        json={
            "text": "The cat sat. The cat sat. Dogs bark.",
            "matches": [{"id": 1, "originalText": "The cat sat.", "similarity": 85}],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["highlightedCount"] == 1
    assert [segment["text"] for segment in body["segments"]] == ["The cat sat.", " The cat sat. Dogs bark."]
    first, second = body["segments"]
    assert first["start"] == 0
    assert first["highlight"]["matchId"] == "1"
    assert first["highlight"]["side"] == "subject"
    assert first["highlight"]["tierColor"] == "#ef4444"
    assert first["highlight"]["color"].startswith("#")
    assert second["start"] == 12
    assert second["highlight"] is None


def test_segments_endpoint(client):
    response = client.post("/api/v1/comparison/segments", json={"text": "Hello world. Bye"})

    assert response.status_code == 200
    assert response.json() == {
        "sentences": ["Hello world", "Bye"],
        "stats": {"characters": 16, "words": 3, "sentences": 2},
    }


def test_candidates_endpoint(client, sample_payload):
    response = client.post(
        "/api/v1/comparison/candidates",
        json={"candidates": sample_payload["matchingDocuments"], "filterStatus": "high"},
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == ["doc-1"]
    assert body["items"][0]["status"] == "high"
    assert body["total"] == 1
    assert body["filteredOut"] == 2


def test_candidates_endpoint_rejects_unknown_sort_key(client):
    response = client.post("/api/v1/comparison/candidates", json={"candidates": [], "sortBy": "size"})
    assert response.status_code == 422


def test_scroll_sync_endpoint(client):
    response = client.post(
        "/api/v1/comparison/scroll-sync",
        json={
            "sourceScrollTop": 50,
            "sourceScrollHeight": 200,
            "sourceClientHeight": 100,
            "targetScrollHeight": 400,
            "targetClientHeight": 200,
        },
    )
    assert response.json() == {"targetScrollTop": 100.0}

    response = client.post(
        "/api/v1/comparison/scroll-sync",
        json={
            "sourceScrollTop": 50,
            "sourceScrollHeight": 100,
            "sourceClientHeight": 100,
            "targetScrollHeight": 400,
            "targetClientHeight": 200,
            "targetScrollTop": 42,
        },
    )
    assert response.json() == {"targetScrollTop": 42.0}


def test_view_endpoint(client, sample_payload):
    response = client.post("/api/v1/comparison/view", json={"payload": sample_payload, "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["selectedDocumentId"] == "doc-1"
    assert body["statistics"]["duplicateSentences"] == 2
    assert body["statistics"]["hasHighlights"] is True
    assert body["companions"]["m2"] == {"matchId": "m2", "subjectIndex": 2, "otherIndex": 3}
    assert [segment["start"] for segment in body["subjectSegments"]] == [0, 12, 26, 51]
    assert [item["id"] for item in body["candidates"]] == ["doc-1", "doc-2"]
    assert body["totalCandidates"] == 3


def test_check_view_fetches_from_backend(client, backend):
    response = client.get(
        "/api/v1/comparison/checks/chk-1/view",
        params={"documentId": "doc-2", "sortBy": "fileName", "sortOrder": "asc"},
        headers={"Authorization": "Bearer secret-token"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["selectedDocumentId"] == "doc-2"
    assert body["otherSegments"] == []
    assert [item["fileName"] for item in body["candidates"]] == ["draft.txt", "notes.txt", "source.txt"]

    (request,) = backend["requests"]
    assert request.url.path == "/api/plagiarism/chk-1/detailed-all-documents-comparison"
    assert request.headers["Authorization"] == "Bearer secret-token"


def test_check_view_without_credentials_sends_no_authorization(client, backend):
    assert client.get("/api/v1/comparison/checks/chk-1/view").status_code == 200
    assert "Authorization" not in backend["requests"][0].headers


def test_check_view_not_found(client, backend):
    backend["status"] = 404
    backend["body"] = {"message": "missing"}

    response = client.get("/api/v1/comparison/checks/missing/view")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "RESOURCE_NOT_FOUND"
    assert error["details"]["resource_id"] == "missing"
    assert error["request_id"] == response.headers["X-Request-ID"]


def test_check_view_backend_failure(client, backend):
    backend["status"] = 503
    backend["body"] = {"message": "down"}

    response = client.get("/api/v1/comparison/checks/chk-1/view")

    assert response.status_code == 502
    error = response.json()["error"]
    assert error["code"] == "DETECTION_BACKEND_ERROR"
    assert error["details"]["upstream_status"] == 503
    assert len(backend["requests"]) == 2


def test_check_view_rejects_negative_limit(client, backend):
    response = client.get("/api/v1/comparison/checks/chk-1/view", params={"limit": -1})
    assert response.status_code == 422
    assert backend["requests"] == []


def test_view_endpoint_merges_latest_sources(client, sample_payload):
    response = client.post(
        "/api/v1/comparison/view",
        json={
            "payload": sample_payload,
            "latestSources": [
                {"id": "doc-3", "duplicateRate": 70},
                {"id": "doc-9", "fileName": "fresh.txt", "duplicateRate": 40},
            ],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["candidates"]] == ["doc-3", "doc-1", "doc-9", "doc-2"]
    assert body["candidates"][0]["duplicateRate"] == 70
    assert body["candidates"][0]["status"] == "high"
    assert body["totalCandidates"] == 4
