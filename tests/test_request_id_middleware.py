from __future__ import annotations

from fastapi.testclient import TestClient


def test_preserves_incoming_request_id_header(client: TestClient):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client: TestClient):
    resp = client.get("/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert isinstance(generated, str)

    duration = resp.headers.get("X-Request-Duration-ms")
    assert duration is not None


def test_request_id_on_error_responses(client: TestClient):
    resp = client.get("/projects/missing", headers={"X-Request-ID": "trace-404"})

    assert resp.status_code == 404
    assert resp.headers.get("X-Request-ID") == "trace-404"


def test_request_id_on_rejected_origin(client: TestClient):
    resp = client.post(
        "/contact",
        json={},
        headers={"Origin": "https://evil.example.net", "X-Request-ID": "trace-403"},
    )

    assert resp.status_code == 403
    assert resp.headers.get("X-Request-ID") == "trace-403"
