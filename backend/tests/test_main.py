"""Tests for application-level routing, headers and error shapes"""
from fastapi.testclient import TestClient


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["version"] == "1.0.0"
    assert data["documentation"] == "/api-docs"
    assert data["health"] == "/api/health"


def test_unknown_route(client: TestClient):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Cannot GET /api/nowhere"}


def test_security_headers(client: TestClient):
    response = client.get("/api/health/live")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert "strict-transport-security" not in response.headers


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/api/health/live", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"
    assert response.headers["x-response-time"].endswith("s")


def test_malformed_json_body(client: TestClient):
    response = client.post(
        "/api/auth/login",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_api_docs_served(client: TestClient):
    assert client.get("/api-docs").status_code == 200


def test_content_security_policy(client: TestClient):
    api_policy = client.get("/api/health/live").headers["content-security-policy"]
    assert api_policy.startswith("default-src 'self'")
    assert "unsafe-inline" not in api_policy

    docs_policy = client.get("/api-docs").headers["content-security-policy"]
    assert "https://cdn.jsdelivr.net" in docs_policy
    assert docs_policy.startswith("default-src 'self'")
