"""Tests for per-IP rate limiting on /api routes"""
import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.middleware.rate_limit import limiter

TOO_MANY = {"success": False, "error": "Too many requests from this IP, please try again later."}


@pytest.fixture
def three_per_minute(monkeypatch):
    """Enable the limiter with a window small enough to exhaust in a test"""
    monkeypatch.setattr(limiter, "enabled", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_DEFAULT", ["3/minute"])
    limiter.reset()
    yield
    limiter.reset()


def test_limit_exceeded_returns_json_error(client: TestClient, three_per_minute):
    for _ in range(3):
        assert client.get("/api/content").status_code == 200

    response = client.get("/api/content")
    assert response.status_code == 429
    assert response.json() == TOO_MANY


def test_window_is_shared_across_api_routes(client: TestClient, three_per_minute):
    assert client.get("/api/content").status_code == 200
    assert client.get("/api/content/missing-id").status_code == 404
    assert client.get("/api/health").status_code == 200

    response = client.post("/api/auth/login", json={"email": "a@example.com", "password": "password123"})
    assert response.status_code == 429
    assert response.json() == TOO_MANY


def test_probes_and_root_are_not_limited(client: TestClient, three_per_minute):
    for _ in range(3):
        client.get("/api/content")
    assert client.get("/api/content").status_code == 429

    assert client.get("/api/health/live").status_code == 200
    assert client.get("/api/health/ready").status_code == 200
    assert client.get("/").status_code == 200


def test_limiter_disabled(client: TestClient):
    assert limiter.enabled is False
    for _ in range(5):
        assert client.get("/api/content").status_code == 200
