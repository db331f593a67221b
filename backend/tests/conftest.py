"""Pytest configuration and fixtures"""
import math
import os
import threading
import time
from datetime import datetime, timedelta
from typing import Callable, Generator

# Must be set before app.config is imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from app.cache import CacheGateway
from app.database import Base, Database
from app.main import app
from app.models import Content, User
from app.services import AuthService, ContentService

TEST_DATABASE_URL = "sqlite:///./test.db"


class InMemoryRedis:
    """Thread-safe stand-in for the subset of the redis client the gateway uses.

    Flip ``available`` to False to make every call fail like a dropped connection.
    """

    def __init__(self):
        self._data = {}
        self._expires_at = {}
        self._lock = threading.Lock()
        self.available = True
        self.calls = 0

    def _check(self):
        self.calls += 1
        if not self.available:
            raise RedisConnectionError("Connection refused")

    def _purge(self, key):
        expires_at = self._expires_at.get(key)
        if expires_at is not None and expires_at <= time.monotonic():
            self._data.pop(key, None)
            self._expires_at.pop(key, None)

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        with self._lock:
            self._purge(key)
            return self._data.get(key)

    def set(self, key, value, ex=None):
        self._check()
        with self._lock:
            self._data[key] = value
            if ex is not None:
                self._expires_at[key] = time.monotonic() + ex
            else:
                self._expires_at.pop(key, None)
        return True

    def delete(self, *keys):
        self._check()
        removed = 0
        with self._lock:
            for key in keys:
                if self._data.pop(key, None) is not None:
                    removed += 1
                self._expires_at.pop(key, None)
        return removed

    def exists(self, *keys):
        self._check()
        with self._lock:
            for key in keys:
                self._purge(key)
            return sum(1 for key in keys if key in self._data)

    def ttl(self, key):
        with self._lock:
            self._purge(key)
            if key not in self._data:
                return -2
            expires_at = self._expires_at.get(key)
            if expires_at is None:
                return -1
            return math.ceil(expires_at - time.monotonic())

    def keys(self):
        with self._lock:
            return list(self._data)

    def close(self):
        pass


@pytest.fixture(scope="function")
def database() -> Generator[Database, None, None]:
    """Create a fresh database for each test"""
    db = Database(TEST_DATABASE_URL)
    Base.metadata.create_all(bind=db.engine)
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=db.engine)
        db.close()


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def cache(fake_redis: InMemoryRedis) -> CacheGateway:
    gateway = CacheGateway(fake_redis, sleep=lambda seconds: None)
    gateway.connect()
    return gateway


@pytest.fixture
def auth_service(database: Database, cache: CacheGateway) -> AuthService:
    return AuthService(database, cache, secret="unit-test-secret", bcrypt_rounds=4)


@pytest.fixture
def content_service(database: Database, cache: CacheGateway) -> ContentService:
    return ContentService(database, cache)


@pytest.fixture(scope="function")
def client(database: Database, cache: CacheGateway) -> Generator[TestClient, None, None]:
    """Test client wired to the test database and in-memory cache"""
    app.state.database = database
    app.state.cache = cache
    with TestClient(app) as test_client:
        yield test_client
    app.state.database = None
    app.state.cache = None


@pytest.fixture
def make_user(database: Database) -> Callable[..., User]:
    def _make_user(email: str = "author@example.com", first_name="Ada", last_name="Lovelace") -> User:
        with database.session() as session:
            user = User(
                email=email,
                password_hash="not-a-real-hash",
                first_name=first_name,
                last_name=last_name,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    return _make_user


@pytest.fixture
def make_content(database: Database) -> Callable[..., Content]:
    """Insert content rows; each call is one minute newer than the previous one"""
    base_time = datetime(2024, 1, 1, 12, 0, 0)
    counter = {"n": 0}

    def _make_content(**overrides) -> Content:
        counter["n"] += 1
        created_at = base_time + timedelta(minutes=counter["n"])
        values = {
            "title": f"Item {counter['n']}",
            "body": "Body text",
            "type": "lesson",
            "category": "Portfolio Theory",
            "difficulty_level": "beginner",
            "published": True,
            "created_at": created_at,
            "updated_at": created_at,
        }
        values.update(overrides)
        with database.session() as session:
            content = Content(**values)
            session.add(content)
            session.commit()
            session.refresh(content)
            session.expunge(content)
            return content

    return _make_content


@pytest.fixture
def sample_user_data() -> dict:
    return {
        "email": "learner@example.com",
        "password": "password123",
        "firstName": "Grace",
        "lastName": "Hopper",
    }


@pytest.fixture
def registered_user(client: TestClient, sample_user_data: dict) -> dict:
    """Register a user through the API and return the response body"""
    response = client.post("/api/auth/register", json=sample_user_data)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def auth_headers(registered_user: dict) -> dict:
    return {"Authorization": f"Bearer {registered_user['token']}"}
