"""Tests for the token lifecycle in AuthService"""
import pytest

from app.cache import CacheGateway, ReconnectPolicy, blacklist_key
from app.errors import (
    CacheError,
    ConflictError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
    ValidationError,
)
from app.services import AuthService
from app.utils.jwt_utils import create_access_token


@pytest.fixture
def token(auth_service: AuthService) -> str:
    return auth_service.register("student@example.com", "password123")["token"]


def test_verify_token_returns_claims(auth_service: AuthService):
    result = auth_service.register("student@example.com", "password123")

    claims = auth_service.verify_token(result["token"])
    assert claims.user_id == result["user"]["id"]
    assert claims.email == "student@example.com"
    assert claims.expires_at - claims.issued_at == auth_service.expire_seconds


def test_tokens_for_same_user_are_distinct(auth_service: AuthService, token: str):
    login = auth_service.login("student@example.com", "password123")
    assert login["token"] != token


def test_verify_expired_token(database, cache):
    service = AuthService(database, cache, secret="unit-test-secret", expire_seconds=-10, bcrypt_rounds=4)
    expired = service.register("late@example.com", "password123")["token"]

    with pytest.raises(TokenExpiredError):
        service.verify_token(expired)


def test_verify_token_signed_with_other_secret(auth_service: AuthService):
    foreign = create_access_token("user-1", "x@example.com", "another-secret", "HS256", 3600)

    with pytest.raises(TokenInvalidError):
        auth_service.verify_token(foreign)


def test_verify_tampered_token(auth_service: AuthService, token: str):
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(TokenInvalidError):
        auth_service.verify_token(tampered)


def test_verify_revoked_token(auth_service: AuthService, token: str):
    auth_service.logout(token)

    with pytest.raises(TokenRevokedError):
        auth_service.verify_token(token)


def test_logout_of_expired_token_is_noop(database, cache, fake_redis):
    service = AuthService(database, cache, secret="unit-test-secret", expire_seconds=-10, bcrypt_rounds=4)
    expired = service.register("late@example.com", "password123")["token"]

    service.logout(expired)
    assert fake_redis.ttl(blacklist_key(expired)) == -2


def test_logout_twice_keeps_single_entry(auth_service: AuthService, token: str, fake_redis):
    auth_service.logout(token)
    auth_service.logout(token)
    assert fake_redis.keys() == [blacklist_key(token)]


def test_logout_fails_loudly_when_cache_is_gone(database, fake_redis):
    fake_redis.available = False
    cache = CacheGateway(fake_redis, policy=ReconnectPolicy(max_attempts=0), sleep=lambda s: None)
    assert cache.connect() is False

    service = AuthService(database, cache, secret="unit-test-secret", bcrypt_rounds=4)
    fake_redis.available = True
    issued = service.register("student@example.com", "password123")["token"]

    with pytest.raises(CacheError):
        service.logout(issued)


def test_verify_degrades_when_cache_unreachable(auth_service: AuthService, token: str, fake_redis):
    fake_redis.available = False
    # Revocation lookup misses; signature and expiry still hold
    assert auth_service.verify_token(token).email == "student@example.com"


def test_optional_verify_without_token(auth_service: AuthService):
    context = auth_service.optional_verify(None)
    assert context.is_authenticated is False
    assert context.reason is None


def test_optional_verify_with_valid_token(auth_service: AuthService, token: str):
    context = auth_service.optional_verify(token)
    assert context.is_authenticated is True
    assert context.claims.email == "student@example.com"


def test_optional_verify_records_rejection_reason(auth_service: AuthService, token: str):
    assert auth_service.optional_verify("garbage").reason == "Invalid token"

    auth_service.logout(token)
    context = auth_service.optional_verify(token)
    assert context.is_authenticated is False
    assert context.reason == "Token has been revoked"


def test_register_validates_email_before_password(auth_service: AuthService):
    with pytest.raises(ValidationError) as exc_info:
        auth_service.register("bad-email", "short")
    assert "email" in exc_info.value.message


def test_register_rejects_duplicate_email_case_insensitively(auth_service: AuthService):
    auth_service.register("student@example.com", "password123")

    with pytest.raises(ConflictError):
        auth_service.register("Student@Example.com", "password123")
