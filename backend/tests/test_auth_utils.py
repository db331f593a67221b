"""Tests for credential validation helpers"""
import pytest

from app.errors import ValidationError
from app.utils.auth import hash_password, normalize_email, validate_password, verify_password


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("student@example.com", "student@example.com"),
        ("  Mixed@Example.COM ", "mixed@example.com"),
        ("first.last+tag@sub.example.org", "first.last+tag@sub.example.org"),
    ],
)
def test_normalize_email_accepts_valid_addresses(raw, expected):
    assert normalize_email(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["invalid-email", "two@@example.com", "has space@example.com", "user@localhost", "@example.com"],
)
def test_normalize_email_rejects_malformed_addresses(raw):
    with pytest.raises(ValidationError) as exc_info:
        normalize_email(raw)
    assert exc_info.value.message == "email must be a valid email address"


@pytest.mark.parametrize("raw", [None, "", 42])
def test_normalize_email_requires_a_string(raw):
    with pytest.raises(ValidationError) as exc_info:
        normalize_email(raw)
    assert exc_info.value.message == "email is required"


def test_validate_password_bounds():
    assert validate_password("a" * 8) == "a" * 8
    with pytest.raises(ValidationError):
        validate_password("a" * 7)
    with pytest.raises(ValidationError):
        validate_password("a" * 129)


def test_password_hash_roundtrip():
    hashed = hash_password("password123", rounds=4)
    assert verify_password("password123", hashed) is True
    assert verify_password("password124", hashed) is False
    assert verify_password("password123", "not-a-bcrypt-hash") is False
