"""Authentication utilities"""
from typing import Optional

import bcrypt
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError

_email_adapter = TypeAdapter(EmailStr)

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
NAME_MAX_LENGTH = 100

# bcrypt only looks at the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt at the given cost factor"""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Compare a password against a stored bcrypt hash"""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def normalize_email(email: Optional[str]) -> str:
    """Validate an email address and return it trimmed and lower-cased"""
    if not email or not isinstance(email, str):
        raise ValidationError("email is required")
    try:
        email = _email_adapter.validate_python(email.strip())
    except PydanticValidationError:
        raise ValidationError("email must be a valid email address")
    return email.lower()


def validate_password(password: Optional[str]) -> str:
    if not password or not isinstance(password, str):
        raise ValidationError("password is required")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(f"password must be at most {PASSWORD_MAX_LENGTH} characters long")
    return password


def validate_name(field: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > NAME_MAX_LENGTH:
        raise ValidationError(f"{field} must be at most {NAME_MAX_LENGTH} characters long")
    return value or None
