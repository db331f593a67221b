"""Application error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to clients. The exception handlers in ``app.main`` turn them into the
``{"success": false, "error": <message>}`` body.
"""
from typing import Optional


class AppError(Exception):
    """Base class for expected application errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-range input."""

    status_code = 400
    default_message = "Validation failed"


class AuthenticationError(AppError):
    """Bad credentials. The message never says which field was wrong."""

    status_code = 401
    default_message = "Invalid credentials"


class TokenError(AppError):
    """Base for bearer token failures."""

    status_code = 401
    default_message = "Invalid token"


class TokenExpiredError(TokenError):
    default_message = "Token expired"


class TokenInvalidError(TokenError):
    default_message = "Invalid token"


class TokenRevokedError(TokenError):
    default_message = "Token has been revoked"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class StoreError(AppError):
    """Relational store failure."""

    default_message = "Database operation failed"


class CacheError(AppError):
    """Key-value cache failure."""

    default_message = "Cache operation failed"
