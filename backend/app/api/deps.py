"""API dependencies: service handles and bearer authentication.

Gateways and services are built once in the application lifespan and kept on
``app.state``; these dependencies only hand them out.

Two authentication modes:
  - :func:`require_user`  - a valid ``Authorization: Bearer <token>`` is mandatory
  - :func:`optional_user` - identity is advisory; failures yield an anonymous context
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import AuthenticationError, TokenError
from app.middleware.monitoring import record_auth_failure
from app.services import AuthContext, AuthService, ContentService, HealthService
from app.utils.jwt_utils import TokenClaims

_bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Service handles
# ---------------------------------------------------------------------------

def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service


def get_health_service(request: Request) -> HealthService:
    return request.app.state.health_service


# ---------------------------------------------------------------------------
# Bearer authentication
# ---------------------------------------------------------------------------

def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    """Raw bearer token; 401 when the header is missing"""
    if not credentials or not credentials.credentials:
        record_auth_failure("missing")
        raise AuthenticationError("Access token required")
    return credentials.credentials


def require_user(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenClaims:
    """Require a signed, unexpired, unrevoked token and return its claims."""
    try:
        return auth_service.verify_token(token)
    except TokenError as exc:
        record_auth_failure(exc.__class__.__name__)
        raise


def optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthContext:
    """Resolve the caller if a usable token is present; otherwise anonymous."""
    token = credentials.credentials if credentials else None
    return auth_service.optional_verify(token)
