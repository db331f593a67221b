"""Registration, login, logout, refresh, and current-user endpoints"""
from fastapi import APIRouter, Depends, Request, status

from app.api.deps import get_auth_service, get_bearer_token, require_user
from app.middleware.rate_limit import api_rate_limit
from app.schemas.auth import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
)
from app.services import AuthService
from app.utils.jwt_utils import TokenClaims

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@api_rate_limit
def register(
    request: Request,
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Create an account and return an access token

    Fails with 400 when the email is malformed or the password is shorter
    than 8 characters, and with 409 when the email is already registered.
    """
    return auth_service.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )


@router.post("/login", response_model=AuthResponse)
@api_rate_limit
def login(
    request: Request,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange email and password for an access token"""
    return auth_service.login(email=body.email, password=body.password)


@router.post("/logout", response_model=MessageResponse)
@api_rate_limit
def logout(
    request: Request,
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Revoke the bearer token for the rest of its lifetime

    Logging out an expired or already revoked token still succeeds.
    """
    auth_service.logout(token)
    return {"success": True, "message": "Logged out successfully"}


@router.post("/refresh", response_model=AuthResponse)
@api_rate_limit
def refresh(
    request: Request,
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Swap a valid token for a fresh one; the old token is revoked"""
    return auth_service.refresh(token)


@router.get("/me", response_model=CurrentUserResponse)
@api_rate_limit
def me(
    request: Request,
    claims: TokenClaims = Depends(require_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Return the authenticated user's profile"""
    return {"success": True, "user": auth_service.get_current_user(claims)}
