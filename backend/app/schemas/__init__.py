"""Pydantic schemas for request/response validation"""
from app.schemas.auth import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserPublic,
)
from app.schemas.content import ContentItem, ContentItemResponse, ContentListResponse, Pagination

__all__ = [
    "AuthResponse",
    "CurrentUserResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "UserPublic",
    "ContentItem",
    "ContentItemResponse",
    "ContentListResponse",
    "Pagination",
]
