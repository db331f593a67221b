"""Auth request/response schemas"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Registration body. Format rules (email shape, password length) are enforced by AuthService."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., description="Account email address")
    password: str = Field(..., description="At least 8 characters")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")


class LoginRequest(BaseModel):
    email: str
    password: str


class UserPublic(BaseModel):
    id: str
    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    emailVerified: bool
    subscriptionTier: str
    createdAt: Optional[str] = None
    lastLogin: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserPublic


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: UserPublic


class MessageResponse(BaseModel):
    success: bool = True
    message: str
