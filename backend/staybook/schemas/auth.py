"""Pydantic v2 request/response schemas for authentication and profile endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Schema for user registration."""

    email: EmailStr
    username: str = Field(..., min_length=1, max_length=255, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=8, max_length=72)
    full_name: str | None = Field(None, max_length=255)
    phone_number: str | None = Field(None, max_length=20)
    is_host: bool = False


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    """Schema for token refresh."""

    refresh_token: str


class ProfileUpdate(BaseModel):
    """Partial profile update. Only explicitly set fields are changed."""

    full_name: str | None = Field(None, max_length=255)
    phone_number: str | None = Field(None, max_length=20)
    bio: str | None = Field(None, max_length=1000)
    profile_image_url: str | None = Field(None, max_length=512)
    language_preference: str | None = Field(None, max_length=10)
    is_host: bool | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    """JWT token pair returned on successful authentication."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class PublicUserResponse(BaseModel):
    """Profile fields anyone may see."""

    id: uuid.UUID
    username: str
    full_name: str | None = None
    bio: str | None = None
    profile_image_url: str | None = None
    is_host: bool
    is_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserResponse(PublicUserResponse):
    """The authenticated user's own profile."""

    email: str
    phone_number: str | None = None
    language_preference: str
    is_active: bool


class AuthResponse(BaseModel):
    """Combined user + tokens returned on register/login."""

    user: UserResponse
    tokens: TokenResponse


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
