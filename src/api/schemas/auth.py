"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    """Request schema for reviewer registration.

    There is no role field: public signup always creates a reviewer and any
    extra keys in the body are ignored. Admins are created by
    `scripts/create_admin.py`.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 characters)",
    )
    full_name: str | None = Field(None, max_length=128, description="User's full name")


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


# --- Response Schemas ---


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str | None = Field(None, description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token TTL in seconds")


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    role: str
    created_at: datetime
    last_login_at: datetime | None = None


class AuthResponse(BaseModel):
    """Returned by register and login.

    ``cases_assigned`` is how many new cases the background top-up granted;
    zero when the reviewer was already at target or allocation failed.
    """

    message: str
    user: UserResponse
    tokens: TokenResponse
    cases_assigned: int = 0


class MeResponse(BaseModel):
    user: UserResponse
