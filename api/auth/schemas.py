"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class _Credentials(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RegisterRequest(_Credentials):
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=200)


class LoginRequest(_Credentials):
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=20)


class LogoutRequest(BaseModel):
    # Omitted: revoke every session of the authenticated user.
    refresh_token: str | None = Field(default=None, min_length=20)


class LogoutResponse(BaseModel):
    ok: bool = True
    revoked: int


class UserResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    is_active: bool
    created_at: datetime


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    user: UserResponse
    tokens: TokenPairResponse
