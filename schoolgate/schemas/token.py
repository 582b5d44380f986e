"""Pydantic schemas for JWT tokens and the auth flows."""

from __future__ import annotations

from pydantic import Field, field_validator

from schoolgate.core.enums import Role, TokenType
from schoolgate.schemas.base import CamelModel
from schoolgate.schemas.user import UserRead


class TokenClaims(CamelModel):
    """Verified claim set carried by every token type."""

    id: str
    email: str
    role: Role
    school_id: str | None = None
    type: TokenType


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"
    user: UserRead


class LoginRequest(CamelModel):
    email: str
    password: str = Field(min_length=6)
    school_code: str | None = None

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class RefreshRequest(CamelModel):
    refresh_token: str


class SetPasswordRequest(CamelModel):
    token: str
    password: str = Field(min_length=8, max_length=72)
