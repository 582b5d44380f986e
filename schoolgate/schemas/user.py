"""Pydantic schemas for User CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from schoolgate.core.enums import Role, UserStatus
from schoolgate.schemas.base import CamelModel


def normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


class UserRead(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    role: Role
    school_id: str | None
    status: UserStatus
    created_at: datetime | None = None


class UserData(CamelModel):
    """Account half of a student / teacher creation payload."""

    email: str
    first_name: str
    last_name: str = ""
    phone: str | None = None
    password: str | None = Field(default=None, min_length=8, max_length=72)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)


class UserCreate(CamelModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    first_name: str
    last_name: str = ""
    phone: str | None = None
    role: Role
    school_id: str | None = None
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)

    @model_validator(mode="after")
    def _school_required(self) -> UserCreate:
        if self.role != Role.SUPER_ADMIN and not self.school_id:
            raise ValueError("schoolId is required for every role except super_admin")
        if self.role == Role.SUPER_ADMIN and self.school_id:
            raise ValueError("super_admin users do not belong to a school")
        return self


class UserUpdate(CamelModel):
    """Profile fields a super admin may edit. Role and school stay fixed."""

    email: str | None = None
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = None
    phone: str | None = None
    password: str | None = Field(default=None, min_length=8, max_length=72)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return normalise_email(v) if v is not None else v


class UserStatusUpdate(CamelModel):
    status: UserStatus


class InviteRequest(CamelModel):
    email: str
    first_name: str = "Principal"
    last_name: str = ""

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)


class InviteResponse(CamelModel):
    user_id: str
    email: str
    invite_email_sent: bool
