"""Pydantic schemas for schools and module entitlements."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from schoolgate.core.enums import ModuleName
from schoolgate.schemas.base import CamelModel


class SchoolCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=2, max_length=20)
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    modules: list[ModuleName] | None = None

    @field_validator("code")
    @classmethod
    def _code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v.replace("-", "").isalnum():
            raise ValueError("School code must be alphanumeric (hyphens allowed)")
        return v


class SchoolRead(CamelModel):
    id: str
    name: str
    code: str
    address: str | None
    phone: str | None
    email: str | None
    website: str | None
    status: str
    created_at: datetime | None


class SchoolModulesUpdate(CamelModel):
    modules: list[ModuleName]


class SchoolModulesRead(CamelModel):
    school_id: str
    modules: list[ModuleName]
