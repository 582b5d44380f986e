"""Pydantic schemas for subjects and class-subject assignments."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from schoolgate.schemas.base import CamelModel


class SubjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=10)
    description: str | None = None

    @field_validator("code")
    @classmethod
    def _code(cls, v: str | None) -> str | None:
        return v.strip().upper() if v is not None else v


class SubjectUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    code: str | None = Field(default=None, min_length=1, max_length=10)
    description: str | None = None

    @field_validator("code")
    @classmethod
    def _code(cls, v: str | None) -> str | None:
        return v.strip().upper() if v is not None else v


class SubjectRead(CamelModel):
    id: str
    school_id: str
    name: str
    code: str
    description: str | None
    created_at: datetime | None


class ClassSubjectAssign(CamelModel):
    subject_id: str
    teacher_id: str | None = None


class ClassSubjectRead(CamelModel):
    id: str
    class_id: str
    subject_id: str
    teacher_id: str | None
