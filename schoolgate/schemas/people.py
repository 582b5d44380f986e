"""Pydantic schemas for student and teacher profiles."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from schoolgate.schemas.base import CamelModel
from schoolgate.schemas.user import UserData, UserRead


# ── Student ─────────────────────────────────────────────────────────
class StudentData(CamelModel):
    admission_number: str = Field(min_length=1, max_length=20)
    class_id: str | None = None
    date_of_birth: datetime | None = None
    gender: str | None = Field(default=None, max_length=10)
    address: str | None = None
    parent_id: str | None = None
    emergency_contact: str | None = Field(default=None, max_length=20)


class StudentCreate(CamelModel):
    user_data: UserData
    student_data: StudentData


class StudentUpdate(CamelModel):
    class_id: str | None = None
    date_of_birth: datetime | None = None
    gender: str | None = Field(default=None, max_length=10)
    address: str | None = None
    parent_id: str | None = None
    emergency_contact: str | None = Field(default=None, max_length=20)


class StudentRead(CamelModel):
    id: str
    user_id: str
    school_id: str
    admission_number: str
    class_id: str | None
    date_of_birth: datetime | None
    gender: str | None
    address: str | None
    parent_id: str | None
    emergency_contact: str | None
    status: str


class StudentCreated(CamelModel):
    user: UserRead
    student: StudentRead


# ── Teacher ─────────────────────────────────────────────────────────
class TeacherData(CamelModel):
    employee_id: str = Field(min_length=1, max_length=20)
    department: str | None = None
    qualification: str | None = None
    experience: int | None = Field(default=None, ge=0)
    specialization: str | None = None


class TeacherCreate(CamelModel):
    user_data: UserData
    teacher_data: TeacherData


class TeacherRead(CamelModel):
    id: str
    user_id: str
    school_id: str
    employee_id: str
    department: str | None
    qualification: str | None
    experience: int | None
    specialization: str | None
    status: str


class TeacherCreated(CamelModel):
    user: UserRead
    teacher: TeacherRead
