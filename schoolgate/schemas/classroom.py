"""Pydantic schemas for classes and attendance."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from schoolgate.core.enums import AttendanceStatus
from schoolgate.schemas.base import CamelModel


class ClassCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    grade: str = Field(min_length=1, max_length=10)
    section: str | None = Field(default=None, max_length=5)
    capacity: int = Field(default=30, ge=1, le=500)
    class_teacher_id: str | None = None
    academic_year: str = Field(min_length=4, max_length=20)


class ClassRead(CamelModel):
    id: str
    school_id: str
    name: str
    grade: str
    section: str | None
    capacity: int
    class_teacher_id: str | None
    academic_year: str
    status: str
    created_at: dt.datetime | None


class AttendanceMark(CamelModel):
    student_id: str
    status: AttendanceStatus
    date: dt.date
    remarks: str | None = Field(default=None, max_length=500)


class AttendanceRead(CamelModel):
    id: str
    student_id: str
    class_id: str
    date: str
    status: AttendanceStatus
    marked_by: str
    remarks: str | None


class MonthlyAttendance(CamelModel):
    month: str  # YYYY-MM
    percentage: float


class AttendanceSummary(CamelModel):
    student_id: str
    present: int
    absent: int
    late: int
    total: int
    percentage: float
    monthly: list[MonthlyAttendance]
    recent: list[AttendanceRead]
