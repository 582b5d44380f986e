"""
Class & Attendance models — the day-to-day academic records of a school.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class SchoolClass(Base):
    __tablename__ = "classes"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    school_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("schools.id"), nullable=False, index=True
    )
    name: str = Column(Text, nullable=False)  # type: ignore[assignment]
    grade: str = Column(String(10), nullable=False)  # type: ignore[assignment]
    section: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]
    capacity: int = Column(Integer, nullable=False, default=30)  # type: ignore[assignment]
    class_teacher_id: str | None = Column(String(36), ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    academic_year: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="active")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        Index("ix_attendance_class_date", "class_id", "date"),
        # one mark per student per class per day
        UniqueConstraint("student_id", "class_id", "date", name="uq_attendance_student_day"),
    )

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    school_id: str = Column(String(36), ForeignKey("schools.id"), nullable=False)  # type: ignore[assignment]
    student_id: str = Column(String(36), ForeignKey("students.id"), nullable=False)  # type: ignore[assignment]
    class_id: str = Column(String(36), ForeignKey("classes.id"), nullable=False)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    status: str = Column(String(10), nullable=False)  # type: ignore[assignment]
    # present | absent | late
    marked_by: str = Column(String(36), ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    remarks: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
