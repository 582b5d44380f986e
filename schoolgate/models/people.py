"""
Student & teacher profile models — each extends a User within one school.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class Student(Base):
    __tablename__ = "students"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    user_id: str = Column(String(36), ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    school_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("schools.id"), nullable=False, index=True
    )
    admission_number: str = Column(String(20), unique=True, nullable=False)  # type: ignore[assignment]
    class_id: str | None = Column(String(36), ForeignKey("classes.id"), nullable=True)  # type: ignore[assignment]
    date_of_birth: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    gender: str | None = Column(String(10), nullable=True)  # type: ignore[assignment]
    address: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    parent_id: str | None = Column(String(36), ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    emergency_contact: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="active")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )


class Teacher(Base):
    __tablename__ = "teachers"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    user_id: str = Column(String(36), ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    school_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("schools.id"), nullable=False, index=True
    )
    employee_id: str = Column(String(20), unique=True, nullable=False)  # type: ignore[assignment]
    department: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    qualification: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    experience: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    specialization: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="active")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
