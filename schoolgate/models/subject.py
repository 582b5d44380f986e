"""
Subject & ClassSubject models — the academic catalogue of a school and
which class studies which subject (and with which teacher).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = (UniqueConstraint("school_id", "code", name="uq_subject_school_code"),)

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    school_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("schools.id"), nullable=False, index=True
    )
    name: str = Column(Text, nullable=False)  # type: ignore[assignment]
    code: str = Column(String(10), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]


class ClassSubject(Base):
    __tablename__ = "class_subjects"
    __table_args__ = (UniqueConstraint("class_id", "subject_id", name="uq_class_subject"),)

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    class_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("classes.id"), nullable=False, index=True
    )
    subject_id: str = Column(String(36), ForeignKey("subjects.id"), nullable=False)  # type: ignore[assignment]
    teacher_id: str | None = Column(String(36), ForeignKey("teachers.id"), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
