"""
School (tenant) and per-school module entitlement models.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class School(Base):
    __tablename__ = "schools"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    name: str = Column(Text, nullable=False)  # type: ignore[assignment]
    code: str = Column(String(20), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    address: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    phone: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    email: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    website: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="active")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )


class SchoolModule(Base):
    """(school, module) → enabled. A missing row means disabled."""

    __tablename__ = "school_modules"
    __table_args__ = (UniqueConstraint("school_id", "module", name="uq_school_module"),)

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    school_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("schools.id"), nullable=False, index=True
    )
    module: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    enabled: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
