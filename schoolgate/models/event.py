"""
Event model — school calendar entries.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class Event(Base):
    __tablename__ = "events"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    school_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("schools.id"), nullable=False, index=True
    )
    title: str = Column(Text, nullable=False)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    start_date: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    end_date: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    location: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_by: str = Column(String(36), ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="active")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
