"""
AuditLog model — append-only record of successful mutations.

Rows are only ever inserted by the audit recorder; nothing updates or
deletes them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_school_created", "school_id", "created_at"),)

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    user_id: str = Column(String(36), ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    action: str = Column(Text, nullable=False)  # type: ignore[assignment]
    resource: str = Column(Text, nullable=False)  # type: ignore[assignment]
    resource_id: str | None = Column(String(36), nullable=True)  # type: ignore[assignment]
    old_values: str | None = Column(Text, nullable=True)  # type: ignore[assignment]  # JSON
    new_values: str | None = Column(Text, nullable=True)  # type: ignore[assignment]  # JSON
    school_id: str | None = Column(String(36), ForeignKey("schools.id"), nullable=True)  # type: ignore[assignment]
    ip_address: str | None = Column(String(45), nullable=True)  # type: ignore[assignment]
    user_agent: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        index=True,
    )
