"""
User model — authentication, role and tenant membership.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    email: str = Column(String(255), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    password_hash: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    first_name: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    last_name: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    phone: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    role: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    # NULL only for super_admin
    school_id: str | None = Column(  # type: ignore[assignment]
        String(36), ForeignKey("schools.id"), nullable=True, index=True
    )
    status: str = Column(String(20), nullable=False, default="active")  # type: ignore[assignment]
    # active | inactive | pending | graduated
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
