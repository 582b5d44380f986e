"""
Role permission model — the platform-wide (role, module, permission) grant matrix.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, UniqueConstraint

from schoolgate.db.base import Base
from schoolgate.models._columns import new_id, utcnow


class RolePermission(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role", "module", "permission", name="uq_role_module_permission"),
    )

    id: str = Column(String(36), primary_key=True, default=new_id)  # type: ignore[assignment]
    role: str = Column(String(30), nullable=False, index=True)  # type: ignore[assignment]
    module: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    permission: str = Column(String(10), nullable=False)  # type: ignore[assignment]
    # create | read | update | delete
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
