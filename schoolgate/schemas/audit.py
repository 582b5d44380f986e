"""Pydantic schemas for audit log listings."""

from __future__ import annotations

from datetime import datetime

from schoolgate.schemas.base import CamelModel


class AuditLogRead(CamelModel):
    id: str
    user_id: str
    action: str
    resource: str
    resource_id: str | None
    old_values: str | None
    new_values: str | None
    school_id: str | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime | None
