"""
Audit trail — post-response, fire-and-forget.

A route stages a ``PendingAudit`` on ``request.state`` while it runs.
``AuditMiddleware`` looks at the finished response: for a mutating method
with a 2xx status it hands the entry to ``AuditRecorder.record`` as the
response's background task, which runs after the body has been sent.
The recorder has its own session and its own error boundary; a failed
insert is logged and dropped, never surfaced to the client.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from schoolgate.core.exceptions import AuditPersistFailure
from schoolgate.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

# Path params tried, in order, for the audited resource id.
_RESOURCE_ID_PARAMS = (
    "id",
    "student_id",
    "teacher_id",
    "class_id",
    "event_id",
    "user_id",
    "school_id",
)
_REDACTED = "<redacted>"
_SENSITIVE_KEYS = ("password", "token")


@dataclass
class PendingAudit:
    user_id: str
    action: str
    resource: str
    resource_id: str | None = None
    school_id: str | None = None
    old_values: Any = None
    new_values: Any = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def redact(values: Any) -> Any:
    """Replace password / token fields at any depth."""
    if isinstance(values, dict):
        return {
            k: _REDACTED if any(s in k.lower() for s in _SENSITIVE_KEYS) else redact(v)
            for k, v in values.items()
        }
    if isinstance(values, list):
        return [redact(v) for v in values]
    return values


def _to_json(values: Any) -> str | None:
    if values is None:
        return None
    return json.dumps(values, default=str)


def stage_audit(
    request: Request,
    *,
    user_id: str,
    action: str,
    resource: str,
    school_id: str | None = None,
    new_values: Any = None,
) -> PendingAudit:
    resource_id = next(
        (
            str(request.path_params[name])
            for name in _RESOURCE_ID_PARAMS
            if request.path_params.get(name)
        ),
        None,
    )
    pending = PendingAudit(
        user_id=user_id,
        action=action,
        resource=resource,
        resource_id=resource_id,
        school_id=school_id,
        new_values=redact(new_values) if request.method != "GET" else None,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    request.state.audit = pending
    return pending


def annotate_audit(request: Request, **changes: Any) -> None:
    """Fill in what only the handler knows (created id, pre-image, ...)."""
    pending: PendingAudit | None = getattr(request.state, "audit", None)
    if pending is None:
        return
    for name, value in changes.items():
        if name in ("old_values", "new_values"):
            value = redact(value)
        setattr(pending, name, value)


# ── Recorder ────────────────────────────────────────────────────────
class AuditRecorder:
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _persist(self, entry: PendingAudit) -> None:
        try:
            async with self._session_factory() as session:
                session.add(
                    AuditLog(
                        user_id=entry.user_id,
                        action=entry.action,
                        resource=entry.resource,
                        resource_id=entry.resource_id,
                        old_values=_to_json(entry.old_values),
                        new_values=_to_json(entry.new_values),
                        school_id=entry.school_id,
                        ip_address=entry.ip_address,
                        user_agent=entry.user_agent,
                        created_at=entry.created_at,
                    )
                )
                await session.commit()
        except Exception as exc:
            raise AuditPersistFailure(
                f"{entry.action} {entry.resource} by {entry.user_id}"
            ) from exc

    async def record(self, entry: PendingAudit) -> None:
        try:
            await self._persist(entry)
        except AuditPersistFailure:
            logger.exception("Failed to create audit log")


# ── Middleware ──────────────────────────────────────────────────────
class AuditMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        pending: PendingAudit | None = getattr(request.state, "audit", None)
        if (
            pending is not None
            and request.method in MUTATING_METHODS
            and 200 <= response.status_code < 300
        ):
            recorder: AuditRecorder = request.app.state.audit_recorder
            response.background = BackgroundTask(recorder.record, pending)
        return response
