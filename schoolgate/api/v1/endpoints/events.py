"""
School events (``event_management``). Deletes are soft.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.deps import audited, get_db, require_access
from schoolgate.core.audit import annotate_audit
from schoolgate.core.enums import ModuleName, Permission
from schoolgate.core.guards import AccessContext
from schoolgate.models.event import Event
from schoolgate.schemas.common import DeleteResponse
from schoolgate.schemas.event import EventCreate, EventRead, EventUpdate

router = APIRouter(prefix="/schools/{school_id}/events", tags=["events"])
logger = logging.getLogger(__name__)

MODULE = ModuleName.EVENT_MANAGEMENT


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _snapshot(event: Event) -> dict:
    return EventRead.model_validate(event).model_dump(mode="json", by_alias=True)


async def _get_event(db: AsyncSession, school_id: str, event_id: str) -> Event:
    result = await db.execute(
        select(Event).where(Event.id == event_id, Event.school_id == school_id)
    )
    event = result.scalar_one_or_none()
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("", response_model=list[EventRead])
async def list_events(
    school_id: str,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.READ)),
    db: AsyncSession = Depends(get_db),
) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.school_id == school_id, Event.status == "active")
        .order_by(Event.start_date)
    )
    return list(result.scalars().all())


@router.post(
    "",
    response_model=EventRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("create", "event"))],
)
async def create_event(
    school_id: str,
    body: EventCreate,
    request: Request,
    ctx: AccessContext = Depends(require_access(MODULE, Permission.CREATE)),
    db: AsyncSession = Depends(get_db),
) -> Event:
    event = Event(school_id=school_id, created_by=ctx.user.id, **body.model_dump())
    db.add(event)
    await db.commit()
    await db.refresh(event)

    annotate_audit(request, resource_id=event.id)
    return event


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    school_id: str,
    event_id: str,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.READ)),
    db: AsyncSession = Depends(get_db),
) -> Event:
    return await _get_event(db, school_id, event_id)


@router.put(
    "/{event_id}",
    response_model=EventRead,
    dependencies=[Depends(audited("update", "event"))],
)
async def update_event(
    school_id: str,
    event_id: str,
    body: EventUpdate,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.UPDATE)),
    db: AsyncSession = Depends(get_db),
) -> Event:
    event = await _get_event(db, school_id, event_id)
    annotate_audit(request, old_values=_snapshot(event))

    changes = body.model_dump(exclude_unset=True)
    start = _as_utc(changes.get("start_date", event.start_date))
    end = _as_utc(changes.get("end_date", event.end_date))
    if start is not None and end is not None and end < start:
        raise HTTPException(status_code=400, detail="endDate must not be before startDate")
    for field, value in changes.items():
        setattr(event, field, value)

    await db.commit()
    await db.refresh(event)
    return event


@router.delete(
    "/{event_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(audited("delete", "event"))],
)
async def delete_event(
    school_id: str,
    event_id: str,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.DELETE)),
    db: AsyncSession = Depends(get_db),
) -> DeleteResponse:
    event = await _get_event(db, school_id, event_id)
    annotate_audit(request, old_values=_snapshot(event))

    event.status = "cancelled"
    await db.commit()
    logger.info("Event %s cancelled", event_id)
    return DeleteResponse(success=True, message="Event deleted successfully")
