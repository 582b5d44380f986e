"""
Classes and per-class attendance.

Class routes check ``class_management``; the attendance sub-resource checks
``attendance_management`` so that teachers can mark attendance without
class-management rights.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.deps import audited, get_db, require_access
from schoolgate.core.audit import annotate_audit
from schoolgate.core.enums import ModuleName, Permission
from schoolgate.core.guards import AccessContext
from schoolgate.models.classroom import Attendance, SchoolClass
from schoolgate.models.people import Student
from schoolgate.schemas.classroom import (
    AttendanceMark,
    AttendanceRead,
    ClassCreate,
    ClassRead,
)

router = APIRouter(prefix="/schools/{school_id}/classes", tags=["classes"])
logger = logging.getLogger(__name__)


async def _get_class(db: AsyncSession, school_id: str, class_id: str) -> SchoolClass:
    result = await db.execute(
        select(SchoolClass).where(
            SchoolClass.id == class_id, SchoolClass.school_id == school_id
        )
    )
    school_class = result.scalar_one_or_none()
    if school_class is None:
        raise HTTPException(status_code=404, detail="Class not found")
    return school_class


# ── Classes ─────────────────────────────────────────────────────────
@router.get("", response_model=list[ClassRead])
async def list_classes(
    school_id: str,
    academic_year: Optional[str] = Query(None, alias="academicYear"),
    _ctx: AccessContext = Depends(
        require_access(ModuleName.CLASS_MANAGEMENT, Permission.READ)
    ),
    db: AsyncSession = Depends(get_db),
) -> list[SchoolClass]:
    query = select(SchoolClass).where(SchoolClass.school_id == school_id)
    if academic_year:
        query = query.where(SchoolClass.academic_year == academic_year)
    result = await db.execute(query.order_by(SchoolClass.grade, SchoolClass.section))
    return list(result.scalars().all())


@router.post(
    "",
    response_model=ClassRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("create", "class"))],
)
async def create_class(
    school_id: str,
    body: ClassCreate,
    request: Request,
    _ctx: AccessContext = Depends(
        require_access(ModuleName.CLASS_MANAGEMENT, Permission.CREATE)
    ),
    db: AsyncSession = Depends(get_db),
) -> SchoolClass:
    school_class = SchoolClass(school_id=school_id, **body.model_dump())
    db.add(school_class)
    await db.commit()
    await db.refresh(school_class)

    annotate_audit(request, resource_id=school_class.id)
    logger.info("Class %s (grade %s) created in school %s", school_class.name, school_class.grade, school_id)
    return school_class


@router.get("/{class_id}", response_model=ClassRead)
async def get_class(
    school_id: str,
    class_id: str,
    _ctx: AccessContext = Depends(
        require_access(ModuleName.CLASS_MANAGEMENT, Permission.READ)
    ),
    db: AsyncSession = Depends(get_db),
) -> SchoolClass:
    return await _get_class(db, school_id, class_id)


# ── Attendance ──────────────────────────────────────────────────────
@router.get("/{class_id}/attendance", response_model=list[AttendanceRead])
async def list_attendance(
    school_id: str,
    class_id: str,
    date: Optional[dt.date] = Query(None),
    _ctx: AccessContext = Depends(
        require_access(ModuleName.ATTENDANCE_MANAGEMENT, Permission.READ)
    ),
    db: AsyncSession = Depends(get_db),
) -> list[Attendance]:
    await _get_class(db, school_id, class_id)
    query = select(Attendance).where(
        Attendance.school_id == school_id, Attendance.class_id == class_id
    )
    if date is not None:
        query = query.where(Attendance.date == date.isoformat())
    result = await db.execute(query.order_by(Attendance.date.desc()))
    return list(result.scalars().all())


@router.post(
    "/{class_id}/attendance",
    response_model=AttendanceRead,
    dependencies=[Depends(audited("mark", "attendance"))],
)
async def mark_attendance(
    school_id: str,
    class_id: str,
    body: AttendanceMark,
    request: Request,
    ctx: AccessContext = Depends(
        require_access(ModuleName.ATTENDANCE_MANAGEMENT, Permission.CREATE)
    ),
    db: AsyncSession = Depends(get_db),
) -> Attendance:
    """Mark one student for one day; re-marking the same day overwrites.

    A concurrent first mark for the same day loses on the unique
    constraint and surfaces as 409.
    """
    await _get_class(db, school_id, class_id)

    result = await db.execute(
        select(Student.class_id).where(
            Student.id == body.student_id, Student.school_id == school_id
        )
    )
    enrolled_in = result.one_or_none()
    if enrolled_in is None:
        raise HTTPException(status_code=404, detail="Student not found")
    if enrolled_in.class_id != class_id:
        raise HTTPException(status_code=400, detail="Student is not enrolled in this class")

    day = body.date.isoformat()
    result = await db.execute(
        select(Attendance).where(
            Attendance.student_id == body.student_id,
            Attendance.class_id == class_id,
            Attendance.date == day,
        )
    )
    record = result.scalar_one_or_none()
    if record is None:
        record = Attendance(
            school_id=school_id,
            student_id=body.student_id,
            class_id=class_id,
            date=day,
        )
        db.add(record)
    else:
        annotate_audit(request, old_values={"status": record.status, "remarks": record.remarks})

    record.status = body.status
    record.remarks = body.remarks
    record.marked_by = ctx.user.id
    await db.commit()
    await db.refresh(record)

    annotate_audit(request, resource_id=record.id)
    return record
