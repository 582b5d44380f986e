"""
Student CRUD within one school.

Every route runs the full access chain on ``student_management``, except
the per-student attendance summary, which reads ``attendance_management``.
Mutations are audited. Deletes are soft (status → inactive).
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import Counter
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.accounts import build_user, ensure_email_free
from schoolgate.api.v1.deps import audited, get_db, require_access
from schoolgate.core.audit import annotate_audit
from schoolgate.core.enums import ModuleName, Permission, Role, UserStatus
from schoolgate.core.guards import AccessContext
from schoolgate.models.classroom import Attendance, SchoolClass
from schoolgate.models.people import Student
from schoolgate.schemas.classroom import AttendanceRead, AttendanceSummary, MonthlyAttendance
from schoolgate.schemas.common import DeleteResponse
from schoolgate.schemas.people import (
    StudentCreate,
    StudentCreated,
    StudentRead,
    StudentUpdate,
)
from schoolgate.schemas.user import UserRead

router = APIRouter(prefix="/schools/{school_id}/students", tags=["students"])
logger = logging.getLogger(__name__)

MODULE = ModuleName.STUDENT_MANAGEMENT


def _snapshot(student: Student) -> dict:
    return StudentRead.model_validate(student).model_dump(mode="json", by_alias=True)


async def _get_student(db: AsyncSession, school_id: str, student_id: str) -> Student:
    result = await db.execute(
        select(Student).where(Student.id == student_id, Student.school_id == school_id)
    )
    student = result.scalar_one_or_none()
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


async def _check_class(db: AsyncSession, school_id: str, class_id: str | None) -> None:
    if class_id is None:
        return
    result = await db.execute(
        select(SchoolClass.id).where(
            SchoolClass.id == class_id, SchoolClass.school_id == school_id
        )
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=400, detail="Class does not belong to this school")


@router.get("", response_model=list[StudentRead])
async def list_students(
    school_id: str,
    class_id: Optional[str] = Query(None, alias="classId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.READ)),
    db: AsyncSession = Depends(get_db),
) -> list[Student]:
    query = select(Student).where(Student.school_id == school_id)
    if class_id:
        query = query.where(Student.class_id == class_id)
    if status_filter:
        query = query.where(Student.status == status_filter)
    result = await db.execute(
        query.order_by(Student.admission_number).limit(limit).offset(offset)
    )
    return list(result.scalars().all())


@router.post(
    "",
    response_model=StudentCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("create", "student"))],
)
async def create_student(
    school_id: str,
    body: StudentCreate,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.CREATE)),
    db: AsyncSession = Depends(get_db),
) -> StudentCreated:
    """Create a student-role user and its profile in one transaction."""
    await ensure_email_free(db, body.user_data.email)
    await _check_class(db, school_id, body.student_data.class_id)

    user = build_user(
        email=body.user_data.email,
        first_name=body.user_data.first_name,
        last_name=body.user_data.last_name,
        phone=body.user_data.phone,
        password=body.user_data.password,
        role=Role.STUDENT,
        school_id=school_id,
    )
    db.add(user)
    await db.flush()

    student = Student(
        user_id=user.id,
        school_id=school_id,
        **body.student_data.model_dump(),
    )
    db.add(student)
    await db.commit()
    await db.refresh(user)
    await db.refresh(student)

    annotate_audit(request, resource_id=student.id)
    logger.info("Student %s created in school %s", student.admission_number, school_id)
    return StudentCreated(
        user=UserRead.model_validate(user),
        student=StudentRead.model_validate(student),
    )


@router.get("/{student_id}", response_model=StudentRead)
async def get_student(
    school_id: str,
    student_id: str,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.READ)),
    db: AsyncSession = Depends(get_db),
) -> Student:
    return await _get_student(db, school_id, student_id)


@router.put(
    "/{student_id}",
    response_model=StudentRead,
    dependencies=[Depends(audited("update", "student"))],
)
async def update_student(
    school_id: str,
    student_id: str,
    body: StudentUpdate,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.UPDATE)),
    db: AsyncSession = Depends(get_db),
) -> Student:
    student = await _get_student(db, school_id, student_id)
    annotate_audit(request, old_values=_snapshot(student))

    changes = body.model_dump(exclude_unset=True)
    if "class_id" in changes:
        await _check_class(db, school_id, changes["class_id"])
    for field, value in changes.items():
        setattr(student, field, value)

    await db.commit()
    await db.refresh(student)
    return student


@router.delete(
    "/{student_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(audited("delete", "student"))],
)
async def delete_student(
    school_id: str,
    student_id: str,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.DELETE)),
    db: AsyncSession = Depends(get_db),
) -> DeleteResponse:
    student = await _get_student(db, school_id, student_id)
    annotate_audit(request, old_values=_snapshot(student))

    student.status = UserStatus.INACTIVE.value
    await db.commit()
    logger.info("Student %s deactivated", student_id)
    return DeleteResponse(success=True, message="Student deleted successfully")


def _present_share(statuses: list[str]) -> float:
    if not statuses:
        return 0.0
    return round(100 * statuses.count("present") / len(statuses), 1)


def _last_months(today: dt.date, count: int) -> list[str]:
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(f"{year:04d}-{month:02d}")
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)
    return months[::-1]


@router.get("/{student_id}/attendance", response_model=AttendanceSummary)
async def student_attendance(
    school_id: str,
    student_id: str,
    _ctx: AccessContext = Depends(
        require_access(ModuleName.ATTENDANCE_MANAGEMENT, Permission.READ)
    ),
    db: AsyncSession = Depends(get_db),
) -> AttendanceSummary:
    """Totals, present percentage, the last five months and the ten latest marks."""
    await _get_student(db, school_id, student_id)
    result = await db.execute(
        select(Attendance)
        .where(Attendance.student_id == student_id, Attendance.school_id == school_id)
        .order_by(Attendance.date.desc())
    )
    records = list(result.scalars().all())

    counts = Counter(r.status for r in records)
    statuses = [r.status for r in records]
    monthly = [
        MonthlyAttendance(
            month=month,
            percentage=_present_share([r.status for r in records if r.date.startswith(month)]),
        )
        for month in _last_months(dt.date.today(), 5)
    ]
    return AttendanceSummary(
        student_id=student_id,
        present=counts["present"],
        absent=counts["absent"],
        late=counts["late"],
        total=len(records),
        percentage=_present_share(statuses),
        monthly=monthly,
        recent=[AttendanceRead.model_validate(r) for r in records[:10]],
    )
