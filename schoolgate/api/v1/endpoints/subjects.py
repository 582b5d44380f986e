"""
Subjects and class-subject assignments.

Both sit behind ``academics_management``. Every referenced class, subject
and teacher must belong to the school in the path.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.deps import audited, get_db, require_access
from schoolgate.core.audit import annotate_audit
from schoolgate.core.enums import ModuleName, Permission
from schoolgate.core.guards import AccessContext
from schoolgate.models.classroom import SchoolClass
from schoolgate.models.people import Teacher
from schoolgate.models.subject import ClassSubject, Subject
from schoolgate.schemas.common import DeleteResponse
from schoolgate.schemas.subject import (
    ClassSubjectAssign,
    ClassSubjectRead,
    SubjectCreate,
    SubjectRead,
    SubjectUpdate,
)

router = APIRouter(prefix="/schools/{school_id}", tags=["subjects"])
logger = logging.getLogger(__name__)

MODULE = ModuleName.ACADEMICS_MANAGEMENT


def _snapshot(subject: Subject) -> dict:
    return SubjectRead.model_validate(subject).model_dump(mode="json", by_alias=True)


async def _get_subject(db: AsyncSession, school_id: str, subject_id: str) -> Subject:
    result = await db.execute(
        select(Subject).where(Subject.id == subject_id, Subject.school_id == school_id)
    )
    subject = result.scalar_one_or_none()
    if subject is None:
        raise HTTPException(status_code=404, detail="Subject not found")
    return subject


async def _ensure_class(db: AsyncSession, school_id: str, class_id: str) -> None:
    result = await db.execute(
        select(SchoolClass.id).where(
            SchoolClass.id == class_id, SchoolClass.school_id == school_id
        )
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="Class not found")


# ── Subjects ────────────────────────────────────────────────────────
@router.get("/subjects", response_model=list[SubjectRead])
async def list_subjects(
    school_id: str,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.READ)),
    db: AsyncSession = Depends(get_db),
) -> list[Subject]:
    result = await db.execute(
        select(Subject).where(Subject.school_id == school_id).order_by(Subject.code)
    )
    return list(result.scalars().all())


@router.post(
    "/subjects",
    response_model=SubjectRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("create", "subject"))],
)
async def create_subject(
    school_id: str,
    body: SubjectCreate,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.CREATE)),
    db: AsyncSession = Depends(get_db),
) -> Subject:
    """Add a subject; codes are unique within a school (409 otherwise)."""
    subject = Subject(school_id=school_id, **body.model_dump())
    db.add(subject)
    await db.commit()
    await db.refresh(subject)

    annotate_audit(request, resource_id=subject.id)
    logger.info("Subject %s created in school %s", subject.code, school_id)
    return subject


@router.put(
    "/subjects/{subject_id}",
    response_model=SubjectRead,
    dependencies=[Depends(audited("update", "subject"))],
)
async def update_subject(
    school_id: str,
    subject_id: str,
    body: SubjectUpdate,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.UPDATE)),
    db: AsyncSession = Depends(get_db),
) -> Subject:
    subject = await _get_subject(db, school_id, subject_id)
    annotate_audit(request, old_values=_snapshot(subject))

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(subject, field, value)
    await db.commit()
    await db.refresh(subject)
    return subject


@router.delete(
    "/subjects/{subject_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(audited("delete", "subject"))],
)
async def delete_subject(
    school_id: str,
    subject_id: str,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.DELETE)),
    db: AsyncSession = Depends(get_db),
) -> DeleteResponse:
    """Remove a subject together with its class assignments."""
    subject = await _get_subject(db, school_id, subject_id)
    annotate_audit(request, old_values=_snapshot(subject))

    await db.execute(delete(ClassSubject).where(ClassSubject.subject_id == subject.id))
    await db.delete(subject)
    await db.commit()
    logger.info("Subject %s deleted from school %s", subject_id, school_id)
    return DeleteResponse(success=True, message="Subject deleted successfully")


# ── Class assignments ───────────────────────────────────────────────
@router.get("/classes/{class_id}/subjects", response_model=list[ClassSubjectRead])
async def list_class_subjects(
    school_id: str,
    class_id: str,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.READ)),
    db: AsyncSession = Depends(get_db),
) -> list[ClassSubject]:
    await _ensure_class(db, school_id, class_id)
    result = await db.execute(
        select(ClassSubject)
        .where(ClassSubject.class_id == class_id)
        .order_by(ClassSubject.created_at)
    )
    return list(result.scalars().all())


@router.post(
    "/classes/{class_id}/subjects",
    response_model=ClassSubjectRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("assign", "class_subject"))],
)
async def assign_subject(
    school_id: str,
    class_id: str,
    body: ClassSubjectAssign,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.CREATE)),
    db: AsyncSession = Depends(get_db),
) -> ClassSubject:
    await _ensure_class(db, school_id, class_id)
    await _get_subject(db, school_id, body.subject_id)
    if body.teacher_id is not None:
        result = await db.execute(
            select(Teacher.id).where(
                Teacher.id == body.teacher_id, Teacher.school_id == school_id
            )
        )
        if result.scalar_one_or_none() is None:
            raise HTTPException(status_code=400, detail="Teacher does not belong to this school")

    assignment = ClassSubject(class_id=class_id, **body.model_dump())
    db.add(assignment)
    await db.commit()
    await db.refresh(assignment)

    annotate_audit(request, resource_id=assignment.id)
    return assignment


@router.delete(
    "/classes/{class_id}/subjects/{assignment_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(audited("unassign", "class_subject"))],
)
async def unassign_subject(
    school_id: str,
    class_id: str,
    assignment_id: str,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.DELETE)),
    db: AsyncSession = Depends(get_db),
) -> DeleteResponse:
    await _ensure_class(db, school_id, class_id)
    result = await db.execute(
        select(ClassSubject).where(
            ClassSubject.id == assignment_id, ClassSubject.class_id == class_id
        )
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")

    annotate_audit(
        request,
        resource_id=assignment.id,
        old_values={"subjectId": assignment.subject_id, "teacherId": assignment.teacher_id},
    )
    await db.delete(assignment)
    await db.commit()
    return DeleteResponse(success=True, message="Subject unassigned from class")
