"""
Teacher listing and onboarding within one school (``teacher_management``).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.accounts import build_user, ensure_email_free
from schoolgate.api.v1.deps import audited, get_db, require_access
from schoolgate.core.audit import annotate_audit
from schoolgate.core.enums import ModuleName, Permission, Role
from schoolgate.core.guards import AccessContext
from schoolgate.models.people import Teacher
from schoolgate.schemas.people import TeacherCreate, TeacherCreated, TeacherRead
from schoolgate.schemas.user import UserRead

router = APIRouter(prefix="/schools/{school_id}/teachers", tags=["teachers"])
logger = logging.getLogger(__name__)

MODULE = ModuleName.TEACHER_MANAGEMENT


@router.get("", response_model=list[TeacherRead])
async def list_teachers(
    school_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.READ)),
    db: AsyncSession = Depends(get_db),
) -> list[Teacher]:
    result = await db.execute(
        select(Teacher)
        .where(Teacher.school_id == school_id)
        .order_by(Teacher.employee_id)
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


@router.post(
    "",
    response_model=TeacherCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("create", "teacher"))],
)
async def create_teacher(
    school_id: str,
    body: TeacherCreate,
    request: Request,
    _ctx: AccessContext = Depends(require_access(MODULE, Permission.CREATE)),
    db: AsyncSession = Depends(get_db),
) -> TeacherCreated:
    await ensure_email_free(db, body.user_data.email)

    user = build_user(
        email=body.user_data.email,
        first_name=body.user_data.first_name,
        last_name=body.user_data.last_name,
        phone=body.user_data.phone,
        password=body.user_data.password,
        role=Role.TEACHER,
        school_id=school_id,
    )
    db.add(user)
    await db.flush()

    teacher = Teacher(user_id=user.id, school_id=school_id, **body.teacher_data.model_dump())
    db.add(teacher)
    await db.commit()
    await db.refresh(user)
    await db.refresh(teacher)

    annotate_audit(request, resource_id=teacher.id)
    logger.info("Teacher %s created in school %s", teacher.employee_id, school_id)
    return TeacherCreated(
        user=UserRead.model_validate(user),
        teacher=TeacherRead.model_validate(teacher),
    )
