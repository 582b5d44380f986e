"""
Platform administration — schools, module entitlements, principal invites
and cross-tenant user management. super_admin only.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.accounts import build_user, ensure_email_free
from schoolgate.api.v1.deps import audited, get_db, get_token_service, require_super_admin
from schoolgate.core.audit import annotate_audit, stage_audit
from schoolgate.core.config import settings
from schoolgate.core.enums import Role, UserStatus
from schoolgate.core.mailer import send_mail
from schoolgate.core.modules import enabled_modules, replace_modules
from schoolgate.core.security import TokenService, get_password_hash
from schoolgate.models.school import School
from schoolgate.models.user import User
from schoolgate.schemas.school import (
    SchoolCreate,
    SchoolModulesRead,
    SchoolModulesUpdate,
    SchoolRead,
)
from schoolgate.schemas.user import (
    InviteRequest,
    InviteResponse,
    UserCreate,
    UserRead,
    UserStatusUpdate,
    UserUpdate,
)

router = APIRouter(
    prefix="/super-admin",
    tags=["super-admin"],
    dependencies=[Depends(require_super_admin)],
)
logger = logging.getLogger(__name__)


async def _get_school(db: AsyncSession, school_id: str) -> School:
    result = await db.execute(select(School).where(School.id == school_id))
    school = result.scalar_one_or_none()
    if school is None:
        raise HTTPException(status_code=404, detail="School not found")
    return school


async def _get_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# ── Schools ─────────────────────────────────────────────────────────
@router.get("/schools", response_model=list[SchoolRead])
async def list_schools(db: AsyncSession = Depends(get_db)) -> list[School]:
    result = await db.execute(select(School).order_by(School.name))
    return list(result.scalars().all())


@router.post(
    "/schools",
    response_model=SchoolRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("create", "school"))],
)
async def create_school(
    body: SchoolCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> School:
    """Register a school and enable its starting modules.

    Without an explicit ``modules`` list the school gets
    ``DEFAULT_SCHOOL_MODULES``.
    """
    result = await db.execute(select(School.id).where(School.code == body.code))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="School code already exists",
        )

    school = School(**body.model_dump(exclude={"modules"}))
    db.add(school)
    await db.flush()

    modules = body.modules if body.modules is not None else settings.DEFAULT_SCHOOL_MODULES
    await replace_modules(db, school.id, modules)
    await db.commit()
    await db.refresh(school)

    annotate_audit(request, resource_id=school.id, school_id=school.id)
    logger.info("School %s (%s) created", school.name, school.code)
    return school


@router.get("/schools/{school_id}", response_model=SchoolRead)
async def get_school(school_id: str, db: AsyncSession = Depends(get_db)) -> School:
    return await _get_school(db, school_id)


# ── Module entitlements ─────────────────────────────────────────────
@router.get("/schools/{school_id}/modules", response_model=SchoolModulesRead)
async def get_school_modules(
    school_id: str, db: AsyncSession = Depends(get_db)
) -> SchoolModulesRead:
    await _get_school(db, school_id)
    return SchoolModulesRead(school_id=school_id, modules=await enabled_modules(db, school_id))


@router.put(
    "/schools/{school_id}/modules",
    response_model=SchoolModulesRead,
    dependencies=[Depends(audited("update_modules", "school"))],
)
async def update_school_modules(
    school_id: str,
    body: SchoolModulesUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> SchoolModulesRead:
    """Replace the school's entitlements with exactly ``modules``."""
    await _get_school(db, school_id)
    annotate_audit(request, old_values={"modules": await enabled_modules(db, school_id)})

    modules = await replace_modules(db, school_id, body.modules)
    await db.commit()
    return SchoolModulesRead(school_id=school_id, modules=modules)


# ── Principal invite ────────────────────────────────────────────────
@router.post(
    "/schools/{school_id}/invite",
    response_model=InviteResponse,
    dependencies=[Depends(audited("invite", "user"))],
)
async def invite_school_admin(
    school_id: str,
    body: InviteRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> InviteResponse:
    """Create (or reuse) a pending school_admin and mail them a set-password link.

    A mail failure is reported as ``inviteEmailSent: false``; the account
    and token stay valid and the invite can be re-sent.
    """
    school = await _get_school(db, school_id)

    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()
    # Only an earlier, still-pending invite for this same school may be reused
    if user is not None and not (
        user.status == UserStatus.PENDING.value
        and user.role == Role.SCHOOL_ADMIN.value
        and user.school_id == school_id
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists",
        )

    if user is None:
        user = build_user(
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
            role=Role.SCHOOL_ADMIN,
            school_id=school_id,
        )
        db.add(user)
    else:
        user.first_name = body.first_name
        user.last_name = body.last_name
    await db.commit()
    await db.refresh(user)

    token = tokens.issue_invite(user.id, user.email, user.role, school_id=school_id)
    link = f"{settings.APP_BASE_URL.rstrip('/')}/invite/set-password?token={token}"
    try:
        sent = await send_mail(
            to=user.email,
            subject=f"You're invited to manage {school.name}",
            text=(
                f"Hello {user.first_name},\n\n"
                f"You have been invited as the administrator of {school.name}.\n"
                f"Set your password here: {link}\n\n"
                f"This link expires in {settings.INVITE_TOKEN_EXPIRE_DAYS} days."
            ),
        )
    except Exception:
        logger.exception("Invite email to %s failed", user.email)
        sent = False

    annotate_audit(request, resource_id=user.id)
    return InviteResponse(user_id=user.id, email=user.email, invite_email_sent=sent)


# ── Users ───────────────────────────────────────────────────────────
@router.get("/users", response_model=list[UserRead])
async def list_users(
    school_id: Optional[str] = Query(None, alias="schoolId"),
    role: Optional[Role] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[User]:
    query = select(User)
    if school_id:
        query = query.where(User.school_id == school_id)
    if role is not None:
        query = query.where(User.role == role.value)
    result = await db.execute(query.order_by(User.email).limit(limit).offset(offset))
    return list(result.scalars().all())


@router.post(
    "/users",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audited("create", "user"))],
)
async def create_user(
    body: UserCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    await ensure_email_free(db, body.email)
    if body.school_id is not None:
        await _get_school(db, body.school_id)

    user = build_user(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        password=body.password,
        role=Role(body.role),
        school_id=body.school_id,
        user_status=UserStatus(body.status),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    annotate_audit(request, resource_id=user.id)
    logger.info("User %s (%s) created", user.email, user.role)
    return user


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)) -> User:
    return await _get_user(db, user_id)


@router.put(
    "/users/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(audited("update", "user"))],
)
async def update_user(
    user_id: str,
    body: UserUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await _get_user(db, user_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("email") not in (None, user.email):
        await ensure_email_free(db, changes["email"])
    annotate_audit(
        request,
        school_id=user.school_id,
        old_values=UserRead.model_validate(user).model_dump(mode="json", by_alias=True),
    )

    password = changes.pop("password", None)
    if password is not None:
        user.password_hash = get_password_hash(password)
    for field, value in changes.items():
        if value is not None:
            setattr(user, field, value)
    await db.commit()
    await db.refresh(user)

    annotate_audit(request, resource_id=user.id)
    return user


@router.post("/users/{user_id}/status", response_model=UserRead)
async def change_user_status(
    user_id: str,
    body: UserStatusUpdate,
    request: Request,
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await _get_user(db, user_id)
    if user.id == current_user.id and body.status != UserStatus.ACTIVE.value:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    previous = user.status
    user.status = body.status
    await db.commit()
    await db.refresh(user)

    stage_audit(
        request,
        user_id=current_user.id,
        action="activate" if body.status == UserStatus.ACTIVE.value else "deactivate",
        resource="user",
        school_id=user.school_id,
        new_values={"status": body.status},
    )
    annotate_audit(request, old_values={"status": previous})
    return user
