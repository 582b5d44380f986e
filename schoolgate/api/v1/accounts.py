"""
User-account helpers shared by the student, teacher and super-admin routers.
"""

from __future__ import annotations

import secrets

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.core.enums import Role, UserStatus
from schoolgate.core.security import get_password_hash
from schoolgate.models.user import User


async def ensure_email_free(db: AsyncSession, email: str) -> None:
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )


def build_user(
    *,
    email: str,
    first_name: str,
    last_name: str,
    role: Role,
    school_id: str | None,
    password: str | None = None,
    phone: str | None = None,
    user_status: UserStatus | None = None,
) -> User:
    """Make a ``User`` row (not yet added to the session).

    Without a password the account is created ``pending`` with an unusable
    random hash; it becomes usable through the invite flow.
    """
    if password is None:
        password_hash = get_password_hash(secrets.token_urlsafe(32))
        user_status = user_status or UserStatus.PENDING
    else:
        password_hash = get_password_hash(password)
        user_status = user_status or UserStatus.ACTIVE

    return User(
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        role=role.value,
        school_id=school_id,
        status=user_status.value,
    )
