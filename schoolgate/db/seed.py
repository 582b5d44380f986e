"""
First-run seeding: the role-permission matrix and the platform super admin.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.core.enums import Role, UserStatus
from schoolgate.core.permissions import iter_grants
from schoolgate.core.security import get_password_hash
from schoolgate.models.role_permission import RolePermission
from schoolgate.models.user import User

logger = logging.getLogger(__name__)


async def seed_role_permissions(session: AsyncSession) -> int:
    """Insert the default matrix when the table is empty. Returns rows added."""
    existing = await session.scalar(select(func.count()).select_from(RolePermission))
    if existing:
        return 0

    rows = [
        RolePermission(role=role.value, module=module.value, permission=permission.value)
        for role, module, permission in iter_grants()
    ]
    session.add_all(rows)
    await session.commit()
    logger.info("Seeded %d role permissions", len(rows))
    return len(rows)


async def seed_super_admin(session: AsyncSession, email: str, password: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        return None

    admin = User(
        email=email,
        password_hash=get_password_hash(password),
        first_name="Platform",
        last_name="Administrator",
        role=Role.SUPER_ADMIN.value,
        school_id=None,
        status=UserStatus.ACTIVE.value,
    )
    session.add(admin)
    await session.commit()
    logger.info("Default super admin created: %s (password: <redacted>)", email)
    return admin
