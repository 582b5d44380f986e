"""
Tenant, module-entitlement and permission guards.

Each guard is a pure predicate over the acting user plus at most one keyed
lookup. They run as an explicit ordered chain over an ``AccessContext``;
the first failure raises and ends the request, so later guards (and their
lookups) never run.

    tenant → module entitlement → role permission

super_admin passes every guard.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.core.enums import ModuleName, Permission, Role
from schoolgate.core.exceptions import (
    CrossTenantAccess,
    ModuleNotEnabled,
    PermissionDenied,
    SchoolIdRequired,
)
from schoolgate.models.role_permission import RolePermission
from schoolgate.models.school import SchoolModule

logger = logging.getLogger(__name__)


def _value(v: Any) -> str:
    return str(getattr(v, "value", v))


def is_super_admin(user: Any) -> bool:
    return _value(user.role) == Role.SUPER_ADMIN.value


# ── Predicates ──────────────────────────────────────────────────────
def ensure_school_access(user: Any, school_id: str | None) -> None:
    if is_super_admin(user):
        return
    if not school_id:
        raise SchoolIdRequired()
    if user.school_id != school_id:
        logger.info(
            "Cross-tenant access denied: user %s (school %s) → school %s",
            user.id, user.school_id, school_id,
        )
        raise CrossTenantAccess()


def ensure_module_enabled(user: Any, module: ModuleName | str, enabled: bool) -> None:
    if is_super_admin(user) or enabled:
        return
    raise ModuleNotEnabled(_value(module))


def ensure_permission(
    user: Any, module: ModuleName | str, permission: Permission | str, granted: bool
) -> None:
    if is_super_admin(user) or granted:
        return
    raise PermissionDenied(_value(module), _value(permission))


# ── Lookups ─────────────────────────────────────────────────────────
async def is_module_enabled(db: AsyncSession, school_id: str, module: ModuleName | str) -> bool:
    result = await db.execute(
        select(SchoolModule.enabled).where(
            SchoolModule.school_id == school_id,
            SchoolModule.module == _value(module),
        )
    )
    return bool(result.scalar_one_or_none())


async def is_permission_granted(
    db: AsyncSession,
    role: Role | str,
    module: ModuleName | str,
    permission: Permission | str,
) -> bool:
    result = await db.execute(
        select(RolePermission.id)
        .where(
            RolePermission.role == _value(role),
            RolePermission.module == _value(module),
            RolePermission.permission == _value(permission),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


# ── Chain ───────────────────────────────────────────────────────────
@dataclass
class AccessContext:
    """What a request wants to do, threaded through the guard chain."""

    user: Any
    school_id: str | None = None
    module: ModuleName | None = None
    permission: Permission | None = None


Guard = Callable[[AccessContext, AsyncSession], Awaitable[None]]


async def tenant_guard(ctx: AccessContext, _db: AsyncSession) -> None:
    ensure_school_access(ctx.user, ctx.school_id)


async def module_guard(ctx: AccessContext, db: AsyncSession) -> None:
    if ctx.module is None or is_super_admin(ctx.user):
        return
    enabled = await is_module_enabled(db, ctx.school_id, ctx.module)  # type: ignore[arg-type]
    ensure_module_enabled(ctx.user, ctx.module, enabled)


async def permission_guard(ctx: AccessContext, db: AsyncSession) -> None:
    if ctx.module is None or ctx.permission is None or is_super_admin(ctx.user):
        return
    granted = await is_permission_granted(db, ctx.user.role, ctx.module, ctx.permission)
    ensure_permission(ctx.user, ctx.module, ctx.permission, granted)


ACCESS_CHAIN: tuple[Guard, ...] = (tenant_guard, module_guard, permission_guard)


async def run_guards(
    ctx: AccessContext, db: AsyncSession, guards: Sequence[Guard] = ACCESS_CHAIN
) -> AccessContext:
    for guard in guards:
        await guard(ctx, db)
    return ctx
