"""
Audit-log listing.

super_admin reads the whole platform (optionally one school). Everyone else
reads only their own school, behind the ``audit_system`` module and its
``read`` permission.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.deps import get_current_active_user, get_db
from schoolgate.core.enums import ModuleName, Permission
from schoolgate.core.guards import AccessContext, is_super_admin, run_guards
from schoolgate.models.audit_log import AuditLog
from schoolgate.models.user import User
from schoolgate.schemas.audit import AuditLogRead

router = APIRouter(tags=["audit"])


@router.get("/audit-logs", response_model=list[AuditLogRead])
async def list_audit_logs(
    limit: int = Query(100, ge=1, le=1000),
    school_id: Optional[str] = Query(None, alias="schoolId"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> list[AuditLog]:
    if not is_super_admin(current_user):
        await run_guards(
            AccessContext(
                user=current_user,
                school_id=school_id or current_user.school_id,
                module=ModuleName.AUDIT_SYSTEM,
                permission=Permission.READ,
            ),
            db,
        )
        school_id = current_user.school_id

    query = select(AuditLog)
    if school_id:
        query = query.where(AuditLog.school_id == school_id)
    result = await db.execute(query.order_by(AuditLog.created_at.desc()).limit(limit))
    return list(result.scalars().all())
