"""
Tenant-side view of a school's enabled modules.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.deps import get_db, require_access
from schoolgate.core.guards import AccessContext
from schoolgate.core.modules import enabled_modules
from schoolgate.models.school import School
from schoolgate.schemas.school import SchoolModulesRead

router = APIRouter(prefix="/schools/{school_id}", tags=["schools"])


@router.get("/modules", response_model=SchoolModulesRead)
async def read_school_modules(
    school_id: str,
    _ctx: AccessContext = Depends(require_access()),
    db: AsyncSession = Depends(get_db),
) -> SchoolModulesRead:
    """Modules enabled for the school. Only the tenant guard applies."""
    result = await db.execute(select(School.id).where(School.id == school_id))
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="School not found")
    return SchoolModulesRead(
        school_id=school_id, modules=await enabled_modules(db, school_id)
    )
