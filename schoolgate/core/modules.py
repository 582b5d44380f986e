"""
Per-school module entitlements: read and replace.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.core.enums import ModuleName
from schoolgate.models.school import SchoolModule

logger = logging.getLogger(__name__)


async def enabled_modules(db: AsyncSession, school_id: str) -> list[str]:
    result = await db.execute(
        select(SchoolModule.module)
        .where(SchoolModule.school_id == school_id, SchoolModule.enabled.is_(True))
        .order_by(SchoolModule.module)
    )
    return list(result.scalars().all())


async def replace_modules(
    db: AsyncSession, school_id: str, modules: Iterable[ModuleName | str]
) -> list[str]:
    """Clear the school's entitlements and insert ``modules`` (deduplicated).

    Does not commit; the caller owns the transaction.
    """
    names = sorted({getattr(m, "value", m) for m in modules})
    await db.execute(delete(SchoolModule).where(SchoolModule.school_id == school_id))
    db.add_all(SchoolModule(school_id=school_id, module=name, enabled=True) for name in names)
    logger.info("School %s modules set to %s", school_id, ", ".join(names) or "<none>")
    return names
