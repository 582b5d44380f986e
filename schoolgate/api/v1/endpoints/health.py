"""
Operational endpoints.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.deps import get_db
from schoolgate.core.config import settings
from schoolgate.schemas.common import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — DB and Redis connectivity."""
    result = HealthResponse(db=False, redis=False)

    try:
        await db.execute(select(1))
        result.db = True
    except Exception as e:
        logger.error("Health check DB failure: %s", e)

    try:
        async with aioredis.from_url(settings.REDIS_URL) as r:
            await r.ping()
        result.redis = True
    except Exception as e:
        logger.error("Health check Redis failure: %s", e)

    return result
