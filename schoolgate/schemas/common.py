"""Small response shapes shared across routers."""

from __future__ import annotations

from schoolgate.schemas.base import CamelModel


class DeleteResponse(CamelModel):
    success: bool
    message: str


class HealthResponse(CamelModel):
    db: bool
    redis: bool
