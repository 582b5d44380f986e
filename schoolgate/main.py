"""
SchoolGate — application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schoolgate.api.v1.api import api_router
from schoolgate.api.v1.endpoints.auth import limiter
from schoolgate.core.audit import AuditMiddleware, AuditRecorder
from schoolgate.core.config import settings
from schoolgate.core.exceptions import register_exception_handlers
from schoolgate.core.security import TokenConfig, TokenService
from schoolgate.db.base import Base
from schoolgate.db.seed import seed_role_permissions, seed_super_admin
from schoolgate.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from schoolgate.models.audit_log import AuditLog  # noqa: F401
from schoolgate.models.classroom import Attendance, SchoolClass  # noqa: F401
from schoolgate.models.event import Event  # noqa: F401
from schoolgate.models.people import Student, Teacher  # noqa: F401
from schoolgate.models.role_permission import RolePermission  # noqa: F401
from schoolgate.models.school import School, SchoolModule  # noqa: F401
from schoolgate.models.subject import ClassSubject, Subject  # noqa: F401
from schoolgate.models.user import User  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    # Seed the permission matrix and the platform super admin on first run
    async with async_session_factory() as session:
        await seed_role_permissions(session)
        await seed_super_admin(
            session,
            settings.FIRST_SUPER_ADMIN_EMAIL,
            settings.FIRST_SUPER_ADMIN_PASSWORD,
        )

    logger.info("🚀 SchoolGate v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Multi-tenant school management API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Shared services, swappable in tests
    application.state.limiter = limiter
    application.state.token_service = TokenService(TokenConfig.from_settings())
    application.state.audit_recorder = AuditRecorder(async_session_factory)

    # Audit runs inside CORS so preflight requests never reach it
    application.add_middleware(AuditMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
