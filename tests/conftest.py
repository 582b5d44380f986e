"""
Shared test fixtures for the SchoolGate test suite.

Every test gets its own in-memory SQLite database (aiosqlite + StaticPool)
with the default permission matrix seeded. The app's ``get_db`` dependency,
token service and audit recorder are pointed at it.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from schoolgate.api.v1.deps import get_db
from schoolgate.core.audit import AuditRecorder
from schoolgate.core.config import settings
from schoolgate.core.enums import Role, UserStatus
from schoolgate.core.modules import replace_modules
from schoolgate.core.security import TokenConfig, TokenService, get_password_hash
from schoolgate.db.base import Base
from schoolgate.db.seed import seed_role_permissions
from schoolgate.main import app
from schoolgate.models.school import School
from schoolgate.models.user import User

PASSWORD = "password123"
# bcrypt is slow; hash once for every seeded user
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test, tables created and permissions seeded."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_role_permissions(session)

    yield factory
    await engine.dispose()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(
        TokenConfig(
            access_secret="test-access-secret",
            refresh_secret="test-refresh-secret",
        )
    )


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker, token_service: TokenService
) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.state.token_service = token_service
    app.state.audit_recorder = AuditRecorder(session_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Factories ───────────────────────────────────────────────────────
@pytest.fixture
def make_school(session_factory: async_sessionmaker):
    async def _make(code: str = "ALPHA", modules=None) -> School:
        async with session_factory() as session:
            school = School(name=f"{code.title()} School", code=code)
            session.add(school)
            await session.flush()
            await replace_modules(
                session,
                school.id,
                settings.DEFAULT_SCHOOL_MODULES if modules is None else modules,
            )
            await session.commit()
            return school

    return _make


@pytest.fixture
def make_user(session_factory: async_sessionmaker):
    counter = {"n": 0}

    async def _make(
        role: Role = Role.SCHOOL_ADMIN,
        school: School | None = None,
        status: UserStatus = UserStatus.ACTIVE,
        email: str | None = None,
    ) -> User:
        counter["n"] += 1
        async with session_factory() as session:
            user = User(
                email=email or f"{role.value}{counter['n']}@example.com",
                password_hash=PASSWORD_HASH,
                first_name=role.value.title(),
                last_name=str(counter["n"]),
                role=role.value,
                school_id=school.id if school is not None else None,
                status=status.value,
            )
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest.fixture
def auth_headers(token_service: TokenService):
    def _headers(user: User) -> dict[str, str]:
        pair = token_service.issue_access_and_refresh(user)
        return {"Authorization": f"Bearer {pair.access_token}"}

    return _headers
