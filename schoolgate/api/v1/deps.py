"""
FastAPI dependencies — authentication, the access-guard chain, audit staging
and the database session.

Per request the order is fixed:

    get_current_active_user → require_access(module, permission) → handler

``require_access`` resolves the target school and runs the guard chain;
``audited`` stages the audit entry that ``AuditMiddleware`` persists once
the response has gone out.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.core.audit import stage_audit
from schoolgate.core.config import settings
from schoolgate.core.enums import ModuleName, Permission, Role, TokenType, UserStatus
from schoolgate.core.exceptions import MissingToken, UserInactiveOrMissing
from schoolgate.core.guards import AccessContext, run_guards
from schoolgate.core.security import TokenService
from schoolgate.db.session import async_session_factory
from schoolgate.models.user import User

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Verify the bearer access token and load its user."""
    if not token:
        raise MissingToken()

    claims = tokens.verify(token, TokenType.ACCESS)

    result = await db.execute(select(User).where(User.id == claims.id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserInactiveOrMissing()
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Reject accounts that are not active (pending, inactive, graduated)."""
    if current_user.status != UserStatus.ACTIVE.value:
        raise UserInactiveOrMissing()
    return current_user


async def require_super_admin(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Only allow super_admin to proceed."""
    if current_user.role != Role.SUPER_ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin privileges required",
        )
    return current_user


# ── Tenant resolution ───────────────────────────────────────────────
async def read_json_body(request: Request) -> dict[str, Any] | None:
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return None
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


async def resolve_school_id(request: Request) -> str | None:
    """School id from path param, then JSON body, then query string."""
    school_id = request.path_params.get("school_id")
    if school_id:
        return str(school_id)
    body = await read_json_body(request)
    if body:
        school_id = body.get("schoolId") or body.get("school_id")
        if school_id:
            return str(school_id)
    school_id = request.query_params.get("schoolId") or request.query_params.get("school_id")
    return school_id or None


def require_access(
    module: ModuleName | None = None, permission: Permission | None = None
):
    """Run tenant → module → permission guards for the current request."""

    async def dependency(
        request: Request,
        current_user: User = Depends(get_current_active_user),
        db: AsyncSession = Depends(get_db),
    ) -> AccessContext:
        ctx = AccessContext(
            user=current_user,
            school_id=await resolve_school_id(request),
            module=module,
            permission=permission,
        )
        return await run_guards(ctx, db)

    return dependency


# ── Audit ───────────────────────────────────────────────────────────
def audited(action: str, resource: str):
    """Stage an audit entry; it is written only if the response is 2xx."""

    async def dependency(
        request: Request,
        current_user: User = Depends(get_current_active_user),
    ) -> None:
        stage_audit(
            request,
            user_id=current_user.id,
            action=action,
            resource=resource,
            school_id=await resolve_school_id(request) or current_user.school_id,
            new_values=await read_json_body(request),
        )

    return dependency
