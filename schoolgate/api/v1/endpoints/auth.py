"""
Auth endpoints — login, token refresh, invite acceptance (set-password).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schoolgate.api.v1.deps import get_current_active_user, get_db, get_token_service
from schoolgate.core.audit import annotate_audit, stage_audit
from schoolgate.core.config import settings
from schoolgate.core.enums import Role, TokenType, UserStatus
from schoolgate.core.exceptions import InvalidToken, TokenExpired, UserInactiveOrMissing
from schoolgate.core.security import TokenService, get_password_hash, verify_password
from schoolgate.models.school import School
from schoolgate.models.user import User
from schoolgate.schemas.token import (
    LoginRequest,
    RefreshRequest,
    SetPasswordRequest,
    TokenResponse,
)
from schoolgate.schemas.user import UserRead

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

_INVALID_INVITE = "Invalid or expired invite token"


def _token_response(user: User, tokens: TokenService) -> TokenResponse:
    pair = tokens.issue_access_and_refresh(user)
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """Authenticate with email/password (+ school code for tenant users)."""
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    if user.status != UserStatus.ACTIVE.value:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is not active",
        )

    if user.role != Role.SUPER_ADMIN.value:
        if not body.school_code:
            raise HTTPException(status_code=400, detail="School code is required")
        school_result = await db.execute(
            select(School).where(School.code == body.school_code.strip().upper())
        )
        school = school_result.scalar_one_or_none()
        if school is None or school.id != user.school_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid school code",
            )

    stage_audit(
        request,
        user_id=user.id,
        action="login",
        resource="auth",
        school_id=user.school_id,
    )
    logger.info("Login %s (%s)", user.email, user.role)
    return _token_response(user, tokens)


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit("10/minute")
async def refresh_access_token(
    request: Request,
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """Exchange a refresh token for a fresh access/refresh pair."""
    claims = tokens.verify(body.refresh_token, TokenType.REFRESH)

    result = await db.execute(select(User).where(User.id == claims.id))
    user = result.scalar_one_or_none()
    if user is None or user.status != UserStatus.ACTIVE.value:
        raise UserInactiveOrMissing()

    return _token_response(user, tokens)


@router.post("/set-password", response_model=TokenResponse)
@limiter.limit("10/minute")
async def set_password(
    request: Request,
    body: SetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """Accept an invite: set the first password and activate the account.

    The status flip is a conditional UPDATE on ``status = 'pending'`` so an
    invite can activate its user at most once, even under concurrent use.
    """
    try:
        claims = tokens.verify(body.token, TokenType.INVITE)
    except (TokenExpired, InvalidToken) as exc:
        raise HTTPException(status_code=400, detail=_INVALID_INVITE) from exc

    result = await db.execute(select(User).where(User.id == claims.id))
    user = result.scalar_one_or_none()
    if user is None or user.email != claims.email:
        raise HTTPException(status_code=400, detail=_INVALID_INVITE)
    if user.status != UserStatus.PENDING.value:
        raise HTTPException(status_code=400, detail="Account is not pending activation")

    activated = await db.execute(
        update(User)
        .where(User.id == user.id, User.status == UserStatus.PENDING.value)
        .values(
            password_hash=get_password_hash(body.password),
            status=UserStatus.ACTIVE.value,
        )
    )
    if activated.rowcount != 1:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Account is not pending activation")
    await db.commit()
    await db.refresh(user)

    stage_audit(
        request,
        user_id=user.id,
        action="set_password",
        resource="user",
        school_id=user.school_id,
    )
    annotate_audit(
        request,
        resource_id=user.id,
        old_values={"status": UserStatus.PENDING.value},
        new_values={"status": UserStatus.ACTIVE.value},
    )
    logger.info("Invite accepted, user %s activated", user.email)
    return _token_response(user, tokens)


@router.get("/me", response_model=UserRead)
async def read_current_user(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Return profile of the currently authenticated user."""
    return current_user
