"""
JWT token issuance / verification and password hashing (bcrypt).

Three token types share one claim shape ``{id, email, role, schoolId?, type}``.
Access and invite tokens are signed with the access secret, refresh tokens
with a separate refresh secret. ``TokenService.verify`` always checks the
declared ``type`` against the caller's expectation, so a correctly signed
token of the wrong kind is still rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from schoolgate.core.config import Settings, settings
from schoolgate.core.enums import TokenType
from schoolgate.core.exceptions import InvalidToken, TokenExpired
from schoolgate.schemas.token import TokenClaims

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
@dataclass(frozen=True)
class TokenConfig:
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    invite_ttl: timedelta = timedelta(days=2)

    @classmethod
    def from_settings(cls, s: Settings = settings) -> TokenConfig:
        return cls(
            access_secret=s.JWT_ACCESS_SECRET,
            refresh_secret=s.JWT_REFRESH_SECRET,
            algorithm=s.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=s.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=s.REFRESH_TOKEN_EXPIRE_DAYS),
            invite_ttl=timedelta(days=s.INVITE_TOKEN_EXPIRE_DAYS),
        )


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


class TokenService:
    """Mints and verifies access, refresh and invite tokens."""

    def __init__(self, config: TokenConfig) -> None:
        self.config = config

    def _secret_for(self, token_type: TokenType) -> str:
        if token_type == TokenType.REFRESH:
            return self.config.refresh_secret
        return self.config.access_secret

    def _encode(
        self,
        *,
        user_id: str,
        email: str,
        role: str,
        school_id: str | None,
        token_type: TokenType,
        ttl: timedelta,
    ) -> str:
        now = datetime.now(timezone.utc)
        claims: dict[str, Any] = {
            "id": str(user_id),
            "email": email,
            "role": str(getattr(role, "value", role)),
            "type": token_type.value,
            "iat": now,
            "exp": now + ttl,
        }
        if school_id is not None:
            claims["schoolId"] = str(school_id)
        return jwt.encode(
            claims, self._secret_for(token_type), algorithm=self.config.algorithm
        )

    def issue_access_and_refresh(self, user: Any) -> TokenPair:
        """Build a fresh access/refresh pair for *user* (any object with
        ``id``, ``email``, ``role`` and ``school_id`` attributes)."""
        common = {
            "user_id": user.id,
            "email": user.email,
            "role": user.role,
            "school_id": user.school_id,
        }
        return TokenPair(
            access_token=self._encode(
                token_type=TokenType.ACCESS, ttl=self.config.access_ttl, **common
            ),
            refresh_token=self._encode(
                token_type=TokenType.REFRESH, ttl=self.config.refresh_ttl, **common
            ),
            expires_in=int(self.config.access_ttl.total_seconds()),
        )

    def issue_invite(
        self,
        user_id: str,
        email: str,
        role: str,
        school_id: str | None = None,
        ttl: timedelta | None = None,
    ) -> str:
        return self._encode(
            user_id=user_id,
            email=email,
            role=role,
            school_id=school_id,
            token_type=TokenType.INVITE,
            ttl=ttl if ttl is not None else self.config.invite_ttl,
        )

    def verify(self, token: str, expected_type: TokenType) -> TokenClaims:
        """Return the verified claims or raise ``TokenExpired`` / ``InvalidToken``."""
        try:
            payload = jwt.decode(
                token,
                self._secret_for(expected_type),
                algorithms=[self.config.algorithm],
            )
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except JWTError as exc:
            raise InvalidToken() from exc

        try:
            claims = TokenClaims.model_validate(payload)
        except ValidationError as exc:
            raise InvalidToken() from exc

        if claims.type != expected_type:
            raise InvalidToken()
        return claims
