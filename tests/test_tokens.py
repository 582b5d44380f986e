"""
Token service tests — claim shape, secret separation and type checking.
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from schoolgate.core.enums import TokenType
from schoolgate.core.exceptions import InvalidToken, TokenExpired
from schoolgate.core.security import TokenConfig, TokenService

USER = SimpleNamespace(
    id="u-1", email="teacher@example.com", role="teacher", school_id="S1"
)


def test_access_token_round_trip(token_service: TokenService):
    pair = token_service.issue_access_and_refresh(USER)

    claims = token_service.verify(pair.access_token, TokenType.ACCESS)

    assert claims.id == "u-1"
    assert claims.email == "teacher@example.com"
    assert claims.role == "teacher"
    assert claims.school_id == "S1"
    assert claims.type == "access"
    assert pair.expires_in == 15 * 60


def test_super_admin_token_has_no_school_claim(token_service: TokenService):
    admin = SimpleNamespace(id="a-1", email="root@example.com", role="super_admin", school_id=None)
    pair = token_service.issue_access_and_refresh(admin)

    payload = jwt.get_unverified_claims(pair.access_token)

    assert "schoolId" not in payload
    assert token_service.verify(pair.access_token, TokenType.ACCESS).school_id is None


def test_refresh_token_rejected_as_access(token_service: TokenService):
    pair = token_service.issue_access_and_refresh(USER)

    with pytest.raises(InvalidToken):
        token_service.verify(pair.refresh_token, TokenType.ACCESS)


def test_access_token_rejected_as_refresh(token_service: TokenService):
    pair = token_service.issue_access_and_refresh(USER)

    with pytest.raises(InvalidToken):
        token_service.verify(pair.access_token, TokenType.REFRESH)


def test_type_mismatch_rejected_even_with_valid_signature(token_service: TokenService):
    """Invite and access tokens share a secret; only ``type`` tells them apart."""
    invite = token_service.issue_invite(USER.id, USER.email, USER.role, school_id="S1")

    with pytest.raises(InvalidToken):
        token_service.verify(invite, TokenType.ACCESS)
    assert token_service.verify(invite, TokenType.INVITE).type == "invite"


def test_expired_token_raises_token_expired():
    service = TokenService(
        TokenConfig(
            access_secret="a",
            refresh_secret="r",
            access_ttl=timedelta(seconds=-10),
        )
    )
    pair = service.issue_access_and_refresh(USER)

    with pytest.raises(TokenExpired) as exc_info:
        service.verify(pair.access_token, TokenType.ACCESS)
    assert exc_info.value.status_code == 401
    assert exc_info.value.code == "TOKEN_EXPIRED"


def test_wrong_secret_is_invalid(token_service: TokenService):
    other = TokenService(TokenConfig(access_secret="other", refresh_secret="other-r"))
    pair = other.issue_access_and_refresh(USER)

    with pytest.raises(InvalidToken) as exc_info:
        token_service.verify(pair.access_token, TokenType.ACCESS)
    assert exc_info.value.status_code == 403


def test_garbage_token_is_invalid(token_service: TokenService):
    with pytest.raises(InvalidToken):
        token_service.verify("not-a-jwt", TokenType.ACCESS)


def test_missing_claims_are_invalid(token_service: TokenService):
    token = jwt.encode({"id": "u-1", "type": "access"}, "test-access-secret", algorithm="HS256")

    with pytest.raises(InvalidToken):
        token_service.verify(token, TokenType.ACCESS)
