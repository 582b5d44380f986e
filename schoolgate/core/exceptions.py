"""
Access-control error taxonomy and global exception handlers.

Every guard failure is an ``AccessError`` carrying its HTTP status and a
machine-readable message; the handlers below render them and prevent
stack-trace leakage for everything else.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


# ── Taxonomy ────────────────────────────────────────────────────────
class AccessError(Exception):
    status_code: int = 403
    message: str = "Access denied"
    code: str | None = None

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingToken(AccessError):
    status_code = 401
    message = "Access token required"


class TokenExpired(AccessError):
    status_code = 401
    message = "Token expired"
    code = "TOKEN_EXPIRED"


class InvalidToken(AccessError):
    status_code = 403
    message = "Invalid token"


class UserInactiveOrMissing(AccessError):
    status_code = 401
    message = "User not found or inactive"


class SchoolIdRequired(AccessError):
    status_code = 400
    message = "School ID is required"


class CrossTenantAccess(AccessError):
    status_code = 403
    message = "Access denied to this school"


class ModuleNotEnabled(AccessError):
    status_code = 403

    def __init__(self, module: str) -> None:
        self.module = module
        super().__init__(f"Module {module} is not enabled for this school")


class PermissionDenied(AccessError):
    status_code = 403

    def __init__(self, module: str, permission: str) -> None:
        self.module = module
        self.permission = permission
        super().__init__(f"Missing permission {permission} on module {module}")


class AuditPersistFailure(Exception):
    """Raised inside the audit recorder only; never reaches a client."""


# ── Handlers ────────────────────────────────────────────────────────
async def _access_error_handler(_request: Request, exc: AccessError) -> JSONResponse:
    content: dict = {"message": exc.message, "success": False}
    if exc.code:
        content["code"] = exc.code
    return JSONResponse(status_code=exc.status_code, content=content)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid input",
            "errors": jsonable_encoder(exc.errors()),
            "success": False,
        },
    )


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded: %s", exc.detail)
    return JSONResponse(
        status_code=429,
        content={"message": "Too many requests, please try again later", "success": False},
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"message": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AccessError, _access_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
