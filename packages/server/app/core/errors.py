"""
Domain error taxonomy and its HTTP rendering.

Services raise these; a single exception handler turns them into the
``{"error": {"code", "message", "status"}}`` envelope.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

log = structlog.get_logger()


class DomainError(Exception):
    status_code: int = 400
    code: str = "BAD_REQUEST"
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class NotFound(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Expired(DomainError):
    status_code = 410
    code = "EXPIRED"
    default_message = "This invitation has expired"


class AlreadyClaimed(DomainError):
    status_code = 409
    code = "ALREADY_CLAIMED"
    default_message = "This enterprise is already claimed"


class InvalidTransition(DomainError):
    status_code = 409
    code = "INVALID_TRANSITION"
    default_message = "Invalid status transition"


class Unauthorized(DomainError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class Forbidden(DomainError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Forbidden"


class LastOwnerViolation(DomainError):
    status_code = 409
    code = "LAST_OWNER_VIOLATION"
    default_message = "There must be at least one owner for the enterprise"


class Conflict(DomainError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflicts with existing data"


class ValidationFailed(DomainError):
    status_code = 422
    code = "VALIDATION_FAILED"
    default_message = "Request could not be validated"


def error_body(code: str, message: str, status: int) -> dict:
    return {"error": {"code": code, "message": message, "status": status}}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    log.warning(
        "request.domain_error",
        method=request.method,
        path=request.url.path,
        code=exc.code,
        status=exc.status_code,
        message=exc.message,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.status_code),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
