"""
Request identity for the Earth Care Network API.

Session tokens are issued by the platform's auth service; this service only
verifies them. Supports:
- Signed JWT from the ``ecn_session`` cookie (browser) or a Bearer header
- Redis revocation list lookup by ``jti``
- Platform-admin dependency for ``/api/admin`` routes
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import Forbidden, Unauthorized
from app.core.redis import is_session_revoked
from app.models.user import User
from earthcare_shared.schemas.common import UserRole

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "ecn_session"

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed session token. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
) -> Optional[uuid.UUID]:
    """Identity of the caller, or None for anonymous requests.

    A token that is present but invalid, expired or revoked is an error,
    not an anonymous request.
    """
    token = _extract_token(request, authorization)
    if not token:
        return None

    try:
        payload = decode_jwt(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise Unauthorized("Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_session_revoked(jti):
        raise Unauthorized("Session has been revoked")

    request.state.user_id = user_id
    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return user_id


async def require_user(
    user_id: Optional[uuid.UUID] = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Requires an authenticated caller that exists in the users table."""
    if user_id is None:
        raise Unauthorized()
    user = await session.get(User, user_id)
    if not user:
        raise Unauthorized("User not found")
    return user


async def require_platform_admin(
    user: User = Depends(require_user),
) -> User:
    """Requires the platform-wide admin role."""
    if user.role != UserRole.ADMIN.value:
        raise Forbidden("Admin access required")
    return user
