"""
Tests for session token verification and the identity dependencies.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import jwt
import pytest
from httpx import AsyncClient

from app.core.auth import create_jwt, decode_jwt
from app.core.config import get_settings


class TestJWT:
    """Session token encoding."""

    def test_roundtrip(self):
        uid = uuid.uuid4()
        token, jti = create_jwt(uid)
        payload = decode_jwt(token)
        assert payload["sub"] == str(uid)
        assert payload["jti"] == jti
        assert payload["exp"] > payload["iat"]

    def test_expired_token_rejected(self):
        token, _ = create_jwt(uuid.uuid4(), expires_delta=timedelta(seconds=-1))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_jwt(token)

    def test_wrong_key_rejected(self):
        settings = get_settings()
        forged = jwt.encode(
            {"sub": str(uuid.uuid4())}, "not-the-key", algorithm=settings.jwt_algorithm
        )
        with pytest.raises(jwt.InvalidSignatureError):
            decode_jwt(forged)


class TestIdentity:
    """Bearer / cookie identity on the HTTP surface."""

    @pytest.mark.asyncio
    async def test_garbage_bearer_token(self, client: AsyncClient, make):
        enterprise = await make.enterprise()
        invitation = await make.claim_invitation(enterprise)
        response = await client.post(
            f"/api/enterprises/claim/{invitation.token}",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid or expired session"

    @pytest.mark.asyncio
    async def test_revoked_session(self, client: AsyncClient, make, auth):
        user = await make.user()
        with patch("app.core.auth.is_session_revoked", AsyncMock(return_value=True)):
            response = await client.get("/api/admin/invitations", headers=auth(user))
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Session has been revoked"

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, client: AsyncClient):
        token, _ = create_jwt(uuid.uuid4())
        response = await client.get(
            "/api/admin/invitations", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_cookie_session_for_reads(self, client: AsyncClient, make):
        admin = await make.admin()
        token, _ = create_jwt(admin.id)
        client.cookies.set("ecn_session", token)
        try:
            response = await client.get("/api/admin/invitations")
        finally:
            client.cookies.clear()
        assert response.status_code == 200
        assert response.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_anonymous_public_endpoints(self, client: AsyncClient, make):
        enterprise = await make.enterprise()
        response = await client.get(f"/api/enterprises/{enterprise.id}/claim-status")
        assert response.status_code == 200
