"""
Shared fixtures: a throwaway SQLite database per test, an API client wired
to it, and small factories for the directory/team tables.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.auth import create_jwt
from app.core.database import get_session, session_scope
from app.main import app
from app.models.base import utcnow
from app.models.claim_invitation import ClaimInvitation
from app.models.enterprise import Enterprise
from app.models.person import Person
from app.models.team_member import TeamInvitation, TeamMember
from app.models.user import User


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'earthcare.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory):
    async def _get_test_session():
        async with session_scope(session_factory) as s:
            yield s

    app.dependency_overrides[get_session] = _get_test_session
    with patch("app.core.auth.is_session_revoked", AsyncMock(return_value=False)):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    app.dependency_overrides.clear()


def auth_header(user: User) -> dict:
    token, _ = create_jwt(user.id)
    return {"Authorization": f"Bearer {token}"}


class Factory:
    """Inserts committed rows through the test session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def user(self, email: Optional[str] = None, role: str = "visitor") -> User:
        return await self._save(
            User(
                email=email or f"user-{uuid.uuid4().hex[:8]}@example.org",
                first_name="Test",
                last_name="User",
                role=role,
            )
        )

    async def admin(self) -> User:
        return await self.user(role="admin")

    async def enterprise(
        self,
        name: str = "Riverbend Regenerative Farm",
        claim_status: str = "unclaimed",
        contact_email: Optional[str] = None,
        owner: Optional[User] = None,
    ) -> Enterprise:
        return await self._save(
            Enterprise(
                name=name,
                category="land_projects",
                location="Oregon, USA",
                contact_email=contact_email,
                claim_status=claim_status,
                owner_user_id=owner.id if owner else None,
            )
        )

    async def person(
        self,
        enterprise: Enterprise,
        email: Optional[str] = "",
        invitation_status: str = "not_invited",
        claim_status: str = "unclaimed",
    ) -> Person:
        if email == "":
            email = f"contact-{uuid.uuid4().hex[:8]}@example.org"
        return await self._save(
            Person(
                enterprise_id=enterprise.id,
                first_name="Maya",
                last_name="Lindqvist",
                email=email,
                invitation_status=invitation_status,
                claim_status=claim_status,
            )
        )

    async def claim_invitation(
        self,
        enterprise: Enterprise,
        person: Optional[Person] = None,
        token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        status: str = "pending",
    ) -> ClaimInvitation:
        now = utcnow()
        return await self._save(
            ClaimInvitation(
                enterprise_id=enterprise.id,
                person_id=person.id if person else None,
                token=token or uuid.uuid4().hex,
                invited_email=person.email if person and person.email else "contact@example.org",
                invited_name="Maya Lindqvist",
                invited_at=now,
                expires_at=expires_at or now + timedelta(days=30),
                status=status,
            )
        )

    async def member(
        self, enterprise: Enterprise, user: User, role: str = "viewer", status: str = "active"
    ) -> TeamMember:
        return await self._save(
            TeamMember(enterprise_id=enterprise.id, user_id=user.id, role=role, status=status)
        )

    async def team_invitation(
        self,
        enterprise: Enterprise,
        inviter: User,
        email: str,
        role: str = "viewer",
        expires_at: Optional[datetime] = None,
        status: str = "pending",
    ) -> TeamInvitation:
        return await self._save(
            TeamInvitation(
                enterprise_id=enterprise.id,
                email=email,
                role=role,
                token=uuid.uuid4().hex,
                inviter_id=inviter.id,
                expires_at=expires_at or utcnow() + timedelta(days=7),
                status=status,
            )
        )


@pytest.fixture
def make(session) -> Factory:
    return Factory(session)


@pytest.fixture
def auth():
    return auth_header
