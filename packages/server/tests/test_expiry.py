"""
Tests for the invitation expiry sweep and its ARQ job.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.core.database import session_scope
from app.models.claim_invitation import ClaimInvitation
from app.models.team_member import TeamInvitation
from app.services.invitations import expire_stale_invitations
from app.tasks import invitation_expiry

PAST = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestExpireStaleInvitations:
    @pytest.mark.asyncio
    async def test_only_overdue_pending_rows_change(self, session, make):
        enterprise = await make.enterprise()
        owner = await make.user()
        overdue = await make.claim_invitation(enterprise, expires_at=PAST)
        current = await make.claim_invitation(enterprise)
        accepted = await make.claim_invitation(enterprise, expires_at=PAST, status="accepted")
        team_overdue = await make.team_invitation(
            enterprise, owner, "sam@riverbend.farm", expires_at=PAST
        )

        count = await expire_stale_invitations(session)
        await session.commit()
        assert count == 2

        statuses = {}
        for inv in (overdue, current, accepted):
            row = await session.get(ClaimInvitation, inv.id, populate_existing=True)
            statuses[inv.id] = row.status
        assert statuses == {
            overdue.id: "expired",
            current.id: "pending",
            accepted.id: "accepted",
        }
        row = await session.get(TeamInvitation, team_overdue.id, populate_existing=True)
        assert row.status == "expired"

    @pytest.mark.asyncio
    async def test_explicit_clock(self, session, make):
        enterprise = await make.enterprise()
        await make.claim_invitation(enterprise, expires_at=PAST)
        count = await expire_stale_invitations(
            session, now=datetime(2023, 12, 31, tzinfo=timezone.utc)
        )
        assert count == 0


class TestExpiryJob:
    @pytest.mark.asyncio
    async def test_job_commits_sweep(self, session_factory, make, monkeypatch):
        enterprise = await make.enterprise()
        overdue = await make.claim_invitation(enterprise, expires_at=PAST)

        monkeypatch.setattr(
            invitation_expiry, "session_scope", lambda: session_scope(session_factory)
        )
        assert await invitation_expiry.expire_invitations_job({}) == 1

        async with session_factory() as s:
            row = await s.get(ClaimInvitation, overdue.id)
            assert row.status == "expired"

    def test_worker_runs_hourly(self):
        settings = invitation_expiry.WorkerSettings
        assert invitation_expiry.expire_invitations_job in settings.functions
        [job] = settings.cron_jobs
        assert job.minute == 0
