"""
ARQ background task: mark pending invitations past their deadline as expired.

Expiry is enforced on every token lookup regardless; this sweep only keeps
stored statuses honest for admin listings. Runs hourly.

    arq app.tasks.invitation_expiry.WorkerSettings
"""

from __future__ import annotations

import structlog
from arq import cron
from arq.connections import RedisSettings

from app.core.config import get_settings
from app.core.database import session_scope
from app.services.invitations import expire_stale_invitations

log = structlog.get_logger()
settings = get_settings()


async def expire_invitations_job(ctx: dict) -> int:
    """Returns the number of invitations moved to expired."""
    async with session_scope() as session:
        count = await expire_stale_invitations(session)
    log.info("invitation_expiry.sweep_finished", expired=count)
    return count


class WorkerSettings:
    """ARQ worker configuration."""

    functions = [expire_invitations_job]
    cron_jobs = [cron(expire_invitations_job, minute=0, run_at_startup=True)]
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
