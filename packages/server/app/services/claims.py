"""
Claim service: token resolution and the enterprise claim itself.

Handles:
- Resolving a claim token to its enterprise, contact and invitation
- Executing a claim (ownership, owner membership, invitation acceptance)
- Public claim-status probe and admin verification
"""

from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.errors import AlreadyClaimed, Expired, NotFound, Unauthorized
from app.models.base import as_utc, utcnow
from app.models.claim_invitation import ClaimInvitation
from app.models.enterprise import Enterprise
from app.models.person import Person
from app.models.team_member import TeamMember
from app.models.user import User
from app.services.transitions import next_claim_status, next_invitation_status
from earthcare_shared.schemas.common import (
    ClaimInvitationStatus,
    ClaimStatus,
    InvitationStatus,
    MemberStatus,
    TeamRole,
    UserRole,
)

log = structlog.get_logger()
settings = get_settings()


@dataclass
class ClaimResolution:
    enterprise: Enterprise
    contact: Optional[Person]
    invitation: ClaimInvitation


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def generate_claim_token() -> str:
    """Opaque, URL-safe, unguessable claim token."""
    return secrets.token_urlsafe(32)


def build_claim_url(token: str) -> str:
    return f"{settings.public_base_url}/claim-profile?token={token}"


async def get_enterprise_or_404(session: AsyncSession, enterprise_id: uuid.UUID) -> Enterprise:
    enterprise = await session.get(Enterprise, enterprise_id)
    if not enterprise:
        raise NotFound("Enterprise not found")
    return enterprise


async def _grant_ownership(
    session: AsyncSession, enterprise_id: uuid.UUID, user_id: uuid.UUID, now: datetime
) -> TeamMember:
    """Make the user an active owner, reusing an existing membership row."""
    result = await session.execute(
        select(TeamMember).where(
            TeamMember.enterprise_id == enterprise_id,
            TeamMember.user_id == user_id,
        )
    )
    member = result.scalar_one_or_none()
    if member:
        member.role = TeamRole.OWNER.value
        member.status = MemberStatus.ACTIVE.value
        member.updated_at = now
    else:
        member = TeamMember(
            enterprise_id=enterprise_id,
            user_id=user_id,
            role=TeamRole.OWNER.value,
            status=MemberStatus.ACTIVE.value,
            join_date=now,
        )
    session.add(member)
    await session.flush()
    return member


def _advance_contact(contact: Person, now: datetime) -> None:
    if contact.claim_status == ClaimStatus.UNCLAIMED.value:
        contact.claim_status = next_claim_status(contact.claim_status, ClaimStatus.CLAIMED)
    if contact.invitation_status == InvitationStatus.INVITED.value:
        contact.invitation_status = next_invitation_status(
            contact.invitation_status, InvitationStatus.SIGNED_UP
        )
    contact.updated_at = now


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


async def resolve_claim(
    token: str, session: AsyncSession, *, now: Optional[datetime] = None
) -> ClaimResolution:
    """Look up a claim token.

    Raises NotFound for an unknown token and Expired once ``expires_at`` has
    passed. Expiry wins over every other state of the invitation.
    """
    now = now or utcnow()
    result = await session.execute(
        select(ClaimInvitation).where(ClaimInvitation.token == token)
    )
    invitation = result.scalar_one_or_none()
    if not invitation:
        raise NotFound("Claim not found")

    if (
        invitation.status == ClaimInvitationStatus.EXPIRED.value
        or now > as_utc(invitation.expires_at)
    ):
        raise Expired("This claim has expired")

    enterprise = await get_enterprise_or_404(session, invitation.enterprise_id)
    contact = None
    if invitation.person_id:
        contact = await session.get(Person, invitation.person_id)

    return ClaimResolution(enterprise=enterprise, contact=contact, invitation=invitation)


# ---------------------------------------------------------------------------
# Claim execution
# ---------------------------------------------------------------------------


async def execute_claim(
    token: str,
    requesting_user_id: Optional[uuid.UUID],
    session: AsyncSession,
    *,
    now: Optional[datetime] = None,
) -> Enterprise:
    """Transfer ownership of the token's enterprise to the requester.

    Every write is flushed into the caller's transaction and nothing is
    committed here, so the enterprise update, the invitation acceptance and
    the owner membership land together or not at all. The enterprise row is
    claimed with a conditional update on ``claim_status = 'unclaimed'``;
    of two concurrent requests only one can match it.
    """
    if requesting_user_id is None:
        raise Unauthorized()
    user = await session.get(User, requesting_user_id)
    if not user:
        raise Unauthorized("User not found")

    now = now or utcnow()
    resolution = await resolve_claim(token, session, now=now)
    enterprise = resolution.enterprise
    invitation = resolution.invitation

    if (
        invitation.status != ClaimInvitationStatus.PENDING.value
        or enterprise.claim_status != ClaimStatus.UNCLAIMED.value
    ):
        raise AlreadyClaimed()

    claimed = await session.execute(
        update(Enterprise)
        .where(
            Enterprise.id == enterprise.id,
            Enterprise.claim_status == ClaimStatus.UNCLAIMED.value,
        )
        .values(
            claim_status=ClaimStatus.CLAIMED.value,
            owner_user_id=user.id,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        log.info("claim.lost_race", enterprise_id=str(enterprise.id), user_id=str(user.id))
        raise AlreadyClaimed()

    accepted = await session.execute(
        update(ClaimInvitation)
        .where(
            ClaimInvitation.id == invitation.id,
            ClaimInvitation.status == ClaimInvitationStatus.PENDING.value,
        )
        .values(
            status=ClaimInvitationStatus.ACCEPTED.value,
            accepted_by=user.id,
            accepted_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if accepted.rowcount != 1:
        raise AlreadyClaimed()

    await _grant_ownership(session, enterprise.id, user.id, now)

    if resolution.contact:
        _advance_contact(resolution.contact, now)
        session.add(resolution.contact)

    if user.role in (UserRole.VISITOR.value, UserRole.MEMBER.value):
        user.role = UserRole.ENTERPRISE_OWNER.value
        session.add(user)

    await session.flush()
    await session.refresh(enterprise)
    await session.refresh(invitation)

    log.info(
        "claim.executed",
        enterprise_id=str(enterprise.id),
        invitation_id=str(invitation.id),
        user_id=str(user.id),
    )
    return enterprise


# ---------------------------------------------------------------------------
# Status probe / verification
# ---------------------------------------------------------------------------


async def get_claim_status(enterprise_id: uuid.UUID, session: AsyncSession) -> dict:
    enterprise = await get_enterprise_or_404(session, enterprise_id)
    is_claimed = enterprise.claim_status != ClaimStatus.UNCLAIMED.value
    return {
        "enterprise_id": enterprise.id,
        "claim_status": enterprise.claim_status,
        "is_claimed": is_claimed,
        "can_claim": not is_claimed,
    }


async def verify_enterprise(enterprise_id: uuid.UUID, session: AsyncSession) -> Enterprise:
    """Administrative verification: claimed -> verified."""
    enterprise = await get_enterprise_or_404(session, enterprise_id)
    enterprise.claim_status = next_claim_status(enterprise.claim_status, ClaimStatus.VERIFIED)
    enterprise.updated_at = utcnow()
    session.add(enterprise)
    await session.flush()
    log.info("enterprise.verified", enterprise_id=str(enterprise.id))
    return enterprise
