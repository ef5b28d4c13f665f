"""
Claim invitation service: admin-side lifecycle of claim invitations.

Handles:
- Issuing an invitation for a (contact, enterprise) pair
- Batch invitations for unclaimed directory enterprises
- Manual contact status changes through the transition engine
- Expiring pending invitations whose deadline has passed
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.errors import AlreadyClaimed, InvalidTransition, NotFound, ValidationFailed
from app.models.base import as_utc, utcnow
from app.models.claim_invitation import ClaimInvitation
from app.models.enterprise import Enterprise
from app.models.person import Person
from app.models.team_member import TeamInvitation
from app.services.claims import build_claim_url, generate_claim_token, get_enterprise_or_404
from app.services.transitions import next_claim_status, next_invitation_status
from earthcare_shared.schemas.common import (
    ClaimInvitationStatus,
    ClaimStatus,
    InvitationStatus,
    TeamInvitationStatus,
)
from earthcare_shared.schemas.invitations import (
    BatchInviteResponse,
    ContactStatusUpdateRequest,
    InvitationCreateRequest,
)

log = structlog.get_logger()
settings = get_settings()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_person_or_404(session: AsyncSession, person_id: uuid.UUID) -> Person:
    person = await session.get(Person, person_id)
    if not person:
        raise NotFound("Contact not found")
    return person


async def _pending_invitation(
    session: AsyncSession,
    *,
    person_id: Optional[uuid.UUID] = None,
    enterprise_id: Optional[uuid.UUID] = None,
) -> Optional[ClaimInvitation]:
    stmt = select(ClaimInvitation).where(
        ClaimInvitation.status == ClaimInvitationStatus.PENDING.value
    )
    if person_id is not None:
        stmt = stmt.where(ClaimInvitation.person_id == person_id)
    if enterprise_id is not None:
        stmt = stmt.where(ClaimInvitation.enterprise_id == enterprise_id)
    result = await session.execute(stmt.order_by(ClaimInvitation.invited_at.desc()))
    return result.scalars().first()


def _new_invitation(
    enterprise: Enterprise,
    email: str,
    now: datetime,
    *,
    person: Optional[Person] = None,
    name: Optional[str] = None,
    invited_by: Optional[uuid.UUID] = None,
) -> ClaimInvitation:
    return ClaimInvitation(
        enterprise_id=enterprise.id,
        person_id=person.id if person else None,
        token=generate_claim_token(),
        invited_email=email,
        invited_name=name,
        invited_by=invited_by,
        invited_at=now,
        expires_at=now + timedelta(days=settings.claim_invitation_ttl_days),
        status=ClaimInvitationStatus.PENDING.value,
    )


# ---------------------------------------------------------------------------
# Single invitation
# ---------------------------------------------------------------------------


async def create_invitation(
    req: InvitationCreateRequest,
    invited_by: uuid.UUID,
    session: AsyncSession,
    *,
    now: Optional[datetime] = None,
) -> ClaimInvitation:
    """Invite a contact to claim their enterprise (not_invited -> invited).

    A contact that is already ``invited`` can only be re-invited once its
    previous invitation has expired; the stale one is closed out.
    """
    now = now or utcnow()
    person = await get_person_or_404(session, req.person_id)
    enterprise = await get_enterprise_or_404(session, req.enterprise_id)
    if person.enterprise_id != enterprise.id:
        raise NotFound("Contact does not belong to this enterprise")
    if enterprise.claim_status != ClaimStatus.UNCLAIMED.value:
        raise AlreadyClaimed()

    email = req.email or person.email
    if not email:
        raise ValidationFailed("Email is required for contacts without one")

    if person.invitation_status == InvitationStatus.INVITED.value:
        previous = await _pending_invitation(session, person_id=person.id)
        if previous and as_utc(previous.expires_at) >= now:
            raise InvalidTransition("Contact already has a pending invitation")
        if previous:
            previous.status = ClaimInvitationStatus.EXPIRED.value
            session.add(previous)
    else:
        person.invitation_status = next_invitation_status(
            person.invitation_status, InvitationStatus.INVITED
        )
    person.updated_at = now
    session.add(person)

    invitation = _new_invitation(
        enterprise,
        email,
        now,
        person=person,
        name=req.name or person.full_name,
        invited_by=invited_by,
    )
    session.add(invitation)
    await session.flush()

    # E-mail delivery is not wired up; the link is surfaced in the log.
    log.info(
        "claim_invitation.created",
        invitation_id=str(invitation.id),
        enterprise_id=str(enterprise.id),
        person_id=str(person.id),
        invited_email=email,
        claim_url=build_claim_url(invitation.token),
    )
    return invitation


async def list_invitations(
    session: AsyncSession,
    *,
    status: Optional[ClaimInvitationStatus] = None,
    enterprise_id: Optional[uuid.UUID] = None,
) -> list[ClaimInvitation]:
    stmt = select(ClaimInvitation)
    if status is not None:
        stmt = stmt.where(ClaimInvitation.status == status.value)
    if enterprise_id is not None:
        stmt = stmt.where(ClaimInvitation.enterprise_id == enterprise_id)
    result = await session.execute(stmt.order_by(ClaimInvitation.invited_at.desc()))
    return list(result.scalars().all())


async def update_contact_status(
    person_id: uuid.UUID,
    req: ContactStatusUpdateRequest,
    session: AsyncSession,
) -> Person:
    """Apply admin status changes. Both are validated before either is written."""
    person = await get_person_or_404(session, person_id)

    invitation_status = person.invitation_status
    claim_status = person.claim_status
    if req.invitation_status is not None:
        invitation_status = next_invitation_status(person.invitation_status, req.invitation_status)
    if req.claim_status is not None:
        claim_status = next_claim_status(person.claim_status, req.claim_status)

    person.invitation_status = invitation_status
    person.claim_status = claim_status
    person.updated_at = utcnow()
    session.add(person)
    await session.flush()

    log.info(
        "contact.status_updated",
        person_id=str(person.id),
        invitation_status=invitation_status,
        claim_status=claim_status,
    )
    return person


# ---------------------------------------------------------------------------
# Batch invitations
# ---------------------------------------------------------------------------


async def batch_invite(
    enterprise_ids: Optional[list[uuid.UUID]],
    invited_by: uuid.UUID,
    session: AsyncSession,
    *,
    now: Optional[datetime] = None,
) -> BatchInviteResponse:
    """Issue claim invitations to enterprise contact e-mails.

    With an explicit id list every enterprise in it is reported on, and an
    empty list invites nobody. Without ids, every unclaimed enterprise with
    a contact e-mail and no pending invitation is targeted.
    """
    now = now or utcnow()
    errors: list[dict] = []

    if enterprise_ids is not None:
        result = await session.execute(
            select(Enterprise).where(Enterprise.id.in_(enterprise_ids))
        )
        found = {e.id: e for e in result.scalars().all()}
        targets = []
        for enterprise_id in enterprise_ids:
            enterprise = found.get(enterprise_id)
            if not enterprise:
                errors.append({"enterprise_id": enterprise_id, "error": "Enterprise not found"})
            elif enterprise.claim_status != ClaimStatus.UNCLAIMED.value:
                errors.append({"enterprise_id": enterprise_id, "error": "Enterprise is already claimed"})
            else:
                targets.append(enterprise)
        total = len(enterprise_ids)
    else:
        result = await session.execute(
            select(Enterprise).where(
                Enterprise.claim_status == ClaimStatus.UNCLAIMED.value,
                Enterprise.contact_email.is_not(None),
            )
        )
        targets = [
            e for e in result.scalars().all()
            if await _pending_invitation(session, enterprise_id=e.id) is None
        ]
        total = len(targets)

    success = 0
    for enterprise in targets:
        if not enterprise.contact_email:
            errors.append({"enterprise_id": enterprise.id, "error": "No contact email available"})
            continue
        if await _pending_invitation(session, enterprise_id=enterprise.id):
            errors.append({"enterprise_id": enterprise.id, "error": "Pending invitation already exists"})
            continue

        contact = await _contact_for_email(session, enterprise.id, enterprise.contact_email)
        if contact and contact.invitation_status == InvitationStatus.NOT_INVITED.value:
            contact.invitation_status = next_invitation_status(
                contact.invitation_status, InvitationStatus.INVITED
            )
            session.add(contact)
        else:
            contact = None

        session.add(
            _new_invitation(
                enterprise,
                enterprise.contact_email,
                now,
                person=contact,
                name=enterprise.name,
                invited_by=invited_by,
            )
        )
        success += 1

    await session.flush()
    log.info(
        "claim_invitation.batch_created",
        total=total,
        success=success,
        failures=len(errors),
    )
    return BatchInviteResponse(
        total_enterprises=total,
        success_count=success,
        failure_count=len(errors),
        errors=errors,
    )


async def _contact_for_email(
    session: AsyncSession, enterprise_id: uuid.UUID, email: str
) -> Optional[Person]:
    result = await session.execute(
        select(Person).where(Person.enterprise_id == enterprise_id, Person.email == email)
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------


async def expire_stale_invitations(
    session: AsyncSession, *, now: Optional[datetime] = None
) -> int:
    """Mark pending claim and team invitations past their deadline as expired."""
    now = now or utcnow()
    claims = await session.execute(
        update(ClaimInvitation)
        .where(
            ClaimInvitation.status == ClaimInvitationStatus.PENDING.value,
            ClaimInvitation.expires_at < now,
        )
        .values(status=ClaimInvitationStatus.EXPIRED.value)
        .execution_options(synchronize_session=False)
    )
    teams = await session.execute(
        update(TeamInvitation)
        .where(
            TeamInvitation.status == TeamInvitationStatus.PENDING.value,
            TeamInvitation.expires_at < now,
        )
        .values(status=TeamInvitationStatus.EXPIRED.value)
        .execution_options(synchronize_session=False)
    )
    count = claims.rowcount + teams.rowcount
    if count:
        log.info("invitations.expired", claim=claims.rowcount, team=teams.rowcount)
    return count
