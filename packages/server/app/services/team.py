"""
Team service: enterprise membership, roles and team invitations.

Every enterprise with an active team keeps at least one active owner:
demoting or removing the last one raises LastOwnerViolation, including when
owners act on themselves.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.errors import Conflict, Expired, Forbidden, LastOwnerViolation, NotFound
from app.models.base import as_utc, utcnow
from app.models.enterprise import Enterprise
from app.models.team_member import TeamInvitation, TeamMember
from app.models.user import User
from app.services.claims import get_enterprise_or_404
from app.services.transitions import next_team_invitation_status
from earthcare_shared.schemas.common import (
    ROLE_RANK,
    Capability,
    MemberStatus,
    TeamInvitationStatus,
    TeamRole,
    has_capability,
)

log = structlog.get_logger()
settings = get_settings()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_active_membership(
    session: AsyncSession, enterprise_id: uuid.UUID, user_id: uuid.UUID
) -> Optional[TeamMember]:
    result = await session.execute(
        select(TeamMember).where(
            TeamMember.enterprise_id == enterprise_id,
            TeamMember.user_id == user_id,
            TeamMember.status == MemberStatus.ACTIVE.value,
        )
    )
    return result.scalar_one_or_none()


async def require_capability(
    session: AsyncSession,
    enterprise_id: uuid.UUID,
    user_id: uuid.UUID,
    capability: Capability,
) -> TeamMember:
    """Return the caller's membership if its role grants ``capability``."""
    membership = await get_active_membership(session, enterprise_id, user_id)
    if not membership:
        raise Forbidden("Not a member of this enterprise")
    if not has_capability(TeamRole(membership.role), capability):
        raise Forbidden("Insufficient permissions for this action")
    return membership


async def _get_member_or_404(
    session: AsyncSession, enterprise_id: uuid.UUID, member_id: uuid.UUID
) -> TeamMember:
    member = await session.get(TeamMember, member_id)
    if (
        not member
        or member.enterprise_id != enterprise_id
        or member.status != MemberStatus.ACTIVE.value
    ):
        raise NotFound("Team member not found")
    return member


async def _active_owners(session: AsyncSession, enterprise_id: uuid.UUID) -> list[TeamMember]:
    # Row locks serialise concurrent demotions where the store supports them
    result = await session.execute(
        select(TeamMember)
        .where(
            TeamMember.enterprise_id == enterprise_id,
            TeamMember.role == TeamRole.OWNER.value,
            TeamMember.status == MemberStatus.ACTIVE.value,
        )
        .with_for_update()
    )
    return list(result.scalars().all())


async def _guard_last_owner(
    session: AsyncSession, target: TeamMember, action: str
) -> list[TeamMember]:
    owners = await _active_owners(session, target.enterprise_id)
    if target.role == TeamRole.OWNER.value and len(owners) <= 1:
        log.info(
            "team.last_owner_blocked",
            enterprise_id=str(target.enterprise_id),
            member_id=str(target.id),
            action=action,
        )
        raise LastOwnerViolation(f"Cannot {action} the last owner of the enterprise")
    return owners


def _check_rank(actor: TeamMember, target: TeamMember, new_role: Optional[TeamRole] = None) -> None:
    actor_rank = ROLE_RANK[TeamRole(actor.role)]
    if actor.id != target.id and ROLE_RANK[TeamRole(target.role)] > actor_rank:
        raise Forbidden("Cannot modify a member with a higher role")
    if new_role is not None and ROLE_RANK[new_role] > actor_rank:
        raise Forbidden(f"Your role ({actor.role}) cannot assign the {new_role.value} role")


async def _reassign_primary_owner(
    session: AsyncSession, departing: TeamMember, owners: list[TeamMember]
) -> None:
    """Keep ``enterprise.owner_user_id`` pointing at a remaining owner."""
    enterprise = await session.get(Enterprise, departing.enterprise_id)
    if not enterprise or enterprise.owner_user_id != departing.user_id:
        return
    successor = next((o for o in owners if o.id != departing.id), None)
    if successor:
        enterprise.owner_user_id = successor.user_id
        enterprise.updated_at = utcnow()
        session.add(enterprise)


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


async def list_members(
    enterprise_id: uuid.UUID, actor_user_id: uuid.UUID, session: AsyncSession
) -> list[TeamMember]:
    """Active members, owners first, then by join date."""
    await get_enterprise_or_404(session, enterprise_id)
    await require_capability(session, enterprise_id, actor_user_id, Capability.VIEW)
    result = await session.execute(
        select(TeamMember).where(
            TeamMember.enterprise_id == enterprise_id,
            TeamMember.status == MemberStatus.ACTIVE.value,
        )
    )
    members = list(result.scalars().all())
    members.sort(key=lambda m: (-ROLE_RANK[TeamRole(m.role)], as_utc(m.join_date)))
    return members


async def change_role(
    enterprise_id: uuid.UUID,
    member_id: uuid.UUID,
    new_role: TeamRole,
    actor_user_id: uuid.UUID,
    session: AsyncSession,
) -> TeamMember:
    actor = await require_capability(session, enterprise_id, actor_user_id, Capability.MANAGE_TEAM)
    target = await _get_member_or_404(session, enterprise_id, member_id)
    _check_rank(actor, target, new_role)

    if target.role == new_role.value:
        return target

    if new_role != TeamRole.OWNER:
        owners = await _guard_last_owner(session, target, "demote")
        if target.role == TeamRole.OWNER.value:
            await _reassign_primary_owner(session, target, owners)

    previous = target.role
    target.role = new_role.value
    target.updated_at = utcnow()
    session.add(target)
    await session.flush()

    log.info(
        "team.role_changed",
        enterprise_id=str(enterprise_id),
        member_id=str(target.id),
        actor_id=str(actor_user_id),
        previous_role=previous,
        role=new_role.value,
    )
    return target


async def remove_member(
    enterprise_id: uuid.UUID,
    member_id: uuid.UUID,
    actor_user_id: uuid.UUID,
    session: AsyncSession,
) -> TeamMember:
    """Soft-remove a member (status -> inactive)."""
    actor = await require_capability(session, enterprise_id, actor_user_id, Capability.MANAGE_TEAM)
    target = await _get_member_or_404(session, enterprise_id, member_id)
    _check_rank(actor, target)

    owners = await _guard_last_owner(session, target, "remove")
    if target.role == TeamRole.OWNER.value:
        await _reassign_primary_owner(session, target, owners)

    target.status = MemberStatus.INACTIVE.value
    target.updated_at = utcnow()
    session.add(target)
    await session.flush()

    log.info(
        "team.member_removed",
        enterprise_id=str(enterprise_id),
        member_id=str(target.id),
        actor_id=str(actor_user_id),
    )
    return target


# ---------------------------------------------------------------------------
# Team invitations
# ---------------------------------------------------------------------------


def build_accept_url(token: str) -> str:
    return f"{settings.public_base_url}/team/invitations/accept/{token}"


async def invite_team_member(
    enterprise_id: uuid.UUID,
    email: str,
    role: TeamRole,
    inviter_id: uuid.UUID,
    session: AsyncSession,
    *,
    now: Optional[datetime] = None,
) -> TeamInvitation:
    now = now or utcnow()
    email = email.strip().lower()
    enterprise = await get_enterprise_or_404(session, enterprise_id)
    inviter = await require_capability(session, enterprise_id, inviter_id, Capability.INVITE_MEMBERS)
    if ROLE_RANK[role] > ROLE_RANK[TeamRole(inviter.role)]:
        raise Forbidden(f"Your role ({inviter.role}) cannot invite {role.value}s")

    result = await session.execute(select(User).where(func.lower(User.email) == email))
    existing_user = result.scalar_one_or_none()
    if existing_user and await get_active_membership(session, enterprise_id, existing_user.id):
        raise Conflict("User is already a team member")

    result = await session.execute(
        select(TeamInvitation).where(
            TeamInvitation.enterprise_id == enterprise_id,
            func.lower(TeamInvitation.email) == email,
            TeamInvitation.status == TeamInvitationStatus.PENDING.value,
        )
    )
    if result.scalars().first():
        raise Conflict("Invitation already exists for this email")

    invitation = TeamInvitation(
        enterprise_id=enterprise_id,
        email=email,
        role=role.value,
        token=secrets.token_urlsafe(32),
        inviter_id=inviter_id,
        expires_at=now + timedelta(days=settings.team_invitation_ttl_days),
        status=TeamInvitationStatus.PENDING.value,
    )
    session.add(invitation)
    await session.flush()

    log.info(
        "team_invitation.created",
        enterprise_id=str(enterprise.id),
        invitation_id=str(invitation.id),
        email=email,
        role=role.value,
        accept_url=build_accept_url(invitation.token),
    )
    return invitation


async def list_team_invitations(
    enterprise_id: uuid.UUID, actor_user_id: uuid.UUID, session: AsyncSession
) -> list[TeamInvitation]:
    """Pending invitations of an enterprise, newest first."""
    await get_enterprise_or_404(session, enterprise_id)
    await require_capability(session, enterprise_id, actor_user_id, Capability.INVITE_MEMBERS)
    result = await session.execute(
        select(TeamInvitation)
        .where(
            TeamInvitation.enterprise_id == enterprise_id,
            TeamInvitation.status == TeamInvitationStatus.PENDING.value,
        )
        .order_by(TeamInvitation.created_at.desc())
    )
    return list(result.scalars().all())


async def cancel_team_invitation(
    enterprise_id: uuid.UUID,
    invitation_id: uuid.UUID,
    actor_user_id: uuid.UUID,
    session: AsyncSession,
) -> TeamInvitation:
    await require_capability(session, enterprise_id, actor_user_id, Capability.INVITE_MEMBERS)
    invitation = await session.get(TeamInvitation, invitation_id)
    if not invitation or invitation.enterprise_id != enterprise_id:
        raise NotFound("Invitation not found")

    invitation.status = next_team_invitation_status(
        invitation.status, TeamInvitationStatus.CANCELLED
    )
    invitation.updated_at = utcnow()
    session.add(invitation)
    await session.flush()

    log.info(
        "team_invitation.cancelled",
        enterprise_id=str(enterprise_id),
        invitation_id=str(invitation.id),
        actor_id=str(actor_user_id),
    )
    return invitation


async def accept_team_invitation(
    token: str,
    user: User,
    session: AsyncSession,
    *,
    now: Optional[datetime] = None,
) -> TeamMember:
    now = now or utcnow()
    result = await session.execute(select(TeamInvitation).where(TeamInvitation.token == token))
    invitation = result.scalar_one_or_none()
    if not invitation:
        raise NotFound("Invitation not found")
    if (
        invitation.status == TeamInvitationStatus.EXPIRED.value
        or now > as_utc(invitation.expires_at)
    ):
        raise Expired("Invitation has expired")
    accepted = next_team_invitation_status(invitation.status, TeamInvitationStatus.ACCEPTED)
    if not user.email or user.email.lower() != invitation.email.lower():
        raise Forbidden("This invitation is for a different email address")

    result = await session.execute(
        select(TeamMember).where(
            TeamMember.enterprise_id == invitation.enterprise_id,
            TeamMember.user_id == user.id,
        )
    )
    member = result.scalar_one_or_none()
    if member is None:
        member = TeamMember(
            enterprise_id=invitation.enterprise_id,
            user_id=user.id,
            role=invitation.role,
            invited_by=invitation.inviter_id,
            join_date=now,
        )
    elif member.status != MemberStatus.ACTIVE.value:
        member.role = invitation.role
        member.status = MemberStatus.ACTIVE.value
        member.invited_by = invitation.inviter_id
        member.join_date = now
    # An already-active member keeps their current role

    invitation.status = accepted
    invitation.accepted_by = user.id
    invitation.accepted_at = now
    session.add(member)
    session.add(invitation)
    await session.flush()

    log.info(
        "team_invitation.accepted",
        enterprise_id=str(invitation.enterprise_id),
        invitation_id=str(invitation.id),
        user_id=str(user.id),
    )
    return member


# ---------------------------------------------------------------------------
# Caller-scoped views
# ---------------------------------------------------------------------------


async def list_my_invitations(
    user: User,
    session: AsyncSession,
    *,
    now: Optional[datetime] = None,
) -> list[tuple[TeamInvitation, Enterprise]]:
    """Pending, unexpired invitations addressed to the caller's e-mail."""
    if not user.email:
        return []
    now = now or utcnow()
    result = await session.execute(
        select(TeamInvitation, Enterprise)
        .join(Enterprise, Enterprise.id == TeamInvitation.enterprise_id)
        .where(
            func.lower(TeamInvitation.email) == user.email.lower(),
            TeamInvitation.status == TeamInvitationStatus.PENDING.value,
            TeamInvitation.expires_at > now,
        )
        .order_by(TeamInvitation.created_at.desc())
    )
    return [(invitation, enterprise) for invitation, enterprise in result.all()]


async def list_my_memberships(
    user_id: uuid.UUID, session: AsyncSession
) -> list[tuple[TeamMember, Enterprise]]:
    result = await session.execute(
        select(TeamMember, Enterprise)
        .join(Enterprise, Enterprise.id == TeamMember.enterprise_id)
        .where(
            TeamMember.user_id == user_id,
            TeamMember.status == MemberStatus.ACTIVE.value,
        )
        .order_by(TeamMember.join_date)
    )
    return [(member, enterprise) for member, enterprise in result.all()]
