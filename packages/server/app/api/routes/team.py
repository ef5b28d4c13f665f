"""
Enterprise team endpoints.

GET    /api/enterprises/{enterpriseId}/team                 - List active members
PATCH  /api/enterprises/{enterpriseId}/team/{memberId}      - Change a member's role
DELETE /api/enterprises/{enterpriseId}/team/{memberId}      - Remove a member
GET    /api/enterprises/{enterpriseId}/team/invitations     - List pending invitations
POST   /api/enterprises/{enterpriseId}/team/invitations     - Invite by e-mail
DELETE /api/enterprises/{enterpriseId}/team/invitations/{invitationId} - Cancel an invitation
GET    /api/team/invitations                                - Invitations addressed to the caller
POST   /api/team/invitations/{token}/accept                 - Accept a team invitation
GET    /api/team/team-memberships                           - The caller's active memberships
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_user
from app.core.database import get_session
from app.models.user import User
from app.services import team as team_service
from earthcare_shared.schemas.team import (
    EnterpriseSummary,
    MyTeamInvitationListResponse,
    MyTeamInvitationResponse,
    RoleChangeRequest,
    TeamInvitationCreateRequest,
    TeamInvitationCreateResponse,
    TeamInvitationListResponse,
    TeamInvitationResponse,
    TeamListResponse,
    TeamMemberResponse,
    TeamMembershipListResponse,
    TeamMembershipResponse,
)

# Routes under /enterprises/{enterpriseId}/team
router = APIRouter()

# Routes under /team (not enterprise-scoped)
router_invitations = APIRouter()


@router.get("", response_model=TeamListResponse, tags=["Team"])
async def list_team(
    enterpriseId: uuid.UUID,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """List active team members (any member)."""
    members = await team_service.list_members(enterpriseId, user.id, session)
    return TeamListResponse(data=[TeamMemberResponse.model_validate(m) for m in members])


@router.get("/invitations", response_model=TeamInvitationListResponse, tags=["Team"])
async def list_invitations(
    enterpriseId: uuid.UUID,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """List pending team invitations (admin or owner)."""
    invitations = await team_service.list_team_invitations(enterpriseId, user.id, session)
    return TeamInvitationListResponse(
        data=[TeamInvitationResponse.model_validate(i) for i in invitations]
    )


@router.post(
    "/invitations",
    response_model=TeamInvitationCreateResponse,
    status_code=201,
    tags=["Team"],
)
async def invite_member(
    enterpriseId: uuid.UUID,
    body: TeamInvitationCreateRequest,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Invite someone to the team (admin or owner)."""
    invitation = await team_service.invite_team_member(
        enterpriseId, body.email, body.role, user.id, session
    )
    return TeamInvitationCreateResponse(
        invitation=TeamInvitationResponse.model_validate(invitation),
        accept_url=team_service.build_accept_url(invitation.token),
    )


@router.delete(
    "/invitations/{invitationId}", response_model=TeamInvitationResponse, tags=["Team"]
)
async def cancel_invitation(
    enterpriseId: uuid.UUID,
    invitationId: uuid.UUID,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Cancel a pending team invitation (admin or owner)."""
    invitation = await team_service.cancel_team_invitation(
        enterpriseId, invitationId, user.id, session
    )
    return TeamInvitationResponse.model_validate(invitation)


@router.patch("/{memberId}", response_model=TeamMemberResponse, tags=["Team"])
async def change_member_role(
    enterpriseId: uuid.UUID,
    memberId: uuid.UUID,
    body: RoleChangeRequest,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Change a member's role (admin or owner; the last owner cannot be demoted)."""
    member = await team_service.change_role(enterpriseId, memberId, body.role, user.id, session)
    return TeamMemberResponse.model_validate(member)


@router.delete("/{memberId}", tags=["Team"])
async def remove_member(
    enterpriseId: uuid.UUID,
    memberId: uuid.UUID,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Remove a member (admin or owner; the last owner cannot be removed)."""
    member = await team_service.remove_member(enterpriseId, memberId, user.id, session)
    return {"message": "Team member removed", "member_id": str(member.id)}


@router_invitations.get(
    "/invitations", response_model=MyTeamInvitationListResponse, tags=["Team"]
)
async def list_my_invitations(
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Pending, unexpired invitations addressed to the caller's e-mail."""
    rows = await team_service.list_my_invitations(user, session)
    return MyTeamInvitationListResponse(
        data=[
            MyTeamInvitationResponse(
                **TeamInvitationResponse.model_validate(invitation).model_dump(),
                token=invitation.token,
                accept_url=team_service.build_accept_url(invitation.token),
                enterprise=EnterpriseSummary.model_validate(enterprise),
            )
            for invitation, enterprise in rows
        ]
    )


@router_invitations.post(
    "/invitations/{token}/accept", response_model=TeamMemberResponse, tags=["Team"]
)
async def accept_invitation(
    token: str,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """Accept a team invitation addressed to the caller's e-mail."""
    member = await team_service.accept_team_invitation(token, user, session)
    return TeamMemberResponse.model_validate(member)


@router_invitations.get(
    "/team-memberships", response_model=TeamMembershipListResponse, tags=["Team"]
)
async def list_my_memberships(
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    rows = await team_service.list_my_memberships(user.id, session)
    return TeamMembershipListResponse(
        data=[
            TeamMembershipResponse(
                **TeamMemberResponse.model_validate(member).model_dump(),
                enterprise=EnterpriseSummary.model_validate(enterprise),
            )
            for member, enterprise in rows
        ]
    )
