"""Team membership and team invitation schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator

from .common import (
    INVITABLE_ROLES,
    ClaimStatus,
    EnterpriseCategory,
    MemberStatus,
    TeamInvitationStatus,
    TeamRole,
)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RoleChangeRequest(BaseModel):
    role: TeamRole


class TeamInvitationCreateRequest(BaseModel):
    email: EmailStr
    role: TeamRole = TeamRole.VIEWER

    @field_validator("role")
    @classmethod
    def _invitable(cls, value: TeamRole) -> TeamRole:
        if value not in INVITABLE_ROLES:
            raise ValueError("Role must be viewer, editor, or admin")
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TeamMemberResponse(BaseModel):
    id: uuid.UUID
    enterprise_id: uuid.UUID
    user_id: uuid.UUID
    role: TeamRole
    status: MemberStatus
    invited_by: Optional[uuid.UUID] = None
    join_date: datetime

    model_config = {"from_attributes": True}


class TeamListResponse(BaseModel):
    data: List[TeamMemberResponse]


class TeamInvitationResponse(BaseModel):
    id: uuid.UUID
    enterprise_id: uuid.UUID
    email: str
    role: TeamRole
    status: TeamInvitationStatus
    inviter_id: Optional[uuid.UUID] = None
    expires_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class TeamInvitationCreateResponse(BaseModel):
    invitation: TeamInvitationResponse
    accept_url: str


class TeamInvitationListResponse(BaseModel):
    data: List[TeamInvitationResponse]


class EnterpriseSummary(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    category: EnterpriseCategory
    location: Optional[str] = None
    claim_status: ClaimStatus

    model_config = {"from_attributes": True}


class MyTeamInvitationResponse(TeamInvitationResponse):
    """A pending invitation shown to its addressee, who may accept it."""
    token: str
    accept_url: str
    enterprise: EnterpriseSummary


class MyTeamInvitationListResponse(BaseModel):
    data: List[MyTeamInvitationResponse]


class TeamMembershipResponse(TeamMemberResponse):
    enterprise: EnterpriseSummary


class TeamMembershipListResponse(BaseModel):
    data: List[TeamMembershipResponse]
