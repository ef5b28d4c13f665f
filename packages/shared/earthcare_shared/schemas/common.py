"""
Enums and transition tables shared between the server and its clients.

Covers: enterprise categories, contact journey states, claim invitation
lifecycle, team roles and the role capability table.
"""

from __future__ import annotations

from enum import Enum


# ---------------------------------------------------------------------------
# Enterprise / contact states
# ---------------------------------------------------------------------------

class EnterpriseCategory(str, Enum):
    LAND_PROJECTS = "land_projects"
    CAPITAL_SOURCES = "capital_sources"
    OPEN_SOURCE_TOOLS = "open_source_tools"
    NETWORK_ORGANIZERS = "network_organizers"


class InvitationStatus(str, Enum):
    NOT_INVITED = "not_invited"
    INVITED = "invited"
    SIGNED_UP = "signed_up"
    ACTIVE = "active"


class ClaimStatus(str, Enum):
    UNCLAIMED = "unclaimed"
    CLAIMED = "claimed"
    VERIFIED = "verified"


class ClaimInvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class TeamInvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserRole(str, Enum):
    """Platform-wide role (distinct from a team role within an enterprise)."""
    VISITOR = "visitor"
    MEMBER = "member"
    ENTERPRISE_OWNER = "enterprise_owner"
    ADMIN = "admin"


# ---------------------------------------------------------------------------
# Lifecycle transitions (forward-only, one step at a time)
# ---------------------------------------------------------------------------

INVITATION_TRANSITIONS: dict[InvitationStatus, list[InvitationStatus]] = {
    InvitationStatus.NOT_INVITED: [InvitationStatus.INVITED],
    InvitationStatus.INVITED: [InvitationStatus.SIGNED_UP],
    InvitationStatus.SIGNED_UP: [InvitationStatus.ACTIVE],
    InvitationStatus.ACTIVE: [],
}

CLAIM_TRANSITIONS: dict[ClaimStatus, list[ClaimStatus]] = {
    ClaimStatus.UNCLAIMED: [ClaimStatus.CLAIMED],
    ClaimStatus.CLAIMED: [ClaimStatus.VERIFIED],
    ClaimStatus.VERIFIED: [],
}

TEAM_INVITATION_TRANSITIONS: dict[TeamInvitationStatus, list[TeamInvitationStatus]] = {
    TeamInvitationStatus.PENDING: [
        TeamInvitationStatus.ACCEPTED,
        TeamInvitationStatus.EXPIRED,
        TeamInvitationStatus.CANCELLED,
    ],
    TeamInvitationStatus.ACCEPTED: [],
    TeamInvitationStatus.EXPIRED: [],
    TeamInvitationStatus.CANCELLED: [],
}


# ---------------------------------------------------------------------------
# Team roles
# ---------------------------------------------------------------------------

class TeamRole(str, Enum):
    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return ROLE_RANK[self]


class Capability(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    MANAGE_TEAM = "manage_team"
    INVITE_MEMBERS = "invite_members"
    ASSIGN_OWNER = "assign_owner"


ROLE_RANK: dict[TeamRole, int] = {
    TeamRole.VIEWER: 1,
    TeamRole.EDITOR: 2,
    TeamRole.ADMIN: 3,
    TeamRole.OWNER: 4,
}

ROLE_CAPABILITIES: dict[TeamRole, frozenset[Capability]] = {
    TeamRole.VIEWER: frozenset({Capability.VIEW}),
    TeamRole.EDITOR: frozenset({Capability.VIEW, Capability.EDIT}),
    TeamRole.ADMIN: frozenset(
        {Capability.VIEW, Capability.EDIT, Capability.MANAGE_TEAM, Capability.INVITE_MEMBERS}
    ),
    TeamRole.OWNER: frozenset(
        {
            Capability.VIEW,
            Capability.EDIT,
            Capability.MANAGE_TEAM,
            Capability.INVITE_MEMBERS,
            Capability.ASSIGN_OWNER,
        }
    ),
}

# Roles that can be offered through a team invitation
INVITABLE_ROLES: tuple[TeamRole, ...] = (TeamRole.VIEWER, TeamRole.EDITOR, TeamRole.ADMIN)


def has_capability(role: TeamRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES[role]
