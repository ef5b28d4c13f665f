"""
Status transition engine for contact journeys, enterprise claims and
team invitations.

Transitions are forward-only and one step at a time; the tables live in
``earthcare_shared.schemas.common``. Re-applying the current status is an
error, never a no-op.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from app.core.errors import InvalidTransition
from earthcare_shared.schemas.common import (
    CLAIM_TRANSITIONS,
    INVITATION_TRANSITIONS,
    TEAM_INVITATION_TRANSITIONS,
    ClaimStatus,
    InvitationStatus,
    TeamInvitationStatus,
)

S = TypeVar("S", bound=Enum)


def ensure_transition(
    table: dict[S, list[S]], current: S, target: S, *, field: str
) -> S:
    """Return ``target`` if ``current -> target`` is legal, else raise InvalidTransition."""
    if target not in table.get(current, []):
        raise InvalidTransition(
            f"Cannot change {field} from '{current.value}' to '{target.value}'"
        )
    return target


def next_invitation_status(current: str, target: InvitationStatus) -> str:
    return ensure_transition(
        INVITATION_TRANSITIONS,
        InvitationStatus(current),
        target,
        field="invitation_status",
    ).value


def next_claim_status(current: str, target: ClaimStatus) -> str:
    return ensure_transition(
        CLAIM_TRANSITIONS,
        ClaimStatus(current),
        target,
        field="claim_status",
    ).value


def next_team_invitation_status(current: str, target: TeamInvitationStatus) -> str:
    return ensure_transition(
        TEAM_INVITATION_TRANSITIONS,
        TeamInvitationStatus(current),
        target,
        field="status",
    ).value
