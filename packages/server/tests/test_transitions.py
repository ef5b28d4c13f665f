"""
Tests for the status transition engine and the team role tables.
"""

from __future__ import annotations

import pytest

from app.core.errors import InvalidTransition
from app.services.transitions import (
    ensure_transition,
    next_claim_status,
    next_invitation_status,
    next_team_invitation_status,
)
from earthcare_shared.schemas.common import (
    CLAIM_TRANSITIONS,
    INVITATION_TRANSITIONS,
    ROLE_CAPABILITIES,
    Capability,
    ClaimStatus,
    InvitationStatus,
    TeamInvitationStatus,
    TeamRole,
    has_capability,
)


class TestInvitationTransitions:
    """Contact journey: not_invited -> invited -> signed_up -> active."""

    @pytest.mark.parametrize(
        "current,target",
        [
            ("not_invited", InvitationStatus.INVITED),
            ("invited", InvitationStatus.SIGNED_UP),
            ("signed_up", InvitationStatus.ACTIVE),
        ],
    )
    def test_single_forward_step(self, current, target):
        assert next_invitation_status(current, target) == target.value

    def test_skipping_a_step_is_rejected(self):
        with pytest.raises(InvalidTransition):
            next_invitation_status("not_invited", InvitationStatus.SIGNED_UP)

    def test_backwards_is_rejected(self):
        with pytest.raises(InvalidTransition):
            next_invitation_status("signed_up", InvitationStatus.INVITED)

    def test_same_status_is_rejected(self):
        with pytest.raises(InvalidTransition):
            next_invitation_status("invited", InvitationStatus.INVITED)

    def test_active_is_terminal(self):
        assert INVITATION_TRANSITIONS[InvitationStatus.ACTIVE] == []
        for target in InvitationStatus:
            with pytest.raises(InvalidTransition):
                next_invitation_status("active", target)


class TestTeamInvitationTransitions:
    @pytest.mark.parametrize(
        "target",
        [
            TeamInvitationStatus.ACCEPTED,
            TeamInvitationStatus.EXPIRED,
            TeamInvitationStatus.CANCELLED,
        ],
    )
    def test_pending_resolves_once(self, target):
        assert next_team_invitation_status("pending", target) == target.value
        for later in TeamInvitationStatus:
            with pytest.raises(InvalidTransition):
                next_team_invitation_status(target.value, later)

class TestClaimTransitions:
    def test_unclaimed_to_claimed(self):
        assert next_claim_status("unclaimed", ClaimStatus.CLAIMED) == "claimed"

    def test_claimed_to_verified(self):
        assert next_claim_status("claimed", ClaimStatus.VERIFIED) == "verified"

    def test_unclaimed_cannot_jump_to_verified(self):
        with pytest.raises(InvalidTransition) as exc_info:
            next_claim_status("unclaimed", ClaimStatus.VERIFIED)
        assert "unclaimed" in exc_info.value.message
        assert exc_info.value.status_code == 409

    def test_verified_is_terminal(self):
        assert CLAIM_TRANSITIONS[ClaimStatus.VERIFIED] == []

    def test_ensure_transition_reports_field(self):
        with pytest.raises(InvalidTransition, match="claim_status"):
            ensure_transition(
                CLAIM_TRANSITIONS, ClaimStatus.CLAIMED, ClaimStatus.UNCLAIMED, field="claim_status"
            )


class TestTeamRoles:
    def test_rank_order(self):
        ranks = [r.rank for r in (TeamRole.VIEWER, TeamRole.EDITOR, TeamRole.ADMIN, TeamRole.OWNER)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    def test_capabilities_grow_with_rank(self):
        ordered = sorted(TeamRole, key=lambda r: r.rank)
        for lower, higher in zip(ordered, ordered[1:]):
            assert ROLE_CAPABILITIES[lower] <= ROLE_CAPABILITIES[higher]

    def test_only_owner_assigns_owner(self):
        assert has_capability(TeamRole.OWNER, Capability.ASSIGN_OWNER)
        assert not has_capability(TeamRole.ADMIN, Capability.ASSIGN_OWNER)

    def test_editor_cannot_manage_team(self):
        assert has_capability(TeamRole.EDITOR, Capability.EDIT)
        assert not has_capability(TeamRole.EDITOR, Capability.MANAGE_TEAM)
        assert not has_capability(TeamRole.VIEWER, Capability.INVITE_MEMBERS)
