"""Admin claim-invitation schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from .common import ClaimInvitationStatus, ClaimStatus, InvitationStatus


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class InvitationCreateRequest(BaseModel):
    """Invite a contact to claim their enterprise."""
    person_id: uuid.UUID
    enterprise_id: uuid.UUID
    email: Optional[EmailStr] = None  # defaults to the contact's e-mail
    name: Optional[str] = Field(default=None, max_length=200)


class ContactStatusUpdateRequest(BaseModel):
    """Advance a contact's journey. At least one field is required."""
    invitation_status: Optional[InvitationStatus] = None
    claim_status: Optional[ClaimStatus] = None

    @model_validator(mode="after")
    def _at_least_one(self) -> "ContactStatusUpdateRequest":
        if self.invitation_status is None and self.claim_status is None:
            raise ValueError("invitation_status or claim_status is required")
        return self


class BatchInviteRequest(BaseModel):
    # None means every unclaimed enterprise that has a contact e-mail
    enterprise_ids: Optional[List[uuid.UUID]] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class InvitationResponse(BaseModel):
    id: uuid.UUID
    enterprise_id: uuid.UUID
    person_id: Optional[uuid.UUID] = None
    invited_email: str
    invited_name: Optional[str] = None
    invited_at: datetime
    expires_at: datetime
    status: ClaimInvitationStatus
    accepted_by: Optional[uuid.UUID] = None
    accepted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class InvitationCreateResponse(BaseModel):
    """The token is only returned to the admin who created the invitation."""
    invitation: InvitationResponse
    token: str
    claim_url: str


class InvitationListResponse(BaseModel):
    data: List[InvitationResponse]


class ContactStatusResponse(BaseModel):
    id: uuid.UUID
    enterprise_id: Optional[uuid.UUID] = None
    invitation_status: InvitationStatus
    claim_status: ClaimStatus

    model_config = {"from_attributes": True}


class BatchInviteError(BaseModel):
    enterprise_id: uuid.UUID
    error: str


class BatchInviteResponse(BaseModel):
    total_enterprises: int
    success_count: int
    failure_count: int
    errors: List[BatchInviteError] = []
