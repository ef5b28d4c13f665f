"""
Enterprise and claim-flow schemas.

Covers: enterprise read model, claim preview / result payloads,
public claim-status probe.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .common import ClaimInvitationStatus, ClaimStatus, EnterpriseCategory


class EnterpriseResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    category: EnterpriseCategory
    location: Optional[str] = None
    website: Optional[str] = None
    claim_status: ClaimStatus
    owner_user_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ClaimInvitationSummary(BaseModel):
    """Invitation metadata safe to show to whoever holds the token."""
    id: uuid.UUID
    invited_email: str
    invited_name: Optional[str] = None
    invited_at: datetime
    expires_at: datetime
    status: ClaimInvitationStatus

    model_config = {"from_attributes": True}


class ClaimPreviewResponse(BaseModel):
    enterprise: EnterpriseResponse
    invitation: ClaimInvitationSummary


class ClaimResultResponse(BaseModel):
    message: str = "Enterprise claimed successfully"
    enterprise: EnterpriseResponse


class ClaimStatusResponse(BaseModel):
    enterprise_id: uuid.UUID
    claim_status: ClaimStatus
    is_claimed: bool
    can_claim: bool
