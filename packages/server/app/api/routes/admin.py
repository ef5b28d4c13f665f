"""
Admin endpoints for claim invitations (platform admins only).

POST  /api/admin/invitations                      - Invite a contact to claim an enterprise
GET   /api/admin/invitations                      - List claim invitations
PATCH /api/admin/invitations/{personId}           - Advance a contact's invitation/claim status
POST  /api/admin/enterprises/invite-batch         - Invite every unclaimed enterprise contact
POST  /api/admin/enterprises/{enterpriseId}/verify - claimed -> verified
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_platform_admin
from app.core.database import get_session
from app.models.user import User
from app.services import claims as claim_service
from app.services import invitations as invitation_service
from earthcare_shared.schemas.common import ClaimInvitationStatus
from earthcare_shared.schemas.enterprises import EnterpriseResponse
from earthcare_shared.schemas.invitations import (
    BatchInviteRequest,
    BatchInviteResponse,
    ContactStatusResponse,
    ContactStatusUpdateRequest,
    InvitationCreateRequest,
    InvitationCreateResponse,
    InvitationListResponse,
    InvitationResponse,
)

router = APIRouter()


@router.post(
    "/invitations",
    response_model=InvitationCreateResponse,
    status_code=201,
    tags=["Admin"],
)
async def create_invitation(
    body: InvitationCreateRequest,
    admin: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    """Issue a claim invitation for a (contact, enterprise) pair."""
    invitation = await invitation_service.create_invitation(body, admin.id, session)
    return InvitationCreateResponse(
        invitation=InvitationResponse.model_validate(invitation),
        token=invitation.token,
        claim_url=claim_service.build_claim_url(invitation.token),
    )


@router.get("/invitations", response_model=InvitationListResponse, tags=["Admin"])
async def list_invitations(
    status: Optional[ClaimInvitationStatus] = None,
    enterprise_id: Optional[uuid.UUID] = None,
    admin: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    invitations = await invitation_service.list_invitations(
        session, status=status, enterprise_id=enterprise_id
    )
    return InvitationListResponse(
        data=[InvitationResponse.model_validate(i) for i in invitations]
    )


@router.patch(
    "/invitations/{personId}", response_model=ContactStatusResponse, tags=["Admin"]
)
async def update_contact_status(
    personId: uuid.UUID,
    body: ContactStatusUpdateRequest,
    admin: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    """Advance a contact's invitation and/or claim status (forward only)."""
    person = await invitation_service.update_contact_status(personId, body, session)
    return ContactStatusResponse.model_validate(person)


@router.post(
    "/enterprises/invite-batch",
    response_model=BatchInviteResponse,
    tags=["Admin"],
)
async def invite_batch(
    body: BatchInviteRequest,
    admin: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    return await invitation_service.batch_invite(body.enterprise_ids, admin.id, session)


@router.post(
    "/enterprises/{enterpriseId}/verify",
    response_model=EnterpriseResponse,
    tags=["Admin"],
)
async def verify_enterprise(
    enterpriseId: uuid.UUID,
    admin: User = Depends(require_platform_admin),
    session: AsyncSession = Depends(get_session),
):
    enterprise = await claim_service.verify_enterprise(enterpriseId, session)
    return EnterpriseResponse.model_validate(enterprise)
