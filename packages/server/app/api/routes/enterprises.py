"""
Enterprise claim endpoints.

GET  /api/enterprises/claim/{token}          - Claim preview (public)
POST /api/enterprises/claim/{token}          - Claim the enterprise for the caller
GET  /api/enterprises/{enterpriseId}/claim-status - Public claim-status probe
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user_id
from app.core.database import get_session
from app.core.errors import Expired
from app.services import claims as claim_service
from earthcare_shared.schemas.enterprises import (
    ClaimInvitationSummary,
    ClaimPreviewResponse,
    ClaimResultResponse,
    ClaimStatusResponse,
    EnterpriseResponse,
)

router = APIRouter()


@router.get("/claim/{token}", response_model=ClaimPreviewResponse, tags=["Claims"])
async def preview_claim(
    token: str,
    session: AsyncSession = Depends(get_session),
):
    """Show what a claim token refers to. 404 for unknown, 410 for expired tokens."""
    resolution = await claim_service.resolve_claim(token, session)
    return ClaimPreviewResponse(
        enterprise=EnterpriseResponse.model_validate(resolution.enterprise),
        invitation=ClaimInvitationSummary.model_validate(resolution.invitation),
    )


@router.post("/claim/{token}", response_model=ClaimResultResponse, tags=["Claims"])
async def execute_claim(
    token: str,
    user_id: Optional[uuid.UUID] = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Claim the enterprise for the authenticated caller.

    401 when anonymous; 409 when the enterprise is already claimed or the
    token has expired.
    """
    try:
        enterprise = await claim_service.execute_claim(token, user_id, session)
    except Expired as exc:
        raise Expired(exc.message, status_code=409) from exc
    return ClaimResultResponse(enterprise=EnterpriseResponse.model_validate(enterprise))


@router.get("/{enterpriseId}/claim-status", response_model=ClaimStatusResponse, tags=["Claims"])
async def claim_status(
    enterpriseId: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    """Whether the enterprise can still be claimed."""
    return ClaimStatusResponse(**await claim_service.get_claim_status(enterpriseId, session))
