"""
API Router

Enterprise-scoped team endpoints are prefixed with /enterprises/{enterpriseId}/team.
"""

from fastapi import APIRouter

from . import admin, enterprises, team

router = APIRouter()

router.include_router(enterprises.router, prefix="/enterprises", tags=["Claims"])
router.include_router(team.router, prefix="/enterprises/{enterpriseId}/team", tags=["Team"])
router.include_router(team.router_invitations, prefix="/team", tags=["Team"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "earthcare",
        "version": "0.1.0",
        "endpoints": [
            "/enterprises/claim/{token}",
            "/enterprises/{enterpriseId}/claim-status",
            "/enterprises/{enterpriseId}/team",
            "/enterprises/{enterpriseId}/team/invitations",
            "/team/invitations",
            "/team/invitations/{token}/accept",
            "/team/team-memberships",
            "/admin/invitations",
            "/admin/enterprises/invite-batch",
        ],
    }
