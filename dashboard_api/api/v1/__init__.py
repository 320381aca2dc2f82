"""
API v1 Router

All site-scoped endpoints are prefixed with /sites/{site_id}; /categories is
open to any signed-in user.
"""

from fastapi import APIRouter

from . import categories, payees, site_settings, site_users, sites

router = APIRouter()

router.include_router(sites.router, prefix="/sites", tags=["Sites"])
router.include_router(
    site_settings.router, prefix="/sites/{site_id}/site_settings", tags=["Site Settings"]
)
router.include_router(
    payees.router, prefix="/sites/{site_id}/site_settings/payees", tags=["Payees"]
)
router.include_router(site_users.router, prefix="/sites/{site_id}/site_users", tags=["Site Users"])
router.include_router(categories.router, prefix="/categories", tags=["Categories"])


@router.get("/", tags=["API"])
async def api_root():
    """API root - returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/sites/{site_id}",
            "/sites/{site_id}/site_settings/profile_settings",
            "/sites/{site_id}/site_settings/payees",
            "/sites/{site_id}/site_users",
            "/categories",
        ],
    }
