"""
Site API endpoints.

GET    /api/v1/sites/{site_id}    - Site summary (report data only for reporting roles)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dashboard_api.api.deps import can_access_site, get_sites_service
from dashboard_api.core.permissions import PermissionCheckedRoute, PermissionDecision
from dashboard_api.schemas.sites import SiteSummaryResponse
from dashboard_api.services.sites import SitesService

router = APIRouter(route_class=PermissionCheckedRoute)


@router.get("/{site_id}", response_model=SiteSummaryResponse, tags=["Sites"])
async def get_site(
    site_id: int,
    decision: PermissionDecision = Depends(can_access_site),
    sites: SitesService = Depends(get_sites_service),
):
    """Get a site by id."""
    return await sites.get_site(site_id, show_report_data=decision.show_report_data)
