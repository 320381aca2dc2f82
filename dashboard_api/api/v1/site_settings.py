"""
Site profile settings endpoints.

GET    /api/v1/sites/{site_id}/site_settings/profile_settings - Profile, bags and categories
PATCH  /api/v1/sites/{site_id}/site_settings/profile_settings - Sparse update
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from dashboard_api.api.deps import can_manage_site_settings, get_site_settings_service
from dashboard_api.core.permissions import PermissionCheckedRoute, PermissionDecision
from dashboard_api.schemas.site_settings import ProfileSettingsResponse, ProfileSettingsUpdateRequest
from dashboard_api.services.site_settings import SiteSettingsService

router = APIRouter(route_class=PermissionCheckedRoute)


@router.get("/profile_settings", response_model=ProfileSettingsResponse, tags=["Site Settings"])
async def get_profile_settings(
    site_id: int,
    decision: PermissionDecision = Depends(can_manage_site_settings),
    service: SiteSettingsService = Depends(get_site_settings_service),
):
    return await service.get_profile_settings(site_id)


@router.patch("/profile_settings", status_code=204, tags=["Site Settings"])
async def update_profile_settings(
    site_id: int,
    body: ProfileSettingsUpdateRequest,
    decision: PermissionDecision = Depends(can_manage_site_settings),
    service: SiteSettingsService = Depends(get_site_settings_service),
):
    """Update profile settings. Omitted fields are left as they are; unknown fields are ignored."""
    await service.update_profile_settings(site_id, body, decision.user)
    return Response(status_code=204)
