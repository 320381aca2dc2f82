"""
Site user endpoints.

GET    /api/v1/sites/{site_id}/site_users                 - List members and their roles
POST   /api/v1/sites/{site_id}/site_users                 - Add a member (first member becomes owner)
PATCH  /api/v1/sites/{site_id}/site_users/{site_user_id}  - Replace a member's roles
DELETE /api/v1/sites/{site_id}/site_users/{site_user_id}  - Remove a member and revoke their sessions
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from dashboard_api.api.deps import can_manage_site_users, get_site_users_service
from dashboard_api.core.permissions import PermissionCheckedRoute, PermissionDecision
from dashboard_api.schemas.site_users import (
    SiteUserCreateRequest,
    SiteUserListResponse,
    SiteUserRead,
    SiteUserUpdateRequest,
)
from dashboard_api.services.site_users import SiteUsersService

router = APIRouter(route_class=PermissionCheckedRoute)


@router.get("", response_model=SiteUserListResponse, tags=["Site Users"])
async def list_site_users(
    site_id: int,
    decision: PermissionDecision = Depends(can_manage_site_users),
    service: SiteUsersService = Depends(get_site_users_service),
):
    return await service.list_site_users(site_id)


@router.post("", response_model=SiteUserRead, status_code=201, tags=["Site Users"])
async def create_site_user(
    site_id: int,
    body: SiteUserCreateRequest,
    decision: PermissionDecision = Depends(can_manage_site_users),
    service: SiteUsersService = Depends(get_site_users_service),
):
    return await service.create_site_user(site_id, body)


@router.patch("/{site_user_id}", response_model=SiteUserRead, tags=["Site Users"])
async def update_site_user(
    site_id: int,
    site_user_id: int,
    body: SiteUserUpdateRequest,
    decision: PermissionDecision = Depends(can_manage_site_users),
    service: SiteUsersService = Depends(get_site_users_service),
):
    return await service.update_site_user(site_id, site_user_id, body)


@router.delete("/{site_user_id}", status_code=204, tags=["Site Users"])
async def delete_site_user(
    site_id: int,
    site_user_id: int,
    decision: PermissionDecision = Depends(can_manage_site_users),
    service: SiteUsersService = Depends(get_site_users_service),
):
    await service.delete_site_user(site_id, site_user_id)
    return Response(status_code=204)
