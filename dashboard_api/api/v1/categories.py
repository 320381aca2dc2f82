"""
Category API endpoints.

GET    /api/v1/categories    - List the category taxonomy (any signed-in user)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dashboard_api.api.deps import get_categories_service, no_permission_policy
from dashboard_api.core.permissions import PermissionCheckedRoute, PermissionDecision
from dashboard_api.schemas.categories import CategoryListResponse
from dashboard_api.services.categories import CategoriesService

router = APIRouter(route_class=PermissionCheckedRoute)


@router.get("", response_model=CategoryListResponse, tags=["Categories"])
async def list_categories(
    decision: PermissionDecision = Depends(no_permission_policy),
    categories: CategoriesService = Depends(get_categories_service),
):
    """List all categories."""
    return await categories.list_categories()
