"""
Payee API endpoints.

GET    /api/v1/sites/{site_id}/site_settings/payees                    - Payee, name flag and portal iframes
POST   /api/v1/sites/{site_id}/site_settings/payees                    - Create a payee for the site
GET    /api/v1/sites/{site_id}/site_settings/payees/existing_payees    - Payees the caller may attach
PATCH  /api/v1/sites/{site_id}/site_settings/payees/confirm_payee_name - Mark the payee name as confirmed
PATCH  /api/v1/sites/{site_id}/site_settings/payees/confirm            - Mark the payee as completed
PATCH  /api/v1/sites/{site_id}/site_settings/payees/choose             - Attach an existing payee
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dashboard_api.api.deps import can_manage_payees, get_payees_service, get_referer
from dashboard_api.core.permissions import PermissionCheckedRoute, PermissionDecision
from dashboard_api.schemas.payees import (
    ExistingPayeesResponse,
    PayeeChooseRequest,
    PayeeCreateRequest,
    SitePayeeSettingsResponse,
)
from dashboard_api.services.payees import PayeesService

router = APIRouter(route_class=PermissionCheckedRoute)


@router.get("", response_model=SitePayeeSettingsResponse, tags=["Payees"])
async def get_payee(
    site_id: int,
    decision: PermissionDecision = Depends(can_manage_payees),
    payees: PayeesService = Depends(get_payees_service),
    referer: str = Depends(get_referer),
):
    return await payees.get_site_payee_settings(site_id, referer)


@router.post("", response_model=SitePayeeSettingsResponse, status_code=201, tags=["Payees"])
async def create_payee(
    site_id: int,
    body: PayeeCreateRequest,
    decision: PermissionDecision = Depends(can_manage_payees),
    payees: PayeesService = Depends(get_payees_service),
    referer: str = Depends(get_referer),
):
    """Create a payee and attach it to the site. Not allowed for test sites."""
    await payees.create_payee_for_site(site_id, body.name)
    return await payees.get_site_payee_settings(site_id, referer)


@router.get("/existing_payees", response_model=ExistingPayeesResponse, tags=["Payees"])
async def get_existing_payees(
    site_id: int,
    decision: PermissionDecision = Depends(can_manage_payees),
    payees: PayeesService = Depends(get_payees_service),
):
    return await payees.get_existing_payees(decision.user)


@router.patch("/confirm_payee_name", response_model=SitePayeeSettingsResponse, tags=["Payees"])
async def confirm_payee_name(
    site_id: int,
    decision: PermissionDecision = Depends(can_manage_payees),
    payees: PayeesService = Depends(get_payees_service),
    referer: str = Depends(get_referer),
):
    await payees.confirm_payee_name(site_id)
    return await payees.get_site_payee_settings(site_id, referer)


@router.patch("/confirm", response_model=SitePayeeSettingsResponse, tags=["Payees"])
async def confirm_payee(
    site_id: int,
    decision: PermissionDecision = Depends(can_manage_payees),
    payees: PayeesService = Depends(get_payees_service),
    referer: str = Depends(get_referer),
):
    await payees.confirm_payee(site_id)
    return await payees.get_site_payee_settings(site_id, referer)


@router.patch("/choose", response_model=SitePayeeSettingsResponse, tags=["Payees"])
async def choose_payee(
    site_id: int,
    body: PayeeChooseRequest,
    decision: PermissionDecision = Depends(can_manage_payees),
    payees: PayeesService = Depends(get_payees_service),
    referer: str = Depends(get_referer),
):
    """Attach a payee the caller already manages on another site."""
    await payees.choose_payee(site_id, body.payee_id, decision.user)
    return await payees.get_site_payee_settings(site_id, referer)
