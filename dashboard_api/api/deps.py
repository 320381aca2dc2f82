"""
FastAPI dependency providers: services bound to the request's sessions,
and the permission policies routes declare.

Each policy dependency returns a ``PermissionDecision``; routes built
with ``PermissionCheckedRoute`` must depend on one of them.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_api.core.auth import get_request_user
from dashboard_api.core.config import get_settings
from dashboard_api.core.database import get_reporting_session, get_session
from dashboard_api.core.permissions import PermissionDecision, PermissionsService, RequestUser
from dashboard_api.repositories.payees import PayeeRepository
from dashboard_api.repositories.reporting import ReportingRepository
from dashboard_api.repositories.site_users import SiteUserRepository
from dashboard_api.repositories.sites import SiteRepository
from dashboard_api.repositories.users import UserRepository
from dashboard_api.services.categories import CategoriesService
from dashboard_api.services.payees import PayeesService
from dashboard_api.services.revenue_share import RevenueShareService
from dashboard_api.services.site_settings import LoggingNotifier, SiteSettingsService
from dashboard_api.services.site_users import SiteUsersService
from dashboard_api.services.sites import SitesService


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def get_permissions_service(session: AsyncSession = Depends(get_session)) -> PermissionsService:
    return PermissionsService(SiteRepository(session))


def get_revenue_share_service(
    reporting_session: AsyncSession = Depends(get_reporting_session),
) -> RevenueShareService:
    reporting = ReportingRepository(reporting_session)
    return RevenueShareService(reporting, reporting)


def get_sites_service(
    session: AsyncSession = Depends(get_session),
    revenue_share: RevenueShareService = Depends(get_revenue_share_service),
) -> SitesService:
    return SitesService(SiteRepository(session), revenue_share)


def get_payees_service(session: AsyncSession = Depends(get_session)) -> PayeesService:
    settings = get_settings()
    return PayeesService(
        PayeeRepository(session),
        SiteRepository(session),
        api_key=settings.tipalti_api_key,
        base_url=settings.tipalti_base_url,
        history_url=settings.tipalti_history_url,
    )


def get_site_settings_service(
    session: AsyncSession = Depends(get_session),
    reporting_session: AsyncSession = Depends(get_reporting_session),
) -> SiteSettingsService:
    return SiteSettingsService(
        SiteRepository(session),
        LoggingNotifier(),
        premiere_summaries=ReportingRepository(reporting_session),
    )


def get_site_users_service(session: AsyncSession = Depends(get_session)) -> SiteUsersService:
    return SiteUsersService(SiteUserRepository(session), UserRepository(session))


def get_categories_service(session: AsyncSession = Depends(get_session)) -> CategoriesService:
    return CategoriesService(SiteRepository(session))


def get_referer(request: Request) -> str:
    """Where the payment portal should send the user back to."""
    return request.headers.get("referer") or f"{request.url.scheme}://{request.url.hostname}"


# ---------------------------------------------------------------------------
# Permission policies
# ---------------------------------------------------------------------------

async def can_access_site(
    site_id: int,
    user: Optional[RequestUser] = Depends(get_request_user),
    permissions: PermissionsService = Depends(get_permissions_service),
) -> PermissionDecision:
    return await permissions.assert_can_access_site(user, site_id)


async def can_manage_site_settings(
    site_id: int,
    user: Optional[RequestUser] = Depends(get_request_user),
    permissions: PermissionsService = Depends(get_permissions_service),
) -> PermissionDecision:
    return await permissions.assert_can_manage_site_settings(user, site_id)


async def can_manage_payees(
    site_id: int,
    user: Optional[RequestUser] = Depends(get_request_user),
    permissions: PermissionsService = Depends(get_permissions_service),
) -> PermissionDecision:
    return await permissions.assert_can_manage_payees(user, site_id)


async def can_manage_site_users(
    site_id: int,
    user: Optional[RequestUser] = Depends(get_request_user),
    permissions: PermissionsService = Depends(get_permissions_service),
) -> PermissionDecision:
    return await permissions.assert_can_manage_site_users(user, site_id)


async def no_permission_policy(
    user: Optional[RequestUser] = Depends(get_request_user),
    permissions: PermissionsService = Depends(get_permissions_service),
) -> PermissionDecision:
    return await permissions.assert_no_permission_policy(user)
