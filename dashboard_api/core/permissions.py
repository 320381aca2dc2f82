"""
Site-scoped authorization.

Every check takes the acting user explicitly and returns a
``PermissionDecision``. Route handlers receive that decision through a
FastAPI dependency; ``PermissionCheckedRoute`` refuses to register a
handler that does not depend on one, so a route without a declared
policy fails at start-up rather than at request time.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol

import structlog
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute

from dashboard_api.core.errors import NotFoundError, UnauthorizedError
from dashboard_api.core.roles import SiteUserRole, has_any_role
from dashboard_api.models.site import Site
from dashboard_api.models.site_user import SiteUser

log = structlog.get_logger()

REPORT_DATA_ROLES = (
    SiteUserRole.owner,
    SiteUserRole.reporting,
    SiteUserRole.post_termination_new_owner,
)
SITE_SETTINGS_ROLES = (SiteUserRole.owner, SiteUserRole.ad_settings)
PAYEE_ROLES = (SiteUserRole.owner, SiteUserRole.payment)
SITE_USER_ROLES = (SiteUserRole.owner,)
VIDEO_ROLES = (SiteUserRole.owner, SiteUserRole.video)


@dataclass(frozen=True)
class RequestUser:
    """The authenticated caller, resolved once per request."""

    id: int
    email: str
    title: Optional[str] = None
    is_admin: bool = False


@dataclass(frozen=True)
class PermissionDecision:
    """Outcome of a passed permission check."""

    policy: str
    user: Optional[RequestUser] = None
    site_id: Optional[int] = None
    site_user: Optional[SiteUser] = None
    show_report_data: bool = False


class SiteUserLookup(Protocol):
    async def find_site_user(self, user_id: int, site_id: int) -> Optional[SiteUser]: ...

    async def find_site(self, site_id: int) -> Optional[Site]: ...

    async def find_video_site_id(self, slug: str) -> Optional[int]: ...


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

class PermissionsService:
    def __init__(self, lookup: SiteUserLookup):
        self.lookup = lookup

    @staticmethod
    def _authenticated(user: Optional[RequestUser]) -> RequestUser:
        if user is None:
            raise UnauthorizedError()
        return user

    async def assert_can_access_site(
        self, user: Optional[RequestUser], site_id: int
    ) -> PermissionDecision:
        """Any authenticated caller passes; report data needs a reporting role.

        Unlike the other checks this one does not fail for a caller with no
        membership on the site; they just don't get report data.
        """
        user = self._authenticated(user)
        if user.is_admin:
            return PermissionDecision(
                policy="can_access_site", user=user, site_id=site_id, show_report_data=True
            )

        site_user = await self.lookup.find_site_user(user.id, site_id)
        show_report_data = site_user is not None and has_any_role(
            site_user.roles_mask, REPORT_DATA_ROLES
        )
        return PermissionDecision(
            policy="can_access_site",
            user=user,
            site_id=site_id,
            site_user=site_user,
            show_report_data=show_report_data,
        )

    async def require_any_role(
        self,
        user: Optional[RequestUser],
        site_id: int,
        roles: Iterable[int],
        *,
        policy: str = "require_any_role",
    ) -> PermissionDecision:
        """Pass when the caller's membership on ``site_id`` carries any of ``roles``.

        A caller with no membership gets 404 if the site does not exist and
        401 if it does, so a missing site is distinguishable from a denied one.
        """
        user = self._authenticated(user)
        site_user = await self.lookup.find_site_user(user.id, site_id)

        if site_user is not None:
            if has_any_role(site_user.roles_mask, roles):
                return PermissionDecision(
                    policy=policy, user=user, site_id=site_id, site_user=site_user
                )
            log.info("permission.denied", policy=policy, user_id=user.id, site_id=site_id)
            raise UnauthorizedError()

        site = await self.lookup.find_site(site_id)
        if site is None:
            raise NotFoundError("Site not found")
        log.info("permission.denied", policy=policy, user_id=user.id, site_id=site_id)
        raise UnauthorizedError()

    async def _admin_or_roles(
        self, user: Optional[RequestUser], site_id: int, roles: Iterable[int], policy: str
    ) -> PermissionDecision:
        user = self._authenticated(user)
        if user.is_admin:
            return PermissionDecision(policy=policy, user=user, site_id=site_id)
        return await self.require_any_role(user, site_id, roles, policy=policy)

    async def assert_can_manage_site_settings(
        self, user: Optional[RequestUser], site_id: int
    ) -> PermissionDecision:
        return await self._admin_or_roles(
            user, site_id, SITE_SETTINGS_ROLES, "can_manage_site_settings"
        )

    async def assert_can_manage_payees(
        self, user: Optional[RequestUser], site_id: int
    ) -> PermissionDecision:
        return await self._admin_or_roles(user, site_id, PAYEE_ROLES, "can_manage_payees")

    async def assert_can_manage_site_users(
        self, user: Optional[RequestUser], site_id: int
    ) -> PermissionDecision:
        return await self._admin_or_roles(user, site_id, SITE_USER_ROLES, "can_manage_site_users")

    async def assert_can_access_videos(
        self, user: Optional[RequestUser], site_id: int, slug: Optional[str] = None
    ) -> PermissionDecision:
        """With a ``slug`` the check runs against the site that owns the video."""
        user = self._authenticated(user)
        if slug:
            owning_site_id = await self.lookup.find_video_site_id(slug)
            if owning_site_id is None:
                raise NotFoundError("Video not found")
            site_id = owning_site_id
        return await self._admin_or_roles(user, site_id, VIDEO_ROLES, "can_access_videos")

    async def assert_is_admin(self, user: Optional[RequestUser]) -> PermissionDecision:
        user = self._authenticated(user)
        if not user.is_admin:
            raise UnauthorizedError()
        return PermissionDecision(policy="is_admin", user=user)

    async def assert_no_permission_policy(
        self, user: Optional[RequestUser]
    ) -> PermissionDecision:
        """Explicit opt-out for routes that only need an authenticated caller."""
        user = self._authenticated(user)
        return PermissionDecision(policy="no_permission_policy", user=user)


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

def _returns_decision(call: Any) -> bool:
    try:
        hints = typing.get_type_hints(call)
    except (NameError, TypeError):
        return False
    return hints.get("return") is PermissionDecision


def _has_decision(dependant: Dependant) -> bool:
    for sub in dependant.dependencies:
        if sub.call is not None and _returns_decision(sub.call):
            return True
        if _has_decision(sub):
            return True
    return False


class PermissionCheckedRoute(APIRoute):
    """APIRoute that only accepts endpoints depending on a permission policy."""

    def __init__(self, path: str, endpoint: Any, **kwargs: Any):
        super().__init__(path, endpoint, **kwargs)
        if not _has_decision(self.dependant):
            raise RuntimeError(
                f"Route {sorted(self.methods or [])} {path} ({endpoint.__name__}) "
                "declares no permission policy"
            )
