"""
Site membership management: listing, inviting, re-roling and removing
the users attached to a site.
"""

from __future__ import annotations

from typing import Optional, Protocol

import structlog

from dashboard_api.core.errors import BadRequestError, NotFoundError, UnprocessableEntityError
from dashboard_api.core.roles import mask_from_role_keys, site_user_roles_from_mask
from dashboard_api.models.site_user import SiteUser
from dashboard_api.models.user import User
from dashboard_api.schemas.site_users import (
    SiteUserCreateRequest,
    SiteUserListItem,
    SiteUserListResponse,
    SiteUserRead,
    SiteUserUpdateRequest,
)

log = structlog.get_logger()


class SiteUserStore(Protocol):
    async def list_for_site(self, site_id: int) -> list[tuple[SiteUser, Optional[str]]]: ...

    async def find_user_by_email(self, email: str) -> Optional[User]: ...

    async def find_site_user(self, user_id: int, site_id: int) -> Optional[SiteUser]: ...

    async def site_has_users(self, site_id: int) -> bool: ...

    async def create_user(self, email: str) -> User: ...

    async def create_site_user(self, site_id: int, user_id: int, roles_mask: int) -> SiteUser: ...

    async def get_site_user(self, site_user_id: int) -> Optional[SiteUser]: ...

    async def update_roles(self, site_user_id: int, roles_mask: int) -> SiteUser: ...

    async def delete_site_user(self, site_user_id: int) -> None: ...


class SecretRotator(Protocol):
    async def rotate_user_secret(self, user_id: int) -> None: ...


def to_read(site_user: SiteUser) -> SiteUserRead:
    return SiteUserRead(
        id=site_user.id,
        site_id=site_user.site_id,
        user_id=site_user.user_id,
        roles=site_user_roles_from_mask(site_user.roles_mask),
        created_at=site_user.created_at,
        updated_at=site_user.updated_at,
    )


class SiteUsersService:
    def __init__(self, store: SiteUserStore, secrets: SecretRotator):
        self.store = store
        self.secrets = secrets

    async def list_site_users(self, site_id: int) -> SiteUserListResponse:
        rows = await self.store.list_for_site(site_id)
        return SiteUserListResponse(
            site_users=[
                SiteUserListItem(
                    site_user_id=site_user.id,
                    user_id=site_user.user_id,
                    site_id=site_user.site_id,
                    email=email,
                    roles=site_user_roles_from_mask(site_user.roles_mask),
                )
                for site_user, email in rows
            ]
        )

    async def create_site_user(self, site_id: int, body: SiteUserCreateRequest) -> SiteUserRead:
        if body.email != body.email_confirmation:
            raise UnprocessableEntityError(
                {"email_confirmation": ["email confirmation must match email address"]}
            )

        user = await self.store.find_user_by_email(body.email)
        if user is not None and await self.store.find_site_user(user.id, site_id) is not None:
            raise BadRequestError(
                {"email": ["Email already exists. Please add the role to an existing user."]}
            )

        roles = list(body.roles)
        # The first user on a site always owns it.
        if not await self.store.site_has_users(site_id):
            roles.append("owner")

        if user is None:
            user = await self.store.create_user(body.email)
            log.info("user.created", user_id=user.id)

        site_user = await self.store.create_site_user(site_id, user.id, mask_from_role_keys(roles))
        log.info("site_user.created", site_id=site_id, site_user_id=site_user.id, user_id=user.id)
        return to_read(site_user)

    async def _existing(self, site_id: int, site_user_id: int) -> SiteUser:
        site_user = await self.store.get_site_user(site_user_id)
        if site_user is None:
            raise NotFoundError()
        if site_user.site_id != site_id:
            raise BadRequestError("site_user_id does not match site_id of corresponding site_user")
        return site_user

    async def update_site_user(
        self, site_id: int, site_user_id: int, body: SiteUserUpdateRequest
    ) -> SiteUserRead:
        await self._existing(site_id, site_user_id)
        site_user = await self.store.update_roles(site_user_id, mask_from_role_keys(body.roles))
        log.info("site_user.updated", site_id=site_id, site_user_id=site_user_id, roles=body.roles)
        return to_read(site_user)

    async def delete_site_user(self, site_id: int, site_user_id: int) -> None:
        """Remove the membership and revoke the user's outstanding sessions."""
        site_user = await self._existing(site_id, site_user_id)
        await self.store.delete_site_user(site_user_id)
        if site_user.user_id:
            await self.secrets.rotate_user_secret(site_user.user_id)
        log.info("site_user.deleted", site_id=site_id, site_user_id=site_user_id)
