"""Site membership storage."""

from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
from sqlmodel import select

from dashboard_api.models.site_user import SiteUser
from dashboard_api.models.user import User
from dashboard_api.repositories.base import Repository


class SiteUserRepository(Repository):
    async def list_for_site(self, site_id: int) -> list[tuple[SiteUser, Optional[str]]]:
        result = await self.execute(
            select(SiteUser, User.email)
            .outerjoin(User, SiteUser.user_id == User.id)
            .where(SiteUser.site_id == site_id)
            .order_by(SiteUser.id)
        )
        return [(site_user, email) for site_user, email in result.all()]

    async def find_user_by_email(self, email: str) -> Optional[User]:
        result = await self.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_site_user(self, user_id: int, site_id: int) -> Optional[SiteUser]:
        result = await self.execute(
            select(SiteUser)
            .where(SiteUser.user_id == user_id, SiteUser.site_id == site_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def site_has_users(self, site_id: int) -> bool:
        result = await self.execute(
            select(SiteUser.id).where(SiteUser.site_id == site_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create_user(self, email: str) -> User:
        return await self.add(User(email=email, jwt_secret=str(uuid.uuid4())))

    async def create_site_user(self, site_id: int, user_id: int, roles_mask: int) -> SiteUser:
        return await self.add(SiteUser(site_id=site_id, user_id=user_id, roles_mask=roles_mask))

    async def get_site_user(self, site_user_id: int) -> Optional[SiteUser]:
        return await self.get(SiteUser, site_user_id)

    async def update_roles(self, site_user_id: int, roles_mask: int) -> SiteUser:
        result = await self.execute(
            sa.update(SiteUser)
            .where(SiteUser.id == site_user_id)
            .values(roles_mask=roles_mask, updated_at=sa.func.now())
            .returning(SiteUser)
            .execution_options(synchronize_session="fetch")
        )
        return result.scalar_one()

    async def delete_site_user(self, site_user_id: int) -> None:
        await self.execute(sa.delete(SiteUser).where(SiteUser.id == site_user_id))
