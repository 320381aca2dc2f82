"""Payee storage."""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from sqlmodel import select

from dashboard_api.models.payee import Payee
from dashboard_api.models.site import Site
from dashboard_api.models.site_user import SiteUser
from dashboard_api.repositories.base import Repository


def _holds_any_role(roles: tuple[int, ...]):
    return sa.or_(*(SiteUser.roles_mask.op("&")(role) == role for role in roles))


class PayeeRepository(Repository):
    async def find_site(self, site_id: int) -> Optional[Site]:
        return await self.get(Site, site_id)

    async def find_payee(self, payee_id: int) -> Optional[Payee]:
        return await self.get(Payee, payee_id)

    async def find_payee_for_site(self, site_id: int) -> Optional[Payee]:
        result = await self.execute(
            select(Payee).join(Site, Site.payee_id == Payee.id).where(Site.id == site_id)
        )
        return result.scalar_one_or_none()

    async def create_payee_for_site(self, site_id: int, name: str, payee_uuid: str) -> Payee:
        payee = await self.add(Payee(name=name, uuid=payee_uuid))
        await self.set_site_payee(site_id, payee.id)
        return payee

    async def set_site_payee(self, site_id: int, payee_id: int) -> None:
        await self.execute(
            sa.update(Site)
            .where(Site.id == site_id)
            .values(payee_id=payee_id, updated_at=sa.func.now())
        )

    async def mark_tipalti_completed(self, payee_id: int) -> None:
        await self.execute(
            sa.update(Payee)
            .where(Payee.id == payee_id)
            .values(tipalti_completed=True, updated_at=sa.func.now())
        )

    async def user_has_payee_access(
        self, user_id: int, payee_id: int, roles: tuple[int, ...]
    ) -> bool:
        """True if the user holds one of ``roles`` on any site using the payee."""
        result = await self.execute(
            select(Site.id)
            .join(SiteUser, SiteUser.site_id == Site.id)
            .where(
                Site.payee_id == payee_id,
                SiteUser.user_id == user_id,
                _holds_any_role(roles),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_attached_payees(
        self, user_id: Optional[int], roles: tuple[int, ...]
    ) -> list[Payee]:
        """Payees used by at least one site; restricted to the user's sites unless ``user_id`` is None."""
        sites = select(Site.payee_id).where(Site.payee_id.is_not(None))
        if user_id is not None:
            sites = sites.join(SiteUser, SiteUser.site_id == Site.id).where(
                SiteUser.user_id == user_id, _holds_any_role(roles)
            )
        result = await self.execute(
            select(Payee).where(Payee.id.in_(sites)).order_by(Payee.name)
        )
        return list(result.scalars().all())
