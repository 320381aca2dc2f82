"""
Site storage: permission lookups, hstore bag reads and merges, and the
site <-> category links.
"""

from __future__ import annotations

from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import HSTORE
from sqlmodel import select

from dashboard_api.models.category import Category, CategorySite
from dashboard_api.models.payee import Payee
from dashboard_api.models.site import Site
from dashboard_api.models.site_user import SiteUser
from dashboard_api.models.user import User
from dashboard_api.models.video import Video
from dashboard_api.repositories.base import Repository
from dashboard_api.services.settings_bags import BagMerge, RawSiteBags
from dashboard_api.services.sites import SiteWithPayee


def hstore_merge(column: Any, values: dict[str, Optional[str]]) -> Any:
    """``column = coalesce(column, '') || values``; NULL values clear keys."""
    return sa.func.coalesce(column, sa.cast("", HSTORE)).op("||")(
        sa.cast(sa.literal(values, HSTORE), HSTORE)
    )


class SiteRepository(Repository):
    # -- permission lookups ------------------------------------------------

    async def find_site(self, site_id: int) -> Optional[Site]:
        return await self.get(Site, site_id)

    async def find_site_user(self, user_id: int, site_id: int) -> Optional[SiteUser]:
        result = await self.execute(
            select(SiteUser)
            .where(SiteUser.user_id == user_id, SiteUser.site_id == site_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_video_site_id(self, slug: str) -> Optional[int]:
        result = await self.execute(select(Video.site_id).where(Video.slug == slug))
        return result.scalar_one_or_none()

    async def find_site_with_payee(self, site_id: int) -> Optional[SiteWithPayee]:
        result = await self.execute(
            select(Site, Payee)
            .outerjoin(Payee, Site.payee_id == Payee.id)
            .where(Site.id == site_id)
        )
        row = result.first()
        if row is None:
            return None
        site, payee = row
        return SiteWithPayee(site=site, payee=payee)

    # -- settings bags -----------------------------------------------------

    async def load_bags(self, site_id: int) -> Optional[RawSiteBags]:
        result = await self.execute(
            select(
                Site.id,
                Site.title,
                Site.category_id,
                Site.profile,
                Site.settings,
                Site.social_media,
            ).where(Site.id == site_id)
        )
        row = result.first()
        if row is None:
            return None
        return RawSiteBags(
            site_id=row.id,
            title=row.title,
            category_id=row.category_id,
            profile=dict(row.profile or {}),
            settings=dict(row.settings or {}),
            social_media=dict(row.social_media or {}),
        )

    async def apply_merges(
        self,
        site_id: int,
        merges: list[BagMerge],
        columns: Optional[dict[str, Any]] = None,
    ) -> None:
        table = Site.__table__
        values: dict[str, Any] = {
            merge.bag: hstore_merge(table.c[merge.bag], merge.values) for merge in merges
        }
        values.update(columns or {})
        values["updated_at"] = sa.func.now()
        await self.execute(sa.update(table).where(table.c.id == site_id).values(**values))

    # -- categories --------------------------------------------------------

    async def list_site_categories(self, site_id: int) -> list[Category]:
        result = await self.execute(
            select(Category)
            .join(CategorySite, CategorySite.category_id == Category.id)
            .where(CategorySite.site_id == site_id)
        )
        return list(result.scalars().all())

    async def list_categories(self) -> list[Category]:
        result = await self.execute(select(Category).order_by(Category.id))
        return list(result.scalars().all())

    async def find_category(self, category_id: int) -> Optional[Category]:
        return await self.get(Category, category_id)

    async def list_category_ids(self, site_id: int) -> list[int]:
        result = await self.execute(
            select(CategorySite.category_id).where(CategorySite.site_id == site_id)
        )
        return list(result.scalars().all())

    async def delete_links(self, site_id: int, category_ids: list[int]) -> None:
        await self.execute(
            sa.delete(CategorySite).where(
                CategorySite.site_id == site_id,
                CategorySite.category_id.in_(category_ids),
            )
        )

    async def insert_links(self, site_id: int, category_ids: list[int]) -> None:
        await self.execute(
            sa.insert(CategorySite).values(
                [{"site_id": site_id, "category_id": cid} for cid in category_ids]
            )
        )

    # -- members -----------------------------------------------------------

    async def first_member_email(self, site_id: int) -> Optional[str]:
        result = await self.execute(
            select(User.email)
            .join(SiteUser, SiteUser.user_id == User.id)
            .where(SiteUser.site_id == site_id)
            .order_by(SiteUser.id)
            .limit(1)
        )
        return result.scalar_one_or_none()
