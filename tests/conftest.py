"""
Shared fixtures: in-memory stand-ins for the SQL repositories.

``FakeDashboard`` keeps sites, users, memberships, payees, categories and
videos in dicts and implements every storage protocol the services use,
so services can be exercised without a database.
"""

from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

import pytest

from dashboard_api.core.permissions import RequestUser
from dashboard_api.core.roles import SiteUserRole, has_any_role, mask_from_roles
from dashboard_api.models.category import Category
from dashboard_api.models.payee import Payee
from dashboard_api.models.site import Site
from dashboard_api.models.site_user import SiteUser
from dashboard_api.models.user import User
from dashboard_api.services.settings_bags import BagMerge, RawSiteBags
from dashboard_api.services.sites import SiteWithPayee


class FakeDashboard:
    def __init__(self):
        self._ids = itertools.count(100)
        self.sites: dict[int, Site] = {}
        self.users: dict[int, User] = {}
        self.site_users: dict[int, SiteUser] = {}
        self.payees: dict[int, Payee] = {}
        self.categories: dict[int, Category] = {}
        self.category_links: set[tuple[int, int]] = set()
        self.videos: dict[str, int] = {}
        self.merges: list[tuple[int, list[BagMerge], dict[str, Any]]] = []
        self.rotated: list[int] = []

    # -- seeding -----------------------------------------------------------

    def add_site(self, site_id: int, **kwargs) -> Site:
        kwargs.setdefault("title", f"Site {site_id}")
        for bag in ("profile", "settings", "social_media"):
            kwargs.setdefault(bag, {})
        site = Site(id=site_id, **kwargs)
        self.sites[site_id] = site
        return site

    def add_user(self, user_id: int, email: Optional[str] = None, **kwargs) -> User:
        kwargs.setdefault("jwt_secret", "secret-%d" % user_id)
        user = User(id=user_id, email=email or f"user{user_id}@example.com", **kwargs)
        self.users[user_id] = user
        return user

    def add_member(self, site_id: int, user_id: int, *roles: SiteUserRole) -> SiteUser:
        site_user = SiteUser(
            id=next(self._ids), site_id=site_id, user_id=user_id, roles_mask=mask_from_roles(roles)
        )
        self.site_users[site_user.id] = site_user
        return site_user

    def add_payee(self, payee_id: int, name: str = "Payee", **kwargs) -> Payee:
        kwargs.setdefault("uuid", str(uuid.uuid4()))
        payee = Payee(id=payee_id, name=name, **kwargs)
        self.payees[payee_id] = payee
        return payee

    def add_category(self, category_id: int, title: str = "Food") -> Category:
        category = Category(id=category_id, title=title, slug=title.lower())
        self.categories[category_id] = category
        return category

    # -- permission lookups ------------------------------------------------

    async def find_site(self, site_id: int) -> Optional[Site]:
        return self.sites.get(site_id)

    async def find_site_user(self, user_id: int, site_id: int) -> Optional[SiteUser]:
        for site_user in self.site_users.values():
            if site_user.user_id == user_id and site_user.site_id == site_id:
                return site_user
        return None

    async def find_video_site_id(self, slug: str) -> Optional[int]:
        return self.videos.get(slug)

    async def find_site_with_payee(self, site_id: int) -> Optional[SiteWithPayee]:
        site = self.sites.get(site_id)
        if site is None:
            return None
        return SiteWithPayee(site=site, payee=self.payees.get(site.payee_id))

    # -- bags --------------------------------------------------------------

    async def load_bags(self, site_id: int) -> Optional[RawSiteBags]:
        site = self.sites.get(site_id)
        if site is None:
            return None
        return RawSiteBags(
            site_id=site.id,
            title=site.title,
            category_id=site.category_id,
            profile=dict(site.profile),
            settings=dict(site.settings),
            social_media=dict(site.social_media),
        )

    async def apply_merges(self, site_id, merges, columns=None) -> None:
        self.merges.append((site_id, list(merges), dict(columns or {})))
        site = self.sites[site_id]
        for merge in merges:
            setattr(site, merge.bag, {**getattr(site, merge.bag), **merge.values})
        for name, value in (columns or {}).items():
            setattr(site, name, value)

    # -- categories --------------------------------------------------------

    async def list_site_categories(self, site_id: int) -> list[Category]:
        return [self.categories[cid] for sid, cid in sorted(self.category_links) if sid == site_id]

    async def list_categories(self) -> list[Category]:
        return [self.categories[cid] for cid in sorted(self.categories)]

    async def find_category(self, category_id: int) -> Optional[Category]:
        return self.categories.get(category_id)

    async def list_category_ids(self, site_id: int) -> list[int]:
        return [cid for sid, cid in sorted(self.category_links) if sid == site_id]

    async def delete_links(self, site_id: int, category_ids: list[int]) -> None:
        for cid in category_ids:
            self.category_links.discard((site_id, cid))

    async def insert_links(self, site_id: int, category_ids: list[int]) -> None:
        for cid in category_ids:
            self.category_links.add((site_id, cid))

    async def first_member_email(self, site_id: int) -> Optional[str]:
        for site_user in sorted(self.site_users.values(), key=lambda su: su.id):
            if site_user.site_id == site_id and site_user.user_id in self.users:
                return self.users[site_user.user_id].email
        return None

    # -- payees ------------------------------------------------------------

    async def find_payee(self, payee_id: int) -> Optional[Payee]:
        return self.payees.get(payee_id)

    async def find_payee_for_site(self, site_id: int) -> Optional[Payee]:
        site = self.sites.get(site_id)
        return self.payees.get(site.payee_id) if site is not None else None

    async def create_payee_for_site(self, site_id: int, name: str, payee_uuid: str) -> Payee:
        payee = self.add_payee(next(self._ids), name=name, uuid=payee_uuid)
        self.sites[site_id].payee_id = payee.id
        return payee

    async def set_site_payee(self, site_id: int, payee_id: int) -> None:
        self.sites[site_id].payee_id = payee_id

    async def mark_tipalti_completed(self, payee_id: int) -> None:
        self.payees[payee_id].tipalti_completed = True

    async def user_has_payee_access(self, user_id, payee_id, roles) -> bool:
        return any(
            self.sites[su.site_id].payee_id == payee_id and has_any_role(su.roles_mask, roles)
            for su in self.site_users.values()
            if su.user_id == user_id and su.site_id in self.sites
        )

    async def list_attached_payees(self, user_id, roles) -> list[Payee]:
        site_ids = {
            su.site_id
            for su in self.site_users.values()
            if su.user_id == user_id and has_any_role(su.roles_mask, roles)
        }
        payee_ids = {
            site.payee_id
            for site in self.sites.values()
            if site.payee_id is not None and (user_id is None or site.id in site_ids)
        }
        return sorted((self.payees[pid] for pid in payee_ids), key=lambda p: p.name)

    # -- site users --------------------------------------------------------

    async def list_for_site(self, site_id: int):
        return [
            (su, self.users[su.user_id].email if su.user_id in self.users else None)
            for su in sorted(self.site_users.values(), key=lambda su: su.id)
            if su.site_id == site_id
        ]

    async def find_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def site_has_users(self, site_id: int) -> bool:
        return any(su.site_id == site_id for su in self.site_users.values())

    async def create_user(self, email: str) -> User:
        return self.add_user(next(self._ids), email=email)

    async def create_site_user(self, site_id: int, user_id: int, roles_mask: int) -> SiteUser:
        site_user = SiteUser(id=next(self._ids), site_id=site_id, user_id=user_id, roles_mask=roles_mask)
        self.site_users[site_user.id] = site_user
        return site_user

    async def get_site_user(self, site_user_id: int) -> Optional[SiteUser]:
        return self.site_users.get(site_user_id)

    async def update_roles(self, site_user_id: int, roles_mask: int) -> SiteUser:
        self.site_users[site_user_id].roles_mask = roles_mask
        return self.site_users[site_user_id]

    async def delete_site_user(self, site_user_id: int) -> None:
        del self.site_users[site_user_id]

    async def rotate_user_secret(self, user_id: int) -> None:
        self.rotated.append(user_id)
        self.users[user_id].jwt_secret = str(uuid.uuid4())


@dataclass
class FakeReporting:
    impressions: int = 0
    health_checks: dict[tuple[int, date], float] = field(default_factory=dict)
    windows: list[tuple[int, date, date]] = field(default_factory=list)
    health_check_lookups: list[tuple[int, date]] = field(default_factory=list)
    premiere_differences: dict[int, float] = field(default_factory=dict)

    async def sum_paid_impressions(self, site_id: int, start: date, end: date) -> int:
        self.windows.append((site_id, start, end))
        return self.impressions

    async def get_override_revenue_share(self, site_id: int, on_date: date) -> Optional[float]:
        self.health_check_lookups.append((site_id, on_date))
        return self.health_checks.get((site_id, on_date))

    async def premiere_net_difference(self, site_id: int) -> Optional[float]:
        return self.premiere_differences.get(site_id)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def dashboard() -> FakeDashboard:
    return FakeDashboard()


@pytest.fixture
def reporting() -> FakeReporting:
    return FakeReporting()


@pytest.fixture
def admin() -> RequestUser:
    return RequestUser(id=1, email="admin@example.com", title="Admin", is_admin=True)


@pytest.fixture
def member() -> RequestUser:
    return RequestUser(id=2, email="member@example.com", title="Member")
