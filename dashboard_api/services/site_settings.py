"""
Site profile settings: reading the profile view of a site and applying
sparse updates to its bags, primary category and category links.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

import structlog

from dashboard_api.core.errors import NotFoundError
from dashboard_api.core.permissions import RequestUser
from dashboard_api.models.category import Category
from dashboard_api.schemas.site_settings import (
    CategoryRead,
    ProfileSettings,
    ProfileSettingsResponse,
    ProfileSettingsUpdateRequest,
)
from dashboard_api.services.settings_bags import (
    CategoryLinkStore,
    RawSiteBags,
    SettingsStore,
    build_patch_statement,
    read_bag,
    reconcile_categories,
)
from dashboard_api.services.sites import address_exists, address_expired, as_date

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

class Notifier(Protocol):
    async def pro_accepted(self, site_title: Optional[str]) -> None: ...

    async def premiere_accepted(self, site_title: Optional[str]) -> None: ...


class LoggingNotifier:
    """Records program acceptances in the application log."""

    async def pro_accepted(self, site_title: Optional[str]) -> None:
        log.info("site.pro_accepted", site_title=site_title)

    async def premiere_accepted(self, site_title: Optional[str]) -> None:
        log.info("site.premiere_accepted", site_title=site_title)


class SiteProfileStore(SettingsStore, CategoryLinkStore, Protocol):
    async def list_site_categories(self, site_id: int) -> list[Category]: ...

    async def find_category(self, category_id: int) -> Optional[Category]: ...

    async def first_member_email(self, site_id: int) -> Optional[str]: ...


class PremiereSummarySource(Protocol):
    async def premiere_net_difference(self, site_id: int) -> Optional[float]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class SiteSettingsService:
    def __init__(
        self,
        store: SiteProfileStore,
        notifier: Notifier,
        premiere_summaries: Optional[PremiereSummarySource] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.premiere_summaries = premiere_summaries
        self.clock = clock

    async def _load(self, site_id: int) -> RawSiteBags:
        bags = await self.store.load_bags(site_id)
        if bags is None:
            raise NotFoundError("Site not found")
        return bags

    async def _premiere_net_difference(self, site_id: int) -> float:
        if self.premiere_summaries is None:
            return 0
        difference = await self.premiere_summaries.premiere_net_difference(site_id)
        return round(float(difference), 2) if difference else 0

    async def get_profile_settings(self, site_id: int) -> ProfileSettingsResponse:
        bags, categories = await asyncio.gather(
            self._load(site_id),
            self.store.list_site_categories(site_id),
        )
        profile = read_bag(bags.profile, "profile")
        settings = read_bag(bags.settings, "settings")
        social = read_bag(bags.social_media, "social_media")

        primary = next((c for c in categories if c.id == bags.category_id), None)
        # The primary category is normally also linked, but not always.
        if primary is None and bags.category_id:
            primary = await self.store.find_category(bags.category_id)

        contact_email = profile.contact_email
        if not contact_email:
            contact_email = await self.store.first_member_email(site_id)

        view = ProfileSettings(
            site_id=bags.site_id,
            site_title=bags.title,
            site_description=profile.site_description,
            site_image=profile.site_image,
            author_name=profile.author_name,
            author_bio=profile.author_bio,
            author_image=profile.author_image,
            brand_color=settings.brand_color,
            contact_email=contact_email or None,
            pinterest_email=profile.pinterest_email,
            phone_number=profile.phone_number,
            country_of_operation=profile.country_of_operation,
            address1=profile.address1,
            city=profile.city,
            state=profile.state,
            zipcode=profile.zipcode,
            country=profile.country,
            address_exists=address_exists(profile),
            address_expired=address_expired(profile, self.clock()),
            address_verified_at=as_date(profile.address_verified_at),
            category_id=CategoryRead.model_validate(primary) if primary is not None else None,
            category_ids=[CategoryRead.model_validate(c) for c in categories],
            facebook=social.facebook,
            instagram=social.instagram,
            pinterest=social.pinterest,
            snapchat=social.snapchat,
            tiktok=social.tiktok,
            twitter=social.twitter,
            youtube=social.youtube,
            influencer_non_profit_rate=settings.influencer_non_profit_rate,
            influencer_non_profit_work=settings.influencer_non_profit_work,
            accepted_terms_of_service=profile.accepted_terms_of_service,
            accepted_terms_of_service_by=profile.accepted_terms_of_service_by,
            accepted_terms_of_service_on=profile.accepted_terms_of_service_on,
            pro_invited=settings.pro_invited,
            pro_accepted=settings.pro_accepted,
            premiere_invited=settings.premiere_invited,
            premiere_accepted=settings.premiere_accepted,
        )
        if settings.premiere_accepted:
            view.premiere_manage_account = settings.premiere_manage_account
            view.premiere_net_difference = await self._premiere_net_difference(site_id)

        return ProfileSettingsResponse(site=view)

    async def update_profile_settings(
        self,
        site_id: int,
        body: ProfileSettingsUpdateRequest,
        user: Optional[RequestUser],
    ) -> None:
        patch: dict[str, Any] = body.model_dump(exclude_unset=True)
        verify_address = patch.pop("verify_address", None)
        category_id = patch.pop("category_id", None)
        category_ids = patch.pop("category_ids", None)

        bags = await self._load(site_id)
        profile = read_bag(bags.profile, "profile")
        settings = read_bag(bags.settings, "settings")
        now = self.clock()
        today = now.date().isoformat()
        accepted_by = user.title if user is not None else None

        # Program acceptance only counts for sites that were invited.
        if patch.get("pro_accepted") and not settings.pro_invited:
            patch.pop("pro_accepted")
        elif (
            settings.pro_invited
            and patch.get("pro_accepted") == "accepted"
            and settings.pro_accepted != "accepted"
        ):
            patch["pro_accepted_by"] = accepted_by
            patch["pro_accepted_on"] = int(now.timestamp())
            await self.notifier.pro_accepted(bags.title)

        if patch.get("premiere_accepted") and not settings.premiere_invited:
            patch.pop("premiere_accepted")
        elif (
            settings.premiere_invited
            and patch.get("premiere_accepted")
            and not settings.premiere_accepted
        ):
            patch["premiere_accepted_by"] = accepted_by
            patch["premiere_accepted_on"] = int(now.timestamp())
            await self.notifier.premiere_accepted(bags.title)

        address_changed = any(
            patch.get(name) and patch[name] != profile.get(name)
            for name in ("address1", "city", "state", "zipcode", "country")
        )
        if verify_address or address_changed:
            patch["address_verified_at"] = today

        if patch.get("premiere_manage_account") and not settings.premiere_manage_account:
            patch["premiere_manage_account_enabled_on"] = today

        if patch.get("accepted_terms_of_service") and not profile.accepted_terms_of_service:
            patch["accepted_terms_of_service_by"] = accepted_by
            patch["accepted_terms_of_service_on"] = int(now.timestamp())

        if patch.get("given_notice") and not profile.given_notice:
            patch["given_notice_on"] = today

        merges = build_patch_statement(patch)
        columns = {"category_id": category_id} if category_id else {}
        if merges or columns:
            await self.store.apply_merges(site_id, merges, columns)
            log.info(
                "site.profile_updated",
                site_id=site_id,
                bags=[merge.bag for merge in merges],
                columns=sorted(columns),
            )

        if category_ids is not None:
            await reconcile_categories(self.store, site_id, category_ids)
