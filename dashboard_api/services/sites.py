"""
Site summary: identity, program flags, payment state and, for callers
allowed to see report data, the loyalty and revenue share figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Protocol

import structlog

from dashboard_api.core.errors import NotFoundError
from dashboard_api.models.payee import Payee
from dashboard_api.models.site import Site
from dashboard_api.schemas.sites import SiteLoyalty, SiteSummary, SiteSummaryResponse
from dashboard_api.services.revenue_share import RevenueShareService, yesterday_utc
from dashboard_api.services.settings_bags import read_bag

log = structlog.get_logger()

ADDRESS_FIELDS = ("address1", "city", "state", "zipcode", "country")
ADDRESS_VERIFICATION_TTL = timedelta(days=365)


# ---------------------------------------------------------------------------
# Address helpers
# ---------------------------------------------------------------------------

def address_exists(profile: Mapping[str, Any]) -> bool:
    return all(profile.get(name) for name in ADDRESS_FIELDS)


def address_expired(profile: Mapping[str, Any], now: Optional[datetime] = None) -> Optional[bool]:
    """``None`` when the address was never verified."""
    verified_at = profile.get("address_verified_at")
    if not verified_at:
        return None
    now = now or datetime.now(timezone.utc)
    return now - verified_at > ADDRESS_VERIFICATION_TTL


def as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

@dataclass
class SiteWithPayee:
    site: Site
    payee: Optional[Payee] = None


class SiteSummarySource(Protocol):
    async def find_site_with_payee(self, site_id: int) -> Optional[SiteWithPayee]: ...


class SitesService:
    def __init__(self, sites: SiteSummarySource, revenue_share: RevenueShareService):
        self.sites = sites
        self.revenue_share = revenue_share

    async def get_site(
        self,
        site_id: int,
        *,
        show_report_data: bool,
        target_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> SiteSummaryResponse:
        loaded = await self.sites.find_site_with_payee(site_id)
        if loaded is None:
            raise NotFoundError("Site not found")
        site, payee = loaded.site, loaded.payee
        profile = read_bag(site.profile, "profile")
        settings = read_bag(site.settings, "settings")

        reporting_args = dict(
            anniversary_on=site.anniversary_on,
            live_on=site.live_on,
            target_date=target_date or yesterday_utc(),
        )
        figures = None
        if show_report_data:
            figures = await self.revenue_share.for_site(site_id, settings, **reporting_args)
            revenue_share_pro = figures.revenue_share_pro
        else:
            revenue_share_pro = await self.revenue_share.pro_for_site(
                site_id, settings, **reporting_args
            )

        summary = SiteSummary(
            id=site.id,
            title=site.title,
            domain=site.domain,
            slug=site.slug,
            test_site=site.test_site,
            created_at=site.created_at,
            killswitch=settings.killswitch,
            disable_reporting=settings.disable_reporting,
            owned=settings.owned,
            loyalty_bonus_disabled=settings.loyalty_bonus_disabled,
            chicory_enabled=bool(settings.recipe_selector or settings.recipe_mobile_selector),
            zergnet_enabled=bool(settings.zergnet_id),
            gutter_enable=settings.gutter_enable,
            disable_onboarding_wizard=settings.disable_onboarding_wizard,
            enable_automatic_recipe_selectors=settings.enable_automatic_recipe_selectors,
            needs_payment=site.payee_id is None,
            tipalti_completed=payee.tipalti_completed if payee is not None else None,
            payee_name_updated=settings.payee_name_updated,
            premiere_invited=settings.premiere_invited,
            pro_invited=settings.pro_invited,
            pro_invited_on=settings.pro_invited_on,
            revenue_share_pro=revenue_share_pro,
            accepted_terms_of_service=profile.accepted_terms_of_service,
            accepted_terms_of_service_by=profile.accepted_terms_of_service_by,
            accepted_terms_of_service_on=profile.accepted_terms_of_service_on,
            address_verified_at=as_date(profile.address_verified_at),
            address_exists=address_exists(profile),
            address_expired=address_expired(profile, now),
            ganalytics_state=settings.ganalytics_state,
            ganalytics_refresh_token_expired_at=settings.ganalytics_refresh_token_expired_at,
        )

        if figures is not None:
            summary.given_notice = profile.given_notice
            summary.loyalty = SiteLoyalty(**figures.loyalty)

        if settings.premiere_accepted:
            summary.premiere_accepted = settings.premiere_accepted
            summary.premiere_accepted_on = settings.premiere_accepted_on
            summary.premiere_accepted_by = settings.premiere_accepted_by
            summary.premiere_manage_account = settings.premiere_manage_account

        if settings.pro_accepted:
            summary.pro_accepted = settings.pro_accepted
            summary.pro_accepted_on = settings.pro_accepted_on
            summary.pro_accepted_by = settings.pro_accepted_by
            summary.pro_last_audit = as_date(settings.pro_last_audit)
            summary.pro_last_inspected = as_date(settings.pro_last_inspected)

        return SiteSummaryResponse(site=summary)
