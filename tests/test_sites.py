"""
Tests for the site summary.

Covers:
- Report data (loyalty, given_notice) gated on the caller's permission
- Only impressions are read when report data is hidden
- Premiere and pro fields only when the program was accepted
- Payment state and address verification
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from dashboard_api.core.errors import NotFoundError
from dashboard_api.services.revenue_share import RevenueShareService
from dashboard_api.services.sites import SitesService, address_exists, address_expired

TARGET = date(2024, 6, 1)
NOW = datetime(2024, 6, 2, tzinfo=timezone.utc)


@pytest.fixture
def service(dashboard, reporting) -> SitesService:
    return SitesService(dashboard, RevenueShareService(reporting, reporting))


async def summary(service, site_id=1, show_report_data=True):
    response = await service.get_site(
        site_id, show_report_data=show_report_data, target_date=TARGET, now=NOW
    )
    return response.site


class TestAddress:
    def test_exists_needs_every_field(self):
        full = {"address1": "1 Main", "city": "A", "state": "TX", "zipcode": "1", "country": "US"}
        assert address_exists(full)
        assert not address_exists({**full, "zipcode": None})

    def test_expired_after_a_year(self):
        assert address_expired({"address_verified_at": datetime(2023, 1, 1, tzinfo=timezone.utc)}, NOW)
        assert not address_expired({"address_verified_at": datetime(2024, 1, 1, tzinfo=timezone.utc)}, NOW)
        assert address_expired({}, NOW) is None


class TestGetSite:
    @pytest.mark.asyncio
    async def test_report_data_included(self, service, dashboard, reporting):
        reporting.impressions = 31_000
        dashboard.add_site(1, anniversary_on=date(2021, 6, 1), profile={"given_notice": "false"})

        site = await summary(service)

        assert site.loyalty.revenue_share == pytest.approx(0.75)
        assert site.loyalty.loyalty_bonus == pytest.approx(0.03)
        assert site.loyalty.impressions == 31_000
        assert site.given_notice is False
        assert site.revenue_share_pro == pytest.approx(0.85)

    @pytest.mark.asyncio
    async def test_report_data_hidden(self, service, dashboard):
        dashboard.add_site(1, profile={"given_notice": "true"})
        site = await summary(service, show_report_data=False)
        assert site.loyalty is None
        assert site.given_notice is None

    @pytest.mark.asyncio
    async def test_hidden_report_data_still_prices_pro(self, service, dashboard, reporting):
        reporting.impressions = 31_000
        reporting.health_checks[(1, TARGET)] = 0.9
        dashboard.add_site(1, anniversary_on=date(2021, 6, 1))

        site = await summary(service, show_report_data=False)

        assert site.revenue_share_pro == pytest.approx(0.85)
        assert len(reporting.windows) == 1
        assert reporting.health_check_lookups == []

    @pytest.mark.asyncio
    async def test_visible_report_data_checks_health(self, service, dashboard, reporting):
        dashboard.add_site(1)
        await summary(service)
        assert reporting.health_check_lookups == [(1, TARGET)]

    @pytest.mark.asyncio
    async def test_needs_payment_without_payee(self, service, dashboard):
        dashboard.add_site(1)
        site = await summary(service)
        assert site.needs_payment is True
        assert site.tipalti_completed is None

    @pytest.mark.asyncio
    async def test_payee_state(self, service, dashboard):
        dashboard.add_payee(5, tipalti_completed=True)
        dashboard.add_site(1, payee_id=5)
        site = await summary(service)
        assert site.needs_payment is False
        assert site.tipalti_completed is True

    @pytest.mark.asyncio
    async def test_program_fields_only_when_accepted(self, service, dashboard):
        dashboard.add_site(1, settings={"premiere_invited": "true", "pro_invited": "true"})
        site = await summary(service)
        assert site.premiere_invited is True
        assert site.premiere_accepted is None
        assert site.pro_accepted is None

    @pytest.mark.asyncio
    async def test_accepted_programs_reported(self, service, dashboard):
        dashboard.add_site(
            1,
            settings={
                "pro_accepted": "accepted",
                "pro_accepted_by": "Ann",
                "pro_last_audit": "2024-03-04T10:00:00Z",
                "premiere_accepted": "true",
            },
        )
        site = await summary(service)
        assert site.pro_accepted == "accepted"
        assert site.pro_accepted_by == "Ann"
        assert site.pro_last_audit == date(2024, 3, 4)
        assert site.premiere_accepted is True

    @pytest.mark.asyncio
    async def test_recipe_and_zergnet_flags(self, service, dashboard):
        dashboard.add_site(1, settings={"recipe_selector": ".recipe", "zergnet_id": "12"})
        site = await summary(service)
        assert site.chicory_enabled
        assert site.zergnet_enabled

    @pytest.mark.asyncio
    async def test_missing_site(self, service):
        with pytest.raises(NotFoundError):
            await summary(service, site_id=404)
