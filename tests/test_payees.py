"""
Tests for payee lifecycle and the signed payment-portal iframes.

Covers:
- Signed URL layout and HMAC over the exact query string
- Site payee settings (frames only when a payee exists)
- Create / confirm / choose / confirm-name flows and their errors
- Existing payees visible to admins and members
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

import pytest

from dashboard_api.core.errors import ForbiddenError, NotFoundError, UnprocessableEntityError
from dashboard_api.core.roles import SiteUserRole
from dashboard_api.core.signing import hmac_sha256_hex
from dashboard_api.services.payees import (
    IframeKind,
    PayeesService,
    build_signed_iframe_url,
    make_iframe,
)

API_KEY = "test-key"
BASE_URL = "https://ui.example.test"
HISTORY_URL = "https://ui2.example.test"
NOW = 1_700_000_000


def signed(kind, payee_uuid, referer=None):
    return build_signed_iframe_url(
        kind,
        payee_uuid,
        referer,
        api_key=API_KEY,
        base_url=BASE_URL,
        history_url=HISTORY_URL,
        now=NOW,
    )


@pytest.fixture
def service(dashboard) -> PayeesService:
    return PayeesService(
        dashboard,
        dashboard,
        api_key=API_KEY,
        base_url=BASE_URL,
        history_url=HISTORY_URL,
        clock=lambda: NOW,
    )


# ---------------------------------------------------------------------------
# Unit Tests: Signed URLs
# ---------------------------------------------------------------------------

class TestSignedIframeUrl:
    def test_history_url(self):
        url = signed(IframeKind.history, "abc-123")
        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
            f"{HISTORY_URL}/PayeeDashboard/PaymentsHistory"
        )
        assert [k for k, _ in parse_qsl(parts.query)] == ["idap", "payer", "ts", "hashkey"]

    def test_edit_profile_redirects_back(self):
        url = signed(IframeKind.edit_profile, "abc-123", "https://dash.example.test/sites/1")
        params = dict(parse_qsl(urlsplit(url).query))
        assert url.startswith(f"{BASE_URL}/Payees/PayeeDashboard.aspx?")
        assert params["redirectto"] == "https://dash.example.test/sites/1?tipalti_completed=true"
        assert params["payer"] == "MEDIAVINE"
        assert params["ts"] == str(NOW)

    def test_hashkey_signs_query_before_it(self):
        url = signed(IframeKind.history, "abc-123")
        query = urlsplit(url).query
        unsigned, _, hashkey = query.rpartition("&hashkey=")
        assert hashkey == hmac_sha256_hex(unsigned, API_KEY)

    def test_different_key_changes_signature(self):
        first = signed(IframeKind.history, "abc-123")
        second = build_signed_iframe_url(
            IframeKind.history,
            "abc-123",
            api_key="other",
            base_url=BASE_URL,
            history_url=HISTORY_URL,
            now=NOW,
        )
        assert first != second

    def test_iframe_wraps_src(self):
        html = make_iframe("https://x.test/?a=1")
        assert html.startswith('<iframe id="tipalti"')
        assert 'src="https://x.test/?a=1"' in html


# ---------------------------------------------------------------------------
# Unit Tests: Service
# ---------------------------------------------------------------------------

class TestSitePayeeSettings:
    @pytest.mark.asyncio
    async def test_without_payee_has_no_frames(self, service, dashboard):
        dashboard.add_site(1)
        response = await service.get_site_payee_settings(1, "https://dash.test")
        assert response.site.payee is None
        assert response.site.frames.history is None
        assert response.site.frames.edit_profile is None

    @pytest.mark.asyncio
    async def test_with_payee_has_both_frames(self, service, dashboard):
        payee = dashboard.add_payee(5, "Jane")
        dashboard.add_site(1, payee_id=5, settings={"payee_name_updated": "true"})

        response = await service.get_site_payee_settings(1, "https://dash.test")

        assert response.site.payee.id == 5
        assert response.site.payee_name_updated is True
        assert payee.uuid in response.site.frames.history
        assert "redirectto" in response.site.frames.edit_profile

    @pytest.mark.asyncio
    async def test_missing_site(self, service):
        with pytest.raises(NotFoundError):
            await service.get_site_payee_settings(404, None)


class TestPayeeLifecycle:
    @pytest.mark.asyncio
    async def test_create_attaches_new_payee(self, service, dashboard):
        dashboard.add_site(1)
        payee = await service.create_payee_for_site(1, "Jane")
        assert dashboard.sites[1].payee_id == payee.id
        assert payee.uuid
        assert payee.tipalti_completed is False

    @pytest.mark.asyncio
    async def test_create_refused_for_test_site(self, service, dashboard):
        dashboard.add_site(1, test_site=True)
        with pytest.raises(UnprocessableEntityError) as exc:
            await service.create_payee_for_site(1, "Jane")
        assert "Test Site" in exc.value.detail["sites"][0]
        assert dashboard.payees == {}

    @pytest.mark.asyncio
    async def test_create_for_missing_site(self, service):
        with pytest.raises(NotFoundError):
            await service.create_payee_for_site(1, "Jane")

    @pytest.mark.asyncio
    async def test_confirm_marks_completed(self, service, dashboard):
        dashboard.add_payee(5)
        dashboard.add_site(1, payee_id=5)
        await service.confirm_payee(1)
        assert dashboard.payees[5].tipalti_completed is True

    @pytest.mark.asyncio
    async def test_confirm_without_payee(self, service, dashboard):
        dashboard.add_site(1)
        with pytest.raises(UnprocessableEntityError):
            await service.confirm_payee(1)

    @pytest.mark.asyncio
    async def test_confirm_name_sets_flag(self, service, dashboard):
        dashboard.add_site(1)
        await service.confirm_payee_name(1)
        assert dashboard.sites[1].settings["payee_name_updated"] == "true"


class TestChoosePayee:
    @pytest.mark.asyncio
    async def test_member_chooses_payee_from_own_site(self, service, dashboard, member):
        dashboard.add_payee(5)
        dashboard.add_site(1, payee_id=5)
        dashboard.add_site(2)
        dashboard.add_member(1, member.id, SiteUserRole.payment)

        await service.choose_payee(2, 5, member)

        assert dashboard.sites[2].payee_id == 5

    @pytest.mark.asyncio
    async def test_payee_from_foreign_site_forbidden(self, service, dashboard, member):
        dashboard.add_payee(5)
        dashboard.add_site(1, payee_id=5)
        dashboard.add_site(2)
        dashboard.add_member(1, member.id, SiteUserRole.reporting)

        with pytest.raises(ForbiddenError):
            await service.choose_payee(2, 5, member)
        assert dashboard.sites[2].payee_id is None

    @pytest.mark.asyncio
    async def test_admin_chooses_any_payee(self, service, dashboard, admin):
        dashboard.add_payee(5)
        dashboard.add_site(2)
        await service.choose_payee(2, 5, admin)
        assert dashboard.sites[2].payee_id == 5

    @pytest.mark.asyncio
    async def test_unknown_payee(self, service, dashboard, admin):
        dashboard.add_site(2)
        with pytest.raises(NotFoundError):
            await service.choose_payee(2, 5, admin)


class TestExistingPayees:
    @pytest.mark.asyncio
    async def test_member_sees_payees_of_managed_sites(self, service, dashboard, member):
        dashboard.add_payee(5, "Zed")
        dashboard.add_payee(6, "Amy")
        dashboard.add_payee(7, "Other")
        dashboard.add_site(1, payee_id=5)
        dashboard.add_site(2, payee_id=6)
        dashboard.add_site(3, payee_id=7)
        dashboard.add_member(1, member.id, SiteUserRole.owner)
        dashboard.add_member(2, member.id, SiteUserRole.payment)
        dashboard.add_member(3, member.id, SiteUserRole.reporting)

        response = await service.get_existing_payees(member)

        assert [p.name for p in response.payees] == ["Amy", "Zed"]

    @pytest.mark.asyncio
    async def test_admin_sees_every_attached_payee(self, service, dashboard, admin):
        dashboard.add_payee(5, "Zed")
        dashboard.add_payee(6, "Unattached")
        dashboard.add_site(1, payee_id=5)

        response = await service.get_existing_payees(admin)

        assert [p.id for p in response.payees] == [5]
