"""
Payee lifecycle: creating, choosing and confirming the payment identity
attached to a site, and building the signed payment-portal iframes.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from enum import Enum
from typing import Callable, Optional, Protocol
from urllib.parse import urlencode

import structlog

from dashboard_api.core.errors import ForbiddenError, NotFoundError, UnprocessableEntityError
from dashboard_api.core.permissions import PAYEE_ROLES, RequestUser
from dashboard_api.core.signing import hmac_sha256_hex
from dashboard_api.models.payee import Payee
from dashboard_api.models.site import Site
from dashboard_api.schemas.payees import (
    ExistingPayee,
    ExistingPayeesResponse,
    PayeeFrames,
    PayeeRead,
    SitePayeeSettings,
    SitePayeeSettingsResponse,
)
from dashboard_api.services.settings_bags import SettingsStore, read_bag, write_patch

log = structlog.get_logger()

PAYER = "MEDIAVINE"

IFRAME_TEMPLATE = (
    '<iframe id="tipalti" width="100%" height="1400px;" '
    'style="border: 0; margin: 0;" src="{src}" />'
)


class IframeKind(str, Enum):
    history = "history"
    edit_profile = "edit_profile"


# ---------------------------------------------------------------------------
# Signed iframe URLs
# ---------------------------------------------------------------------------

def build_signed_iframe_url(
    kind: IframeKind,
    payee_uuid: str,
    referer: Optional[str] = None,
    *,
    api_key: str,
    base_url: str,
    history_url: str,
    now: Optional[float] = None,
) -> str:
    """Build a payment-portal URL whose query string is signed with ``api_key``.

    The portal recomputes the HMAC over the query string exactly as sent,
    so parameter order is significant and ``hashkey`` must come last.
    """
    ts = str(int(now if now is not None else time.time()))
    if kind is IframeKind.history:
        url = f"{history_url}/PayeeDashboard/PaymentsHistory"
        params = [("idap", payee_uuid), ("payer", PAYER), ("ts", ts)]
    else:
        url = f"{base_url}/Payees/PayeeDashboard.aspx"
        params = [
            ("idap", payee_uuid),
            ("payer", PAYER),
            ("redirectto", f"{referer}?tipalti_completed=true"),
            ("ts", ts),
        ]

    query = urlencode(params)
    hashkey = hmac_sha256_hex(query, api_key)
    return f"{url}?{query}&{urlencode([('hashkey', hashkey)])}"


def make_iframe(src: str) -> str:
    return IFRAME_TEMPLATE.format(src=src)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class PayeeRepository(Protocol):
    async def find_site(self, site_id: int) -> Optional[Site]: ...

    async def find_payee(self, payee_id: int) -> Optional[Payee]: ...

    async def find_payee_for_site(self, site_id: int) -> Optional[Payee]: ...

    async def create_payee_for_site(self, site_id: int, name: str, payee_uuid: str) -> Payee: ...

    async def set_site_payee(self, site_id: int, payee_id: int) -> None: ...

    async def mark_tipalti_completed(self, payee_id: int) -> None: ...

    async def user_has_payee_access(self, user_id: int, payee_id: int, roles: tuple[int, ...]) -> bool: ...

    async def list_attached_payees(
        self, user_id: Optional[int], roles: tuple[int, ...]
    ) -> list[Payee]: ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class PayeesService:
    def __init__(
        self,
        payees: PayeeRepository,
        settings_store: SettingsStore,
        *,
        api_key: str,
        base_url: str,
        history_url: str,
        clock: Callable[[], float] = time.time,
    ):
        self.payees = payees
        self.settings_store = settings_store
        self.api_key = api_key
        self.base_url = base_url
        self.history_url = history_url
        self.clock = clock

    def signed_iframe(self, kind: IframeKind, payee_uuid: str, referer: Optional[str] = None) -> str:
        return make_iframe(
            build_signed_iframe_url(
                kind,
                payee_uuid,
                referer,
                api_key=self.api_key,
                base_url=self.base_url,
                history_url=self.history_url,
                now=self.clock(),
            )
        )

    async def _payee_name_updated(self, site_id: int) -> Optional[bool]:
        bags = await self.settings_store.load_bags(site_id)
        if bags is None:
            raise NotFoundError("Site not found")
        return read_bag(bags.settings, "settings").payee_name_updated

    async def get_site_payee_settings(
        self, site_id: int, referer: Optional[str]
    ) -> SitePayeeSettingsResponse:
        payee, payee_name_updated = await asyncio.gather(
            self.payees.find_payee_for_site(site_id),
            self._payee_name_updated(site_id),
        )

        frames = PayeeFrames(history=None, edit_profile=None)
        if payee is not None and payee.uuid:
            frames = PayeeFrames(
                history=self.signed_iframe(IframeKind.history, payee.uuid),
                edit_profile=self.signed_iframe(IframeKind.edit_profile, payee.uuid, referer),
            )

        return SitePayeeSettingsResponse(
            site=SitePayeeSettings(
                site=site_id,
                payee_name_updated=payee_name_updated,
                payee=PayeeRead.model_validate(payee) if payee is not None else None,
                frames=frames,
            )
        )

    async def create_payee_for_site(self, site_id: int, name: str) -> Payee:
        site = await self.payees.find_site(site_id)
        if site is None:
            raise NotFoundError("Site not found")
        if site.test_site:
            raise UnprocessableEntityError(
                {"sites": ["You cannot create a Payee Profile for a Test Site"]}
            )

        payee = await self.payees.create_payee_for_site(site_id, name, str(uuid.uuid4()))
        log.info("payee.created", site_id=site_id, payee_id=payee.id)
        return payee

    async def confirm_payee(self, site_id: int) -> None:
        site = await self.payees.find_site(site_id)
        if site is None:
            raise NotFoundError("Site not found")
        if not site.payee_id:
            raise UnprocessableEntityError("No payee set for site")

        await self.payees.mark_tipalti_completed(site.payee_id)
        log.info("payee.confirmed", site_id=site_id, payee_id=site.payee_id)

    async def choose_payee(self, site_id: int, payee_id: int, user: RequestUser) -> None:
        """Point the site at an existing payee the caller already manages elsewhere."""
        payee = await self.payees.find_payee(payee_id)
        if payee is None:
            raise NotFoundError("Payee not found")
        if not user.is_admin and not await self.payees.user_has_payee_access(
            user.id, payee_id, PAYEE_ROLES
        ):
            raise ForbiddenError("You do not have access to this payee")

        await self.payees.set_site_payee(site_id, payee_id)
        log.info("payee.chosen", site_id=site_id, payee_id=payee_id, user_id=user.id)

    async def confirm_payee_name(self, site_id: int) -> None:
        await write_patch(self.settings_store, site_id, {"payee_name_updated": True})
        log.info("payee.name_confirmed", site_id=site_id)

    async def get_existing_payees(self, user: RequestUser) -> ExistingPayeesResponse:
        payees = await self.payees.list_attached_payees(
            None if user.is_admin else user.id, PAYEE_ROLES
        )
        return ExistingPayeesResponse(
            payees=[ExistingPayee.model_validate(payee) for payee in payees]
        )
