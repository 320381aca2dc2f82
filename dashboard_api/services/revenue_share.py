"""
Revenue share calculation.

The share paid to a site depends on its tier (owned, premiere, pro,
regular), a loyalty bonus that grows by one point per full year since
the site's anniversary, and the paid impressions it served over a
trailing window that ends two days before today.

All calculation functions are pure and take an explicit ``target_date``
(yesterday in UTC for live traffic) so they can be tested without a
clock. ``RevenueShareService`` gathers the reporting inputs.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Protocol

import structlog

log = structlog.get_logger()

IMPRESSIONS_FOR_80 = 5_000_000
IMPRESSIONS_FOR_825 = 10_000_000
IMPRESSIONS_FOR_85 = 15_000_000

PRO_FLOOR = 0.85
PREMIERE_SHARE = 0.90
LEGACY_SHARE = 0.70
REGULAR_SHARE = 0.75
NET30_DEDUCTION = 0.025
MAX_LOYALTY_YEARS = 5

# Before these dates the legacy rate applied and no loyalty bonus existed.
LEGACY_RATE_UNTIL = date(2017, 12, 25)
LOYALTY_BONUS_FROM = date(2018, 3, 7)


def yesterday_utc() -> date:
    return (datetime.now(timezone.utc) - timedelta(days=1)).date()


def round_to(value: float, places: int) -> float:
    """Round half up, as the dashboard front end does."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def impression_window(target_date: date) -> tuple[date, date]:
    """Inclusive ``(start, end)`` of the trailing impression window."""
    return target_date - timedelta(days=31), target_date - timedelta(days=1)


# ---------------------------------------------------------------------------
# Pure calculation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RevenueShareInputs:
    target_date: date
    anniversary_on: Optional[date] = None
    live_on: Optional[date] = None
    owned: bool = False
    premiere_accepted: bool = False
    pro_accepted: Optional[str] = None
    loyalty_bonus_disabled: bool = False
    net30_revenue_share_payments: bool = False
    display_revenue_share_override: Optional[float] = None  # whole percent, 80 == 0.80
    impression_count: int = 0
    health_check_revenue_share: Optional[float] = None  # already a fraction

    @property
    def is_pro_accepted(self) -> bool:
        return self.pro_accepted == "accepted"


@dataclass(frozen=True)
class RevenueShareResult:
    revenue_share: float
    revenue_share_pro: float
    total_revenue_share: float
    loyalty_bonus: float
    impressions: int
    anniversary_on: Optional[date] = None
    live_on: Optional[date] = None

    @property
    def loyalty(self) -> dict[str, Any]:
        return {
            "anniversary_on": self.anniversary_on.isoformat() if self.anniversary_on else None,
            "live_on": self.live_on.isoformat() if self.live_on else None,
            "revenue_share": self.revenue_share,
            "loyalty_bonus": self.loyalty_bonus,
            "impressions": self.impressions,
            "impressions_for_eighty": IMPRESSIONS_FOR_80,
            "impressions_for_eightytwofive": IMPRESSIONS_FOR_825,
            "impressions_for_eightyfive": IMPRESSIONS_FOR_85,
        }


def loyalty_age(anniversary_on: Optional[date], target_date: date) -> int:
    """Full years between the anniversary and the day after ``target_date``."""
    if anniversary_on is None:
        return 0
    next_day = target_date + timedelta(days=1)
    years = next_day.year - anniversary_on.year
    if (anniversary_on.month, anniversary_on.day) > (next_day.month, next_day.day):
        years -= 1
    return max(years, 0)


def loyalty_bonus(
    anniversary_on: Optional[date],
    target_date: date,
    *,
    premiere_accepted: bool = False,
    loyalty_bonus_disabled: bool = False,
) -> float:
    if loyalty_bonus_disabled or premiere_accepted or target_date < LOYALTY_BONUS_FROM:
        return 0
    return min(loyalty_age(anniversary_on, target_date), MAX_LOYALTY_YEARS) / 100


def _loyalty_bonus_for(inputs: RevenueShareInputs, *, owned_check: bool) -> float:
    # Owned sites are paid in full; the bonus is still reported for them but
    # never added to what they earn.
    if owned_check and inputs.owned:
        return 0
    return loyalty_bonus(
        inputs.anniversary_on,
        inputs.target_date,
        premiere_accepted=inputs.premiere_accepted,
        loyalty_bonus_disabled=inputs.loyalty_bonus_disabled,
    )


def base_pro_revenue_share(impression_count: int) -> float:
    if impression_count >= IMPRESSIONS_FOR_85:
        return 0.85
    if impression_count >= IMPRESSIONS_FOR_825:
        return 0.825
    return 0.80


def pro_revenue_share(inputs: RevenueShareInputs) -> float:
    """Pro rate including loyalty, never below the pro floor."""
    base = base_pro_revenue_share(inputs.impression_count)
    return max(base + _loyalty_bonus_for(inputs, owned_check=True), PRO_FLOOR)


def _apply_display_override(share: float, override: Optional[float]) -> float:
    if override:
        return max(share, override / 100)
    return share


def calculate_total_revenue_share(inputs: RevenueShareInputs) -> float:
    """The share actually paid, loyalty and net30 included."""
    if inputs.owned:
        return 1
    if inputs.premiere_accepted:
        share = PREMIERE_SHARE
    elif inputs.is_pro_accepted:
        share = pro_revenue_share(inputs)
    elif inputs.target_date < LEGACY_RATE_UNTIL:
        share = LEGACY_SHARE
    elif inputs.pro_accepted == "na" and inputs.impression_count >= IMPRESSIONS_FOR_80:
        share = base_pro_revenue_share(inputs.impression_count)
    else:
        share = REGULAR_SHARE

    share = _apply_display_override(share, inputs.display_revenue_share_override)
    # The pro rate already carries the bonus.
    if not inputs.is_pro_accepted:
        share += _loyalty_bonus_for(inputs, owned_check=True)
    if inputs.net30_revenue_share_payments:
        share -= NET30_DEDUCTION
    return share


def calculate_pro_modal_revenue_share(inputs: RevenueShareInputs) -> float:
    """What the site would earn on pro, shown when inviting it."""
    share = _apply_display_override(
        pro_revenue_share(inputs), inputs.display_revenue_share_override
    )
    if inputs.net30_revenue_share_payments:
        share -= NET30_DEDUCTION
    return share


def compute_revenue_share(inputs: RevenueShareInputs) -> RevenueShareResult:
    """Compute the reported figures for one site.

    ``revenue_share`` is reported without the loyalty bonus, which is
    reported separately. A health check figure, when present, replaces the
    computed total outright.
    """
    if inputs.health_check_revenue_share is not None:
        total = round_to(inputs.health_check_revenue_share, 2)
    else:
        total = calculate_total_revenue_share(inputs)

    bonus = _loyalty_bonus_for(inputs, owned_check=False)
    return RevenueShareResult(
        revenue_share=round_to(total - bonus, 3),
        revenue_share_pro=round_to(calculate_pro_modal_revenue_share(inputs), 3),
        total_revenue_share=total,
        loyalty_bonus=bonus,
        impressions=inputs.impression_count,
        anniversary_on=inputs.anniversary_on,
        live_on=inputs.live_on,
    )


# ---------------------------------------------------------------------------
# Reporting inputs
# ---------------------------------------------------------------------------

class ImpressionAggregateSource(Protocol):
    async def sum_paid_impressions(self, site_id: int, start: date, end: date) -> int: ...


class HealthCheckOverrideSource(Protocol):
    async def get_override_revenue_share(self, site_id: int, on_date: date) -> Optional[float]: ...


def inputs_from_settings(
    settings: Mapping[str, Any],
    *,
    target_date: date,
    anniversary_on: Optional[date],
    live_on: Optional[date],
    impression_count: int,
    health_check_revenue_share: Optional[float] = None,
) -> RevenueShareInputs:
    """Build calculator inputs from a decoded settings bag."""
    return RevenueShareInputs(
        target_date=target_date,
        anniversary_on=anniversary_on,
        live_on=live_on,
        owned=bool(settings.get("owned")),
        premiere_accepted=bool(settings.get("premiere_accepted")),
        pro_accepted=settings.get("pro_accepted"),
        loyalty_bonus_disabled=bool(settings.get("loyalty_bonus_disabled")),
        net30_revenue_share_payments=bool(settings.get("net30_revenue_share_payments")),
        display_revenue_share_override=settings.get("display_revenue_share_override"),
        impression_count=impression_count,
        health_check_revenue_share=health_check_revenue_share,
    )


class RevenueShareService:
    def __init__(
        self,
        impressions: ImpressionAggregateSource,
        health_checks: HealthCheckOverrideSource,
    ):
        self.impressions = impressions
        self.health_checks = health_checks

    async def impression_count(self, site_id: int, target_date: date) -> int:
        start, end = impression_window(target_date)
        return await self.impressions.sum_paid_impressions(site_id, start, end) or 0

    async def for_site(
        self,
        site_id: int,
        settings: Mapping[str, Any],
        *,
        anniversary_on: Optional[date],
        live_on: Optional[date],
        target_date: Optional[date] = None,
    ) -> RevenueShareResult:
        target_date = target_date or yesterday_utc()
        impressions, health_check = await asyncio.gather(
            self.impression_count(site_id, target_date),
            self.health_checks.get_override_revenue_share(site_id, target_date),
        )
        inputs = inputs_from_settings(
            settings,
            target_date=target_date,
            anniversary_on=anniversary_on,
            live_on=live_on,
            impression_count=impressions,
            health_check_revenue_share=health_check,
        )
        result = compute_revenue_share(inputs)
        log.debug(
            "revenue_share.computed",
            site_id=site_id,
            target_date=target_date.isoformat(),
            impressions=impressions,
            health_check=health_check is not None,
            revenue_share=result.revenue_share,
        )
        return result

    async def pro_for_site(
        self,
        site_id: int,
        settings: Mapping[str, Any],
        *,
        anniversary_on: Optional[date],
        live_on: Optional[date],
        target_date: Optional[date] = None,
    ) -> float:
        """Only the pro invitation figure, which needs impressions but no health check."""
        target_date = target_date or yesterday_utc()
        inputs = inputs_from_settings(
            settings,
            target_date=target_date,
            anniversary_on=anniversary_on,
            live_on=live_on,
            impression_count=await self.impression_count(site_id, target_date),
        )
        return round_to(calculate_pro_modal_revenue_share(inputs), 3)
