"""Read-only queries against the reporting database."""

from __future__ import annotations

from datetime import date
from typing import Optional

import sqlalchemy as sa
from sqlmodel import select

from dashboard_api.models.reporting import HealthCheck, PremiereRevenueSummary, RevenueReport
from dashboard_api.repositories.base import Repository

BASIS_POINTS = 10_000


class ReportingRepository(Repository):
    async def sum_paid_impressions(self, site_id: int, start: date, end: date) -> int:
        result = await self.execute(
            select(sa.func.coalesce(sa.func.sum(RevenueReport.paid_impressions), 0)).where(
                RevenueReport.site_id == site_id,
                RevenueReport.date >= start,
                RevenueReport.date <= end,
            )
        )
        return int(result.scalar_one())

    async def get_override_revenue_share(self, site_id: int, on_date: date) -> Optional[float]:
        """Manually set share for the day, as a fraction (8900 basis points -> 0.89)."""
        result = await self.execute(
            select(HealthCheck.revenue_share)
            .where(HealthCheck.site_id == site_id, HealthCheck.date == on_date)
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return (row.revenue_share or 0) / BASIS_POINTS

    async def premiere_net_difference(self, site_id: int) -> Optional[float]:
        result = await self.execute(
            select(PremiereRevenueSummary.net_premiere_difference).where(
                PremiereRevenueSummary.site_id == site_id
            )
        )
        return result.scalar_one_or_none()
