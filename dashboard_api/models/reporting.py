"""Reporting database tables (read-only from this service)."""

import datetime as dt
from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIdMixin


class RevenueReport(IntIdMixin, SQLModel, table=True):
    __tablename__ = "revenue_reports"

    site_id: int = Field(index=True, nullable=False)
    date: dt.date = Field(index=True, nullable=False)
    paid_impressions: Optional[int] = None


class HealthCheck(IntIdMixin, SQLModel, table=True):
    __tablename__ = "health_checks"

    site_id: int = Field(index=True, nullable=False)
    date: dt.date = Field(index=True, nullable=False)
    revenue_share: Optional[int] = None  # basis points, 8900 == 0.89


class PremiereRevenueSummary(SQLModel, table=True):
    __tablename__ = "mat_premiere_revenue_summaries"

    site_id: int = Field(primary_key=True)
    net_premiere_difference: Optional[float] = None
