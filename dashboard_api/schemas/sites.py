"""Site summary schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class SiteLoyalty(BaseModel):
    anniversary_on: Optional[date] = None
    live_on: Optional[date] = None
    loyalty_bonus: Optional[float] = Field(
        default=None, description="Bonus added to revenue_share for each full year with the network"
    )
    revenue_share: Optional[float] = Field(
        default=None, description="Revenue share without the loyalty bonus"
    )
    impressions: Optional[int] = Field(
        default=None, description="Paid impressions from 32 days ago through 2 days ago"
    )
    impressions_for_eighty: int
    impressions_for_eightytwofive: int
    impressions_for_eightyfive: int


class SiteSummary(BaseModel):
    id: int
    title: Optional[str] = None
    domain: Optional[str] = None
    slug: Optional[str] = None
    test_site: Optional[bool] = None
    created_at: Optional[datetime] = None

    killswitch: Optional[bool] = None
    disable_reporting: Optional[bool] = None
    owned: Optional[bool] = None
    loyalty_bonus_disabled: Optional[bool] = None
    chicory_enabled: bool = False
    zergnet_enabled: bool = False
    gutter_enable: Optional[bool] = None
    disable_onboarding_wizard: Optional[bool] = None
    enable_automatic_recipe_selectors: Optional[bool] = None

    given_notice: Optional[bool] = None
    loyalty: Optional[SiteLoyalty] = None

    needs_payment: bool
    tipalti_completed: Optional[bool] = None
    payee_name_updated: Optional[bool] = None

    premiere_invited: Optional[bool] = None
    premiere_accepted: Optional[bool] = None
    premiere_accepted_on: Optional[datetime] = None
    premiere_accepted_by: Optional[str] = None
    premiere_manage_account: Optional[bool] = None

    pro_invited: Optional[bool] = None
    pro_invited_on: Optional[datetime] = None
    revenue_share_pro: Optional[float] = None
    pro_accepted: Optional[str] = None
    pro_accepted_on: Optional[datetime] = None
    pro_accepted_by: Optional[str] = None
    pro_last_audit: Optional[date] = None
    pro_last_inspected: Optional[date] = None

    accepted_terms_of_service: Optional[bool] = None
    accepted_terms_of_service_by: Optional[str] = None
    accepted_terms_of_service_on: Optional[datetime] = None
    address_verified_at: Optional[date] = None
    address_exists: Optional[bool] = None
    address_expired: Optional[bool] = None

    ganalytics_state: Optional[str] = None
    ganalytics_refresh_token_expired_at: Optional[datetime] = None


class SiteSummaryResponse(BaseModel):
    site: SiteSummary
