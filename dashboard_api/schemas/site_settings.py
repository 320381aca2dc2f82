"""
Site profile settings schemas.

The update request is sparse: every field is optional and the service
dumps it with ``exclude_unset=True`` so that an omitted field leaves the
stored value alone while an explicit ``null`` clears it. Fields the
request does not declare are ignored.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class CategoryRead(BaseModel):
    id: int
    title: Optional[str] = None
    slug: Optional[str] = None
    iab_code: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ProfileSettingsUpdateRequest(BaseModel):
    site_description: Optional[str] = None
    site_image: Optional[str] = None
    slug_override: Optional[str] = None
    author_name: Optional[str] = None
    author_bio: Optional[str] = None
    author_image: Optional[str] = None
    contact_email: Optional[str] = None
    pinterest_email: Optional[str] = None
    phone_number: Optional[str] = None
    screenshot_timestamp: Optional[int] = None
    country_of_operation: Optional[str] = None
    brand_color: Optional[str] = None

    # Social media handles
    facebook: Optional[str] = None
    snapchat: Optional[str] = None
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    twitter: Optional[str] = None
    youtube: Optional[str] = None
    pinterest: Optional[str] = None

    # Address
    address1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None
    verify_address: Optional[bool] = Field(
        default=None, description="Re-stamp the verification date without changing the address"
    )

    # Categories
    category_id: Optional[int] = Field(default=None, description="Primary category")
    category_ids: Optional[list[int]] = Field(
        default=None, description="Complete set of linked categories"
    )

    # Program acceptance and terms
    given_notice: Optional[bool] = None
    accepted_terms_of_service: Optional[bool] = None
    pro_accepted: Optional[str] = None
    premiere_accepted: Optional[bool] = None
    premiere_manage_account: Optional[bool] = None

    model_config = {"extra": "ignore"}


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ProfileSettings(BaseModel):
    site_id: int
    site_title: Optional[str] = None
    site_description: Optional[str] = None
    site_image: Optional[str] = None
    author_name: Optional[str] = None
    author_bio: Optional[str] = None
    author_image: Optional[str] = None
    brand_color: Optional[str] = None
    contact_email: Optional[str] = None
    pinterest_email: Optional[str] = None
    phone_number: Optional[str] = None
    country_of_operation: Optional[str] = None

    address1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None
    address_exists: Optional[bool] = None
    address_expired: Optional[bool] = None
    address_verified_at: Optional[date] = Field(
        default=None, description="The date the address was last verified"
    )

    category_id: Optional[CategoryRead] = None
    category_ids: list[CategoryRead] = Field(default_factory=list)

    facebook: Optional[str] = None
    instagram: Optional[str] = None
    pinterest: Optional[str] = None
    snapchat: Optional[str] = None
    tiktok: Optional[str] = None
    twitter: Optional[str] = None
    youtube: Optional[str] = None

    influencer_non_profit_rate: Optional[float] = None
    influencer_non_profit_work: Optional[bool] = None

    accepted_terms_of_service: Optional[bool] = None
    accepted_terms_of_service_by: Optional[str] = None
    accepted_terms_of_service_on: Optional[datetime] = None
    pro_invited: Optional[bool] = None
    pro_accepted: Optional[str] = None
    premiere_invited: Optional[bool] = None
    premiere_accepted: Optional[bool] = None
    premiere_manage_account: Optional[bool] = None
    premiere_net_difference: Optional[float] = None


class ProfileSettingsResponse(BaseModel):
    site: ProfileSettings
