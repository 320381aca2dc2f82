"""Site user (membership) schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

SiteUserRoleKey = Literal[
    "ad_settings",
    "reporting",
    "video",
    "payment",
    "owner",
    "post_termination_new_owner",
]


class SiteUserCreateRequest(BaseModel):
    email: EmailStr
    email_confirmation: EmailStr
    roles: list[SiteUserRoleKey] = Field(
        ..., min_length=1, description="Roles to assign the user for the site"
    )


class SiteUserUpdateRequest(BaseModel):
    roles: list[SiteUserRoleKey] = Field(
        ..., min_length=1, description="Roles to assign the user for the site"
    )


class SiteUserRead(BaseModel):
    id: int
    site_id: Optional[int] = None
    user_id: Optional[int] = None
    roles: list[str]
    created_at: datetime
    updated_at: datetime


class SiteUserListItem(BaseModel):
    site_user_id: int
    user_id: Optional[int] = None
    site_id: Optional[int] = None
    email: Optional[str] = None
    roles: list[str] = Field(description="The roles the user has for the site")


class SiteUserListResponse(BaseModel):
    site_users: list[SiteUserListItem]
