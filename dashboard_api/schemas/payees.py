"""
Payee-related Pydantic schemas.

Covers: payee create/choose requests, the site payee settings response
(payee, name-confirmed flag, signed iframes) and the existing-payees list.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class PayeeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Payee display name")


class PayeeChooseRequest(BaseModel):
    payee_id: int = Field(..., description="Existing payee to attach to the site")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class PayeeRead(BaseModel):
    id: int
    name: Optional[str] = None
    tipalti_completed: Optional[bool] = Field(
        default=None, description="Whether the payee has been confirmed for the site"
    )
    uuid: Optional[str] = Field(default=None, description="Generated at creation time")
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PayeeFrames(BaseModel):
    history: Optional[str] = Field(default=None, description="iframe for the payment history page")
    edit_profile: Optional[str] = Field(default=None, description="iframe for the payee profile page")


class SitePayeeSettings(BaseModel):
    site: int
    payee_name_updated: Optional[bool] = None
    payee: Optional[PayeeRead] = None
    frames: PayeeFrames


class SitePayeeSettingsResponse(BaseModel):
    site: SitePayeeSettings


class ExistingPayee(BaseModel):
    id: int
    name: Optional[str] = None
    tipalti_completed: Optional[bool] = None
    uuid: Optional[str] = None

    model_config = {"from_attributes": True}


class ExistingPayeesResponse(BaseModel):
    payees: list[ExistingPayee]
