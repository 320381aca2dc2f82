"""User-Site membership (join table carrying a role bitmask)."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIdMixin, TimestampMixin


class SiteUser(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "site_users"

    site_id: int = Field(foreign_key="sites.id", index=True, nullable=False)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    roles_mask: int = Field(default=0, nullable=False)  # SiteUserRole flags
