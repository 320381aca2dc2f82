"""Site model with its sparse key-value bags."""

from datetime import date
from typing import Optional

from sqlalchemy.dialects.postgresql import HSTORE
from sqlmodel import Field, SQLModel

from .base import IntIdMixin, TimestampMixin


class Site(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "sites"

    title: str = Field(nullable=False)
    domain: Optional[str] = Field(default=None, index=True)
    slug: Optional[str] = Field(default=None, index=True)
    test_site: bool = Field(default=False, nullable=False)
    anniversary_on: Optional[date] = None
    live_on: Optional[date] = None
    payee_id: Optional[int] = Field(default=None, foreign_key="payees.id", index=True)
    category_id: Optional[int] = Field(default=None, foreign_key="categories.id")
    profile: dict = Field(default_factory=dict, sa_type=HSTORE, nullable=False)
    settings: dict = Field(default_factory=dict, sa_type=HSTORE, nullable=False)
    social_media: dict = Field(default_factory=dict, sa_type=HSTORE, nullable=False)
