"""Video model (only the fields used for access checks)."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIdMixin, TimestampMixin


class Video(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "videos"

    site_id: int = Field(foreign_key="sites.id", index=True, nullable=False)
    slug: str = Field(unique=True, index=True, nullable=False)
    title: Optional[str] = None
