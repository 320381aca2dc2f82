"""Category taxonomy and the site <-> category link table."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIdMixin, TimestampMixin


class Category(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "categories"

    title: str = Field(nullable=False)
    slug: str = Field(nullable=False, index=True)
    iab_code: Optional[str] = None
    parent_id: Optional[int] = Field(default=None, foreign_key="categories.id")


class CategorySite(TimestampMixin, SQLModel, table=True):
    __tablename__ = "categories_sites"

    site_id: int = Field(foreign_key="sites.id", primary_key=True)
    category_id: int = Field(foreign_key="categories.id", primary_key=True)
