"""Category taxonomy listing schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CategorySummary(BaseModel):
    id: int
    title: str
    slug: str

    model_config = {"from_attributes": True}


class CategoryListResponse(BaseModel):
    categories: list[CategorySummary] = Field(default_factory=list)
