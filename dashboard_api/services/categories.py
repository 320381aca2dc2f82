"""Category taxonomy listing, used to populate category pickers."""

from __future__ import annotations

from typing import Protocol

from dashboard_api.models.category import Category
from dashboard_api.schemas.categories import CategoryListResponse, CategorySummary


class CategorySource(Protocol):
    async def list_categories(self) -> list[Category]: ...


class CategoriesService:
    def __init__(self, store: CategorySource):
        self.store = store

    async def list_categories(self) -> CategoryListResponse:
        """Every category, ordered by id."""
        categories = await self.store.list_categories()
        return CategoryListResponse(
            categories=[CategorySummary.model_validate(category) for category in categories]
        )
