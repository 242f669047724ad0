"""Category endpoints."""
from __future__ import annotations

from buildhive.core.exceptions import MalformedResponseError
from buildhive.domain.catalog import Category
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import parse_model, parse_models, unwrap_data


class CategoriesApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list_categories(self) -> list[Category]:
        return parse_models(Category, unwrap_data(await self.client.get("/categories")))

    async def get_category(self, category_id: str) -> Category:
        payload = await self.client.get(f"/categories/{category_id}")
        category = parse_model(Category, unwrap_data(payload))
        if category is None:
            raise MalformedResponseError("Category not found", payload=payload)
        return category

    async def active_categories(self) -> list[Category]:
        return [category for category in await self.list_categories() if category.is_active]
