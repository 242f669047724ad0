"""Read-only catalog browsing plus product reviews."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from buildhive.core.exceptions import ValidationException
from buildhive.domain.catalog import Category, Product, Review
from buildhive.integrations.categories_api import CategoriesApi
from buildhive.integrations.products_api import ProductsApi

if TYPE_CHECKING:
    from buildhive.services.session_service import SessionHolder


class CatalogService:
    def __init__(self, products_api: ProductsApi, categories_api: CategoriesApi, session: SessionHolder):
        self.products_api = products_api
        self.categories_api = categories_api
        self.session = session

    async def browse(self, **filters: Any) -> tuple[list[Product], dict[str, Any]]:
        return await self.products_api.list_products(**filters)

    async def product(self, product_id: str) -> Product:
        return await self.products_api.get_product(product_id)

    async def product_by_slug(self, slug: str) -> Product:
        return await self.products_api.get_by_slug(slug)

    async def search(self, term: str, **filters: Any) -> tuple[list[Product], dict[str, Any]]:
        term = term.strip()
        if not term:
            return await self.browse(**filters)
        return await self.products_api.search(term, **filters)

    async def featured(self, limit: int = 8) -> list[Product]:
        return await self.products_api.featured(limit)

    async def categories(self, active_only: bool = True) -> list[Category]:
        if active_only:
            return await self.categories_api.active_categories()
        return await self.categories_api.list_categories()

    async def reviews(self, product_id: str) -> list[Review]:
        return await self.products_api.get_reviews(product_id)

    async def add_review(self, product_id: str, rating: int, comment: str | None = None) -> Review | None:
        self.session.require_user("write a review")
        if not 1 <= rating <= 5:
            raise ValidationException("Rating must be between 1 and 5", {"rating": "Rating must be between 1 and 5"})
        return await self.products_api.create_review(product_id, rating, comment or None)
