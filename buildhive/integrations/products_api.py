"""Catalog product and review endpoints."""
from __future__ import annotations

from typing import Any

from buildhive.core.exceptions import MalformedResponseError
from buildhive.domain.catalog import Product, Review
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import extract_page, parse_model, parse_models, unwrap_data

FILTER_KEYS = {
    "search": "search",
    "category_id": "categoryId",
    "business_id": "businessId",
    "min_price": "minPrice",
    "max_price": "maxPrice",
    "page": "page",
    "limit": "limit",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
    "status": "status",
    "is_active": "isActive",
}


def _query(filters: dict[str, Any]) -> dict[str, Any]:
    unknown = set(filters) - set(FILTER_KEYS)
    if unknown:
        raise TypeError(f"Unknown product filters: {', '.join(sorted(unknown))}")
    return {FILTER_KEYS[key]: value for key, value in filters.items() if value is not None}


class ProductsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def _product(self, payload: Any) -> Product:
        product = parse_model(Product, unwrap_data(payload))
        if product is None:
            raise MalformedResponseError("Product not found", payload=payload)
        return product

    async def list_products(self, **filters: Any) -> tuple[list[Product], dict[str, Any]]:
        payload = await self.client.get("/products", params=_query(filters))
        items, meta = extract_page(payload, "products")
        return parse_models(Product, items), meta

    async def get_product(self, product_id: str) -> Product:
        return self._product(await self.client.get(f"/products/{product_id}"))

    async def get_by_slug(self, slug: str) -> Product:
        return self._product(await self.client.get(f"/products/slug/{slug}"))

    async def search(self, term: str, **filters: Any) -> tuple[list[Product], dict[str, Any]]:
        filters.pop("search", None)
        return await self.list_products(search=term, **filters)

    async def by_category(self, category_id: str, **filters: Any) -> tuple[list[Product], dict[str, Any]]:
        filters.pop("category_id", None)
        return await self.list_products(category_id=category_id, **filters)

    async def featured(self, limit: int = 8) -> list[Product]:
        """Most recent approved, active products."""
        products, _ = await self.list_products(
            status="approved",
            is_active=True,
            limit=limit,
            sort_by="created_at",
            sort_order="desc",
        )
        return products

    async def get_reviews(self, product_id: str) -> list[Review]:
        return parse_models(Review, unwrap_data(await self.client.get(f"/products/{product_id}/reviews")))

    async def create_review(self, product_id: str, rating: int, comment: str | None = None) -> Review | None:
        payload = await self.client.post(
            f"/products/{product_id}/reviews", {"rating": rating, "comment": comment}
        )
        return parse_model(Review, unwrap_data(payload))

    async def update_review(
        self,
        product_id: str,
        review_id: str,
        *,
        rating: int | None = None,
        comment: str | None = None,
    ) -> Review | None:
        body = {key: value for key, value in (("rating", rating), ("comment", comment)) if value is not None}
        payload = await self.client.put(f"/products/{product_id}/reviews/{review_id}", body)
        return parse_model(Review, unwrap_data(payload))

    async def delete_review(self, product_id: str, review_id: str) -> None:
        await self.client.delete(f"/products/{product_id}/reviews/{review_id}")
