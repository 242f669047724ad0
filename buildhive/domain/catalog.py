"""Catalog types: products, categories, reviews."""
from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from buildhive.domain.base import ApiModel


def _image_urls(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    images: list[tuple[int, str]] = []
    for index, image in enumerate(raw):
        if isinstance(image, str):
            images.append((index, image))
        elif isinstance(image, dict):
            url = image.get("image_url") or image.get("imageUrl")
            if url:
                order = image.get("display_order", image.get("displayOrder", index))
                try:
                    images.append((int(order), str(url)))
                except (TypeError, ValueError):
                    images.append((index, str(url)))
    images.sort(key=lambda pair: pair[0])
    return [url for _, url in images]


class ProductSnapshot(ApiModel):
    """Denormalized product data carried on a cart line."""

    id: str
    name: str = ""
    slug: str = ""
    price: float | None = None
    compare_at_price: float | None = None
    quantity: int = 0
    images: list[str] = Field(default_factory=list)
    business_name: str | None = None
    author: str = "Unknown"

    @model_validator(mode="before")
    @classmethod
    def _flatten_nested(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        businesses = data.get("businesses")
        if isinstance(businesses, dict) and not data.get("business_name"):
            data["business_name"] = businesses.get("business_name") or businesses.get(
                "businessName"
            )
        raw_images = data.get("product_images", data.get("productImages"))
        if raw_images is not None and not data.get("images"):
            data["images"] = _image_urls(raw_images)
        elif "images" in data:
            data["images"] = _image_urls(data["images"])
        if not data.get("author"):
            data["author"] = data.get("business_name") or data.get("businessName") or "Unknown"
        return data


class Product(ProductSnapshot):
    """Full catalog product."""

    business_id: str | None = None
    category_id: str | None = None
    description: str = ""
    sku: str | None = None
    status: str | None = None
    is_active: bool = True
    is_featured: bool = False
    track_quantity: bool = True
    weight: float | None = None
    weight_unit: str = "kg"
    tags: list[str] = Field(default_factory=list)
    average_rating: float = 0.0
    total_reviews: int = 0

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot.model_validate(
            self.model_dump(include=set(ProductSnapshot.model_fields))
        )


class Category(ApiModel):
    id: str
    name: str
    slug: str | None = None
    description: str | None = None
    image: str | None = None
    parent_id: str | None = None
    display_order: int = 0
    is_active: bool = False
    product_count: int = 0

    @model_validator(mode="before")
    @classmethod
    def _product_count(cls, data: Any) -> Any:
        if isinstance(data, dict) and "product_count" not in data and "productCount" not in data:
            counts = data.get("_count")
            if isinstance(counts, dict) and counts.get("products") is not None:
                data = {**data, "product_count": counts["products"]}
        return data


class Review(ApiModel):
    id: str
    product_id: str | None = None
    user_id: str | None = None
    rating: int
    comment: str | None = None
    created_at: str | None = None
