"""Server-side cart endpoints."""
from __future__ import annotations

from typing import Any

from buildhive.core.exceptions import MalformedResponseError
from buildhive.domain.cart import CartLine
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import (
    extract_items,
    normalize_cart_line,
    parse_model,
    unwrap_data,
)
from buildhive.logging_config import logger


class CartApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_items(self) -> list[CartLine]:
        payload = await self.client.get("/cart")
        lines: list[CartLine] = []
        for raw in extract_items(payload):
            line = parse_model(CartLine, normalize_cart_line(raw))
            if line is not None:
                lines.append(line)
        logger.debug("Cart fetched: %s lines", len(lines))
        return lines

    async def add(self, product_id: str, quantity: int) -> CartLine:
        """Add a product; the server merges into an existing line for the same product."""
        payload = await self.client.post("/cart", {"productId": product_id, "quantity": quantity})
        data = unwrap_data(payload)
        if isinstance(data, dict) and "product_id" not in data and "productId" not in data:
            data = {**data, "product_id": product_id}
        line = parse_model(CartLine, normalize_cart_line(data))
        if line is None:
            raise MalformedResponseError("Failed to add item to cart", payload=payload)
        return line

    async def update_quantity(self, line_id: str, quantity: int) -> None:
        await self.client.put(f"/cart/{line_id}", {"quantity": quantity})

    async def remove(self, line_id: str) -> None:
        await self.client.delete(f"/cart/{line_id}")

    async def clear(self) -> None:
        await self.client.delete("/cart/clear/all")

    async def get_summary(self) -> dict[str, Any]:
        data = unwrap_data(await self.client.get("/cart/summary"))
        return data if isinstance(data, dict) else {}
