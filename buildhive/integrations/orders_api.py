"""Order endpoints."""
from __future__ import annotations

from typing import Any

from buildhive.core.exceptions import MalformedResponseError
from buildhive.domain.order import Order, OrderDraft, OrderTracking
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import (
    extract_order,
    extract_page,
    parse_model,
    parse_models,
    unwrap_data,
)
from buildhive.logging_config import logger


class OrdersApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def _order(self, payload: Any, fallback: str) -> Order:
        order = parse_model(Order, extract_order(payload))
        if order is None:
            raise MalformedResponseError(fallback, payload=payload)
        return order

    async def list_orders(
        self,
        *,
        status: str | None = None,
        payment_status: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> tuple[list[Order], dict[str, Any]]:
        payload = await self.client.get(
            "/orders",
            params={"status": status, "payment_status": payment_status, "page": page, "limit": limit},
        )
        items, meta = extract_page(payload, "orders")
        return parse_models(Order, items), meta

    async def get_order(self, order_id: str) -> Order:
        return self._order(await self.client.get(f"/orders/{order_id}"), "Order not found")

    async def create_order(self, draft: OrderDraft) -> Order:
        payload = await self.client.post("/orders", draft.to_payload())
        order = self._order(payload, "Failed to place order")
        logger.info(f"Order created: {order.order_number} (id={order.id})")
        return order

    async def cancel_order(self, order_id: str, reason: str | None = None) -> Order | None:
        payload = await self.client.put(f"/orders/{order_id}/cancel", {"reason": reason})
        return parse_model(Order, extract_order(payload))

    async def get_tracking(self, order_id: str) -> OrderTracking:
        payload = await self.client.get(f"/orders/{order_id}/tracking")
        tracking = parse_model(OrderTracking, unwrap_data(payload))
        if tracking is None:
            raise MalformedResponseError("Tracking not available", payload=payload)
        return tracking

    async def get_invoice(self, order_id: str) -> bytes:
        return await self.client.get_bytes(f"/orders/{order_id}/invoice")

    async def rate_order(self, order_id: str, rating: int, review: str | None = None) -> None:
        await self.client.post(f"/orders/{order_id}/rate", {"rating": rating, "review": review})
