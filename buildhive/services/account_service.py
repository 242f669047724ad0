"""Account area: order history, tracking, address book and profile."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

from buildhive.core.exceptions import ApiError, ValidationException
from buildhive.core.ui import Confirmer
from buildhive.domain.address import Address, AddressDraft
from buildhive.domain.identity import Identity
from buildhive.domain.order import Order, OrderTracking
from buildhive.integrations.addresses_api import AddressesApi
from buildhive.integrations.orders_api import OrdersApi
from buildhive.integrations.users_api import UsersApi
from buildhive.logging_config import logger

if TYPE_CHECKING:
    from buildhive.services.session_service import SessionHolder

DELETE_ADDRESS_PROMPT = "Are you sure you want to delete this address?"
DELETE_IMAGE_PROMPT = "Are you sure you want to remove your profile picture?"


class AccountService:
    def __init__(
        self,
        session: SessionHolder,
        orders_api: OrdersApi,
        addresses_api: AddressesApi,
        users_api: UsersApi,
        confirmer: Confirmer,
        *,
        base_url: str = "",
    ):
        self.session = session
        self.orders_api = orders_api
        self.addresses_api = addresses_api
        self.users_api = users_api
        self.confirmer = confirmer
        self.base_url = base_url

    # Orders

    async def list_orders(
        self,
        status: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> list[Order]:
        """Orders owned by the signed-in user, newest first as the server sorts them."""
        user = self.session.require_user("view orders")
        orders, _ = await self.orders_api.list_orders(status=status, page=page, limit=limit)
        owned = [order for order in orders if order.user_id == user.id]
        if len(owned) != len(orders):
            logger.warning(f"Dropped {len(orders) - len(owned)} orders not owned by user {user.id}")
        return owned

    async def get_order(self, order_id: str) -> Order:
        self.session.require_user("view orders")
        return await self.orders_api.get_order(order_id)

    async def cancel_order(self, order_id: str, reason: str | None = None) -> Order | None:
        self.session.require_user("cancel orders")
        order = await self.orders_api.cancel_order(order_id, reason)
        logger.info(f"Order {order_id} cancelled")
        return order

    async def rate_order(self, order_id: str, rating: int, review: str | None = None) -> None:
        self.session.require_user("rate orders")
        if not 1 <= rating <= 5:
            raise ValidationException("Rating must be between 1 and 5", {"rating": "Rating must be between 1 and 5"})
        await self.orders_api.rate_order(order_id, rating, review)

    async def get_invoice(self, order_id: str) -> bytes:
        self.session.require_user("download invoices")
        return await self.orders_api.get_invoice(order_id)

    async def get_tracking(self, order: Order) -> OrderTracking | None:
        """Tracking for shipped/delivered orders; None means not yet available."""
        if not order.is_trackable:
            return None
        try:
            return await self.orders_api.get_tracking(order.id)
        except ApiError as e:
            logger.info(f"Tracking not available for order {order.id}: {e.message}")
            return None

    # Addresses

    async def list_addresses(self) -> list[Address]:
        user = self.session.require_user("manage addresses")
        return await self.addresses_api.list_addresses(user.id)

    async def get_primary_address(self) -> Address | None:
        addresses = await self.list_addresses()
        for address in addresses:
            if address.is_default:
                return address
        return addresses[0] if addresses else None

    async def save_address(self, draft: AddressDraft, existing: Address | None = None) -> Address:
        user = self.session.require_user("manage addresses")
        if existing is not None:
            return await self.addresses_api.update(user.id, existing.id, draft)
        return await self.addresses_api.create(user.id, draft)

    async def delete_address(self, address: Address, confirm: bool = True) -> bool:
        user = self.session.require_user("manage addresses")
        if confirm and not self.confirmer.ask(DELETE_ADDRESS_PROMPT):
            return False
        await self.addresses_api.delete(user.id, address.id)
        return True

    # Profile

    def resolve_image_url(self, url: str | None) -> str | None:
        if not url:
            return None
        if url.startswith("http"):
            return url
        return urljoin(self.base_url.rstrip("/") + "/", url.lstrip("/"))

    async def _refresh_identity(self) -> None:
        try:
            await self.session.refresh_user()
        except ApiError as e:
            logger.error(f"Failed to refresh user after profile change: {e.message}")

    async def update_profile(self, fields: dict[str, Any]) -> Identity | None:
        user = self.session.require_user("update your profile")
        updated = await self.users_api.update_profile(user.id, fields)
        await self._refresh_identity()
        return updated

    async def upload_profile_image(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str | None:
        user = self.session.require_user("update your profile")
        url = await self.users_api.upload_profile_image(user.id, filename, content, content_type)
        await self._refresh_identity()
        return self.resolve_image_url(url)

    async def delete_profile_image(self, confirm: bool = True) -> bool:
        user = self.session.require_user("update your profile")
        if confirm and not self.confirmer.ask(DELETE_IMAGE_PROMPT):
            return False
        await self.users_api.delete_profile_image(user.id)
        await self._refresh_identity()
        return True
