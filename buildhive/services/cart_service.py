"""
Cart synchronizer: keeps the local cart mirror consistent with the server.

The server is the system of record. The mirror is replaced by a full fetch
whenever the session becomes authenticated, merged locally after adds,
updated optimistically (with rollback) on quantity edits and re-fetched
after removals. Signing out leaves the mirror alone.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from buildhive.core.exceptions import ApiError
from buildhive.core.ui import Confirmer, Navigator, Notifier
from buildhive.domain.cart import (
    CartLine,
    CartTotals,
    compute_totals,
    merge_added_line,
    with_quantity,
)
from buildhive.domain.catalog import Product, ProductSnapshot
from buildhive.integrations.cart_api import CartApi
from buildhive.logging_config import logger

if TYPE_CHECKING:
    from buildhive.integrations.products_api import ProductsApi
    from buildhive.services.session_service import SessionHolder

SIGN_IN_TO_ADD = "Please sign in to add items to cart"
ADD_FAILED = "Failed to add item to cart. Please try again."
REMOVE_FAILED = "Failed to remove item from cart."
UPDATE_FAILED = "Failed to update quantity."
CLEAR_FAILED = "Failed to clear cart."
LOAD_FAILED = "Failed to load cart."
CLEAR_PROMPT = "Are you sure you want to clear your entire cart?"


@dataclass
class CartActionResult:
    ok: bool
    error_key: str | None = None
    message: str | None = None


class CartSynchronizer:
    def __init__(
        self,
        cart_api: CartApi,
        session: SessionHolder,
        notifier: Notifier,
        navigator: Navigator,
        confirmer: Confirmer,
        products_api: ProductsApi | None = None,
        *,
        tax_rate: float = 0.0,
        signin_path: str = "/signin",
    ):
        self.cart_api = cart_api
        self.session = session
        self.notifier = notifier
        self.navigator = navigator
        self.confirmer = confirmer
        self.products_api = products_api
        self.tax_rate = tax_rate
        self.signin_path = signin_path
        self._lines: list[CartLine] = []
        self._loading = False
        session.add_listener(self._on_auth_change)

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def totals(self, tax_rate: float | None = None) -> CartTotals:
        return compute_totals(self._lines, self.tax_rate if tax_rate is None else tax_rate)

    async def _on_auth_change(self, authenticated: bool) -> None:
        # Signing out keeps the mirror; the cart lives server-side
        if authenticated:
            await self.sync()

    async def sync(self) -> None:
        """Replace the mirror with the server's cart."""
        if not self.session.is_authenticated:
            return
        self._loading = True
        try:
            lines = await self.cart_api.get_items()
            self._lines = await self._hydrate_products(lines)
            logger.info(f"Cart synced: {len(self._lines)} lines")
        except ApiError as e:
            logger.error(f"Failed to load cart: {e.message}")
            self._lines = []
            self.notifier.error(LOAD_FAILED)
        finally:
            self._loading = False

    async def _hydrate_products(self, lines: list[CartLine]) -> list[CartLine]:
        if self.products_api is None:
            return lines
        missing = sorted({line.product_id for line in lines if line.product is None})
        if not missing:
            return lines
        results = await asyncio.gather(
            *(self.products_api.get_product(product_id) for product_id in missing),
            return_exceptions=True,
        )
        snapshots: dict[str, ProductSnapshot] = {}
        for product_id, result in zip(missing, results):
            if isinstance(result, ApiError):
                logger.warning(f"Could not load product {product_id} for cart: {result.message}")
            elif isinstance(result, BaseException):
                raise result
            else:
                snapshots[product_id] = result.snapshot()
        return [
            line.model_copy(update={"product": snapshots[line.product_id]})
            if line.product is None and line.product_id in snapshots
            else line
            for line in lines
        ]

    async def add(self, product: ProductSnapshot, quantity: int = 1) -> CartActionResult:
        if not self.session.is_authenticated:
            self.notifier.info(SIGN_IN_TO_ADD)
            self.navigator.go(self.signin_path)
            return CartActionResult(False, "auth_required", SIGN_IN_TO_ADD)
        if quantity < 1:
            return CartActionResult(False, "invalid_quantity")

        try:
            line = await self.cart_api.add(product.id, quantity)
        except ApiError as e:
            message = e.combined_message(ADD_FAILED)
            logger.error(f"Add to cart failed for product {product.id}: {message}")
            self.notifier.error(message)
            return CartActionResult(False, "api_error", message)

        snapshot = product.snapshot() if isinstance(product, Product) else product
        user_id = line.user_id or (self.session.user.id if self.session.user else "")
        self._lines = merge_added_line(
            self._lines,
            line_id=line.id,
            user_id=user_id,
            product=snapshot,
            quantity=quantity,
            created_at=line.created_at,
            updated_at=line.updated_at,
        )
        message = f"{product.name} added to cart!"
        self.notifier.success(message)
        return CartActionResult(True, message=message)

    async def update_quantity(self, line_id: str, quantity: int) -> CartActionResult:
        if not self.session.is_authenticated:
            return CartActionResult(False, "auth_required")
        if quantity < 1:
            return CartActionResult(False, "invalid_quantity")

        previous = list(self._lines)
        self._lines = with_quantity(self._lines, line_id, quantity)
        try:
            await self.cart_api.update_quantity(line_id, quantity)
        except ApiError as e:
            logger.error(f"Quantity update failed for line {line_id}, rolling back: {e.message}")
            self._lines = previous
            self.notifier.error(UPDATE_FAILED)
            return CartActionResult(False, "api_error", UPDATE_FAILED)
        return CartActionResult(True)

    async def remove(self, line_id: str) -> CartActionResult:
        if not self.session.is_authenticated:
            return CartActionResult(False, "auth_required")
        try:
            await self.cart_api.remove(line_id)
        except ApiError as e:
            logger.error(f"Remove failed for line {line_id}: {e.message}")
            self.notifier.error(REMOVE_FAILED)
            return CartActionResult(False, "api_error", REMOVE_FAILED)
        await self.sync()
        self.notifier.success("Item removed from cart")
        return CartActionResult(True)

    async def clear(self, confirm: bool = True) -> CartActionResult:
        if not self.session.is_authenticated:
            return CartActionResult(False, "auth_required")
        if confirm and not self.confirmer.ask(CLEAR_PROMPT):
            return CartActionResult(False, "cancelled")
        try:
            await self.cart_api.clear()
        except ApiError as e:
            logger.error(f"Clear cart failed: {e.message}")
            self.notifier.error(CLEAR_FAILED)
            return CartActionResult(False, "api_error", CLEAR_FAILED)
        self._lines = []
        self.notifier.success("Cart cleared successfully")
        return CartActionResult(True)

    async def clear_after_order(self) -> None:
        """Post-order clear: no prompt, no notices, mirror always emptied."""
        try:
            await self.cart_api.clear()
        except ApiError as e:
            logger.warning(f"Post-order cart clear failed: {e.message}")
        self._lines = []
