"""Domain types for the storefront."""
from __future__ import annotations

from buildhive.domain.address import Address, AddressDraft, AddressType
from buildhive.domain.cart import CartLine, CartTotals
from buildhive.domain.catalog import Category, Product, ProductSnapshot, Review
from buildhive.domain.checkout_fsm import CheckoutState
from buildhive.domain.identity import AuthResult, Identity, UserRole
from buildhive.domain.order import (
    Order,
    OrderDraft,
    OrderItemDraft,
    OrderStatus,
    OrderTracking,
    PaymentMethod,
    PaymentStatus,
)
from buildhive.domain.payment import PaymentConfig, PaymentIntent, PaymentSession

__all__ = [
    "Address",
    "AddressDraft",
    "AddressType",
    "AuthResult",
    "CartLine",
    "CartTotals",
    "Category",
    "CheckoutState",
    "Identity",
    "Order",
    "OrderDraft",
    "OrderItemDraft",
    "OrderStatus",
    "OrderTracking",
    "PaymentConfig",
    "PaymentIntent",
    "PaymentMethod",
    "PaymentSession",
    "PaymentStatus",
    "Product",
    "ProductSnapshot",
    "Review",
    "UserRole",
]
