"""Order types and status enums (server-owned, read-only on the client)."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from buildhive.domain.base import ApiModel


class OrderStatus:
    """Order lifecycle statuses as reported by the backend."""

    PENDING_PAYMENT = "pending_payment"
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    TRACKABLE = frozenset({SHIPPED, DELIVERED})
    CANCELLABLE = frozenset({PENDING_PAYMENT, PENDING, PROCESSING})


class PaymentStatus:
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod:
    COD = "cod"
    CARD = "card"

    ALL = frozenset({COD, CARD})

    @classmethod
    def normalize(cls, method: str | None) -> str:
        value = str(method or "").strip().lower()
        if value in ("cash", "cash_on_delivery"):
            return cls.COD
        return value or cls.COD


class OrderItemDraft(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)
    price: float

    def to_payload(self) -> dict[str, Any]:
        return {"product_id": self.product_id, "quantity": self.quantity, "price": self.price}


class OrderDraft(BaseModel):
    """Client-assembled payload that creates an order."""

    items: list[OrderItemDraft]
    shipping_address_id: str
    payment_method: str
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "items": [item.to_payload() for item in self.items],
            "shippingAddressId": self.shipping_address_id,
            "paymentMethod": self.payment_method,
        }
        if self.notes:
            payload["notes"] = self.notes
        return payload


class OrderAddress(ApiModel):
    full_name: str = ""
    phone: str = ""
    address_line1: str = ""
    address_line2: str | None = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


class OrderItemProduct(ApiModel):
    name: str = ""
    slug: str = ""
    business_name: str | None = None


class OrderItem(ApiModel):
    id: str | None = None
    order_id: str | None = None
    product_id: str
    quantity: int
    price: float = 0.0
    subtotal: float = 0.0
    product: OrderItemProduct | None = None


class Order(ApiModel):
    id: str
    order_number: str = ""
    user_id: str | None = None
    status: str = OrderStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    payment_method: str | None = None
    subtotal: float = 0.0
    tax_amount: float = 0.0
    shipping_fee: float = 0.0
    discount_amount: float = 0.0
    total_amount: float = 0.0
    currency: str | None = None
    shipping_address: OrderAddress | None = None
    notes: str | None = None
    tracking_number: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    items: list[OrderItem] = Field(default_factory=list)

    @property
    def is_trackable(self) -> bool:
        return self.status in OrderStatus.TRACKABLE


class TrackingEvent(ApiModel):
    status: str
    timestamp: str
    location: str | None = None
    description: str | None = None


class OrderTracking(ApiModel):
    order_id: str | None = None
    tracking_number: str = ""
    carrier: str = ""
    status: str = ""
    estimated_delivery: str | None = None
    shipped_at: str | None = None
    delivered_at: str | None = None
    tracking_url: str | None = None
    tracking_history: list[TrackingEvent] = Field(default_factory=list)
