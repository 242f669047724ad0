"""Cart mirror types and the pure rules that keep it consistent."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from buildhive.domain.base import ApiModel
from buildhive.domain.catalog import ProductSnapshot


class CartLine(ApiModel):
    id: str
    user_id: str = ""
    product_id: str
    quantity: int = 1
    product: ProductSnapshot | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def has_price(self) -> bool:
        return self.product is not None and bool(self.product.price)

    @property
    def line_total(self) -> float:
        if self.product is None or self.product.price is None:
            return 0.0
        return float(self.product.price) * self.quantity


@dataclass(frozen=True, slots=True)
class CartTotals:
    item_count: int
    subtotal: float
    tax: float
    total: float


def find_line_for_product(lines: Iterable[CartLine], product_id: str) -> CartLine | None:
    for line in lines:
        if line.product_id == product_id:
            return line
    return None


def merge_added_line(
    lines: Sequence[CartLine],
    *,
    line_id: str,
    user_id: str,
    product: ProductSnapshot,
    quantity: int,
    created_at: str | None = None,
    updated_at: str | None = None,
) -> list[CartLine]:
    """Mirror the server's add rule: same product means same line, quantities summed."""
    existing = find_line_for_product(lines, product.id)
    if existing is not None:
        return [
            line.model_copy(update={"quantity": line.quantity + quantity}) if line.id == existing.id else line
            for line in lines
        ]
    return [
        *lines,
        CartLine(
            id=line_id,
            user_id=user_id,
            product_id=product.id,
            quantity=quantity,
            product=product,
            created_at=created_at,
            updated_at=updated_at,
        ),
    ]


def with_quantity(lines: Sequence[CartLine], line_id: str, quantity: int) -> list[CartLine]:
    return [
        line.model_copy(update={"quantity": quantity}) if line.id == line_id else line
        for line in lines
    ]


def compute_totals(lines: Iterable[CartLine], tax_rate: float = 0.0) -> CartTotals:
    lines = list(lines)
    subtotal = sum(line.line_total for line in lines)
    tax = subtotal * tax_rate
    return CartTotals(
        item_count=sum(line.quantity for line in lines),
        subtotal=round(subtotal, 2),
        tax=round(tax, 2),
        total=round(subtotal + tax, 2),
    )
