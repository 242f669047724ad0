"""Shipping/billing addresses."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from buildhive.core.casing import camelize_keys
from buildhive.domain.base import ApiModel


class AddressType:
    SHIPPING = "shipping"
    BILLING = "billing"


class Address(ApiModel):
    id: str
    user_id: str | None = None
    address_type: str = AddressType.SHIPPING
    label: str | None = None
    full_name: str = ""
    phone: str = ""
    address_line1: str = ""
    address_line2: str | None = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    is_default: bool = False


class AddressDraft(BaseModel):
    """Address fields as entered on a form; sent to the API in camelCase."""

    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str
    address_type: str | None = None
    label: str | None = None
    is_default: bool = False

    def to_payload(self) -> dict[str, Any]:
        return camelize_keys(self.model_dump())

    @classmethod
    def from_address(cls, address: Address) -> AddressDraft:
        return cls(
            full_name=address.full_name,
            phone=address.phone,
            address_line1=address.address_line1,
            address_line2=address.address_line2 or "",
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            address_type=address.address_type,
            label=address.label,
            is_default=address.is_default,
        )
