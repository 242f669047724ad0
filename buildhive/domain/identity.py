"""Authenticated identity."""
from __future__ import annotations

from typing import Any

from buildhive.domain.base import ApiModel


class UserRole:
    BUYER = "buyer"
    CONTRACTOR = "contractor"
    SUPPLIER = "supplier"
    ADMIN = "admin"

    REGISTRABLE = frozenset({BUYER, CONTRACTOR, SUPPLIER})


class Identity(ApiModel):
    id: str
    email: str
    full_name: str = ""
    phone: str | None = None
    role: str = UserRole.BUYER
    email_verified: bool = False
    profile_image: str | None = None

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump()


class AuthResult(ApiModel):
    """Payload of login/register/refresh."""

    user: Identity
    access_token: str
    refresh_token: str | None = None
