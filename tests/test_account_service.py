from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from buildhive.core.exceptions import AuthenticationRequired, ValidationException
from buildhive.domain.address import Address, AddressDraft
from buildhive.domain.identity import Identity
from buildhive.domain.order import Order
from buildhive.services.account_service import DELETE_ADDRESS_PROMPT, AccountService
from conftest import server_error


@dataclass
class DummyUsersApi:
    image_url: str | None = "/uploads/profile/user-1.png"
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> Identity:
        self.calls.append(("update_profile", user_id, fields))
        return Identity(id=user_id, email="buyer@example.com", **fields)

    async def upload_profile_image(self, user_id: str, filename: str, content: bytes, content_type: str) -> str | None:
        self.calls.append(("upload", user_id, filename, content_type))
        return self.image_url

    async def delete_profile_image(self, user_id: str) -> None:
        self.calls.append(("delete_image", user_id))


def _draft(**overrides) -> AddressDraft:
    fields = {
        "full_name": "Ayesha Khan",
        "phone": "+92 300 1234567",
        "address_line1": "12 Mall Road",
        "city": "Lahore",
        "state": "Punjab",
        "postal_code": "54000",
        "country": "Pakistan",
    }
    fields.update(overrides)
    return AddressDraft(**fields)


@pytest.fixture()
def users_api() -> DummyUsersApi:
    return DummyUsersApi()


@pytest.fixture()
def account(session, orders_api, addresses_api, users_api, confirmer) -> AccountService:
    return AccountService(
        session, orders_api, addresses_api, users_api, confirmer, base_url="http://localhost:3000"
    )


@pytest.fixture()
async def signed_in(session):
    await session.login("buyer@example.com", "secret123")
    return session


@pytest.mark.asyncio
async def test_list_orders_only_returns_own_orders(account, orders_api, signed_in):
    orders_api.orders = [
        Order(id="o1", user_id="user-1"),
        Order(id="o2", user_id="someone-else"),
        Order(id="o3", user_id="user-1"),
    ]

    orders = await account.list_orders(status="pending")

    assert [o.id for o in orders] == ["o1", "o3"]
    assert orders_api.calls[0] == ("list_orders", {"status": "pending", "page": None, "limit": None})


@pytest.mark.asyncio
async def test_list_orders_requires_sign_in(account, orders_api):
    with pytest.raises(AuthenticationRequired):
        await account.list_orders()
    assert orders_api.calls == []


@pytest.mark.asyncio
async def test_tracking_only_for_shipped_or_delivered(account, orders_api):
    assert await account.get_tracking(Order(id="o1", status="processing")) is None
    assert orders_api.calls == []

    tracking = await account.get_tracking(Order(id="o1", status="shipped"))

    assert tracking.tracking_number == "TRK-9"


@pytest.mark.asyncio
async def test_tracking_failure_means_not_available(account, orders_api):
    orders_api.tracking_error = server_error("No tracking yet", status=404)

    assert await account.get_tracking(Order(id="o1", status="delivered")) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_rate_order_range(account, orders_api, signed_in, rating):
    with pytest.raises(ValidationException):
        await account.rate_order("o1", rating)
    assert orders_api.calls == []


@pytest.mark.asyncio
async def test_rate_order(account, orders_api, signed_in):
    await account.rate_order("o1", 5, "Fast delivery")

    assert orders_api.calls == [("rate_order", "o1", 5, "Fast delivery")]


@pytest.mark.asyncio
async def test_primary_address_prefers_default(account, addresses_api, signed_in):
    addresses_api.addresses = [
        Address(id="a1", city="Karachi"),
        Address(id="a2", city="Lahore", is_default=True),
    ]

    assert (await account.get_primary_address()).id == "a2"


@pytest.mark.asyncio
async def test_primary_address_none_when_empty(account, signed_in):
    assert await account.get_primary_address() is None


@pytest.mark.asyncio
async def test_save_address_creates_or_updates(account, addresses_api, signed_in):
    created = await account.save_address(_draft())
    updated = await account.save_address(_draft(city="Islamabad"), existing=created)

    assert addresses_api.calls[0][0] == "create"
    assert addresses_api.calls[1] == ("update", "user-1", created.id)
    assert updated.city == "Islamabad"


@pytest.mark.asyncio
async def test_delete_address_asks_first(account, addresses_api, signed_in, confirmer):
    address = await account.save_address(_draft())
    confirmer.answer = False

    assert await account.delete_address(address) is False
    assert confirmer.asked == [DELETE_ADDRESS_PROMPT]
    assert not any(call[0] == "delete" for call in addresses_api.calls)

    confirmer.answer = True
    assert await account.delete_address(address) is True
    assert addresses_api.calls[-1] == ("delete", "user-1", address.id)


@pytest.mark.asyncio
async def test_upload_profile_image_resolves_url_and_refreshes(account, users_api, auth_api, signed_in):
    url = await account.upload_profile_image("me.png", b"\x89PNG", "image/png")

    assert url == "http://localhost:3000/uploads/profile/user-1.png"
    assert users_api.calls == [("upload", "user-1", "me.png", "image/png")]
    assert auth_api.calls[-1] == ("me",)


@pytest.mark.asyncio
async def test_profile_change_survives_refresh_failure(account, users_api, auth_api, signed_in):
    auth_api.me_error = server_error()

    updated = await account.update_profile({"full_name": "Ayesha K."})

    assert updated.full_name == "Ayesha K."
    assert signed_in.is_authenticated


@pytest.mark.asyncio
async def test_delete_profile_image_declined(account, users_api, signed_in, confirmer):
    confirmer.answer = False

    assert await account.delete_profile_image() is False
    assert users_api.calls == []


def test_resolve_image_url(account) -> None:
    assert account.resolve_image_url("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"
    assert account.resolve_image_url("uploads/a.png") == "http://localhost:3000/uploads/a.png"
    assert account.resolve_image_url(None) is None
