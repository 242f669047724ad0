"""Shared fixtures: an in-process fake backend and resource-client doubles."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from buildhive.core.exceptions import ApiError
from buildhive.core.session_storage import SessionStorage
from buildhive.core.ui import CardConfirmation, NoticeBoard, RecordingNavigator, StaticConfirmer
from buildhive.domain.address import Address, AddressDraft
from buildhive.domain.cart import CartLine, find_line_for_product
from buildhive.domain.catalog import Product, ProductSnapshot
from buildhive.domain.identity import AuthResult, Identity
from buildhive.domain.order import Order, OrderDraft, OrderTracking
from buildhive.domain.payment import PaymentConfig, PaymentIntent
from buildhive.integrations.api_client import ApiClient
from buildhive.services.session_service import SessionHolder


def server_error(message: str = "Server exploded", status: int = 500, errors: Any = None) -> ApiError:
    return ApiError.from_response(status, {"success": False, "message": message, "errors": errors})


# HTTP-level fake backend


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: dict[str, str]
    headers: dict[str, str]
    body: Any


class FakeBackend:
    """Answers every route from a (method, path) -> (status, body) table."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[RecordedRequest] = []
        self.url = ""
        self.app = web.Application()
        self.app.router.add_route("*", "/{tail:.*}", self._handle)

    def respond(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method.upper(), path)] = (status, body)

    def last(self) -> RecordedRequest:
        return self.requests[-1]

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        body: Any = None
        if request.content_type == "application/json" and request.can_read_body:
            body = await request.json()
        elif request.content_type.startswith("multipart/"):
            form = await request.post()
            body = {key: getattr(value, "filename", value) for key, value in form.items()}
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                query=dict(request.query),
                headers=dict(request.headers),
                body=body,
            )
        )
        status, payload = self.routes.get((request.method, request.path), (404, {"message": "Not found"}))
        if isinstance(payload, bytes):
            return web.Response(status=status, body=payload, content_type="application/pdf")
        if payload is None:
            return web.Response(status=status)
        if isinstance(payload, str):
            return web.Response(status=status, text=payload)
        return web.json_response(payload, status=status)


@pytest.fixture()
async def backend():
    fake = FakeBackend()
    server = TestServer(fake.app)
    await server.start_server()
    fake.url = str(server.make_url("/"))
    try:
        yield fake
    finally:
        await server.close()


@pytest.fixture()
def storage() -> SessionStorage:
    return SessionStorage()


@pytest.fixture()
def notifier() -> NoticeBoard:
    return NoticeBoard()


@pytest.fixture()
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture()
def confirmer() -> StaticConfirmer:
    return StaticConfirmer()


@pytest.fixture()
async def api_client(backend: FakeBackend, storage: SessionStorage, navigator: RecordingNavigator):
    client = ApiClient(backend.url, storage=storage, navigator=navigator, timeout=5)
    try:
        yield client
    finally:
        await client.close()


# Resource-client doubles


def make_product(product_id: str = "prod-1", name: str = "Portland Cement 50kg", price: float | None = 1250.0) -> Product:
    return Product(
        id=product_id,
        name=name,
        slug=name.lower().replace(" ", "-"),
        price=price,
        quantity=100,
        business_name="Lahore Building Supplies",
    )


@dataclass
class FakeAuthApi:
    user: Identity = field(
        default_factory=lambda: Identity(
            id="user-1", email="buyer@example.com", full_name="Ayesha Khan", role="buyer"
        )
    )
    error: ApiError | None = None
    me_error: ApiError | None = None
    logout_error: ApiError | None = None
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    def _result(self, token: str = "access-token") -> AuthResult:
        return AuthResult(user=self.user, access_token=token, refresh_token="refresh-token")

    async def login(self, email: str, password: str) -> AuthResult:
        self.calls.append(("login", email))
        if self.error:
            raise self.error
        return self._result()

    async def register(self, **fields: Any) -> AuthResult:
        self.calls.append(("register", fields))
        if self.error:
            raise self.error
        return self._result()

    async def logout(self) -> None:
        self.calls.append(("logout",))
        if self.logout_error:
            raise self.logout_error

    async def get_current_user(self) -> Identity:
        self.calls.append(("me",))
        if self.me_error:
            raise self.me_error
        return self.user

    async def refresh_token(self, refresh_token: str | None = None) -> AuthResult:
        self.calls.append(("refresh", refresh_token))
        return self._result("access-token-2")

    async def change_password(self, current_password: str, new_password: str) -> None:
        self.calls.append(("change_password",))

    async def forgot_password(self, email: str) -> None:
        self.calls.append(("forgot_password", email))

    async def reset_password(self, token: str, new_password: str) -> None:
        self.calls.append(("reset_password", token))

    async def verify_email(self, token: str) -> None:
        self.calls.append(("verify_email", token))


@dataclass
class FakeCartApi:
    """Server-side cart with the same merge rule as the real backend."""

    catalog: dict[str, ProductSnapshot] = field(default_factory=dict)
    server_lines: list[CartLine] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)
    calls: list[tuple[Any, ...]] = field(default_factory=list)
    next_id: int = 1

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise server_error()

    def put(self, line_id: str, product: ProductSnapshot, quantity: int) -> None:
        self.catalog[product.id] = product
        self.server_lines.append(
            CartLine(id=line_id, user_id="user-1", product_id=product.id, quantity=quantity, product=product)
        )

    async def get_items(self) -> list[CartLine]:
        self.calls.append(("get_items",))
        self._maybe_fail("get_items")
        return list(self.server_lines)

    async def add(self, product_id: str, quantity: int) -> CartLine:
        self.calls.append(("add", product_id, quantity))
        self._maybe_fail("add")
        existing = find_line_for_product(self.server_lines, product_id)
        if existing is not None:
            merged = existing.model_copy(update={"quantity": existing.quantity + quantity})
            self.server_lines = [merged if line.id == existing.id else line for line in self.server_lines]
            return merged.model_copy(update={"product": None})
        line = CartLine(
            id=f"line-{self.next_id}",
            user_id="user-1",
            product_id=product_id,
            quantity=quantity,
            product=self.catalog.get(product_id),
        )
        self.next_id += 1
        self.server_lines.append(line)
        return line.model_copy(update={"product": None})

    async def update_quantity(self, line_id: str, quantity: int) -> None:
        self.calls.append(("update_quantity", line_id, quantity))
        self._maybe_fail("update_quantity")
        self.server_lines = [
            line.model_copy(update={"quantity": quantity}) if line.id == line_id else line
            for line in self.server_lines
        ]

    async def remove(self, line_id: str) -> None:
        self.calls.append(("remove", line_id))
        self._maybe_fail("remove")
        self.server_lines = [line for line in self.server_lines if line.id != line_id]

    async def clear(self) -> None:
        self.calls.append(("clear",))
        self._maybe_fail("clear")
        self.server_lines = []


@dataclass
class FakeProductsApi:
    products: dict[str, Product] = field(default_factory=dict)
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    async def get_product(self, product_id: str) -> Product:
        self.calls.append(("get_product", product_id))
        if product_id not in self.products:
            raise server_error("Product not found", status=404)
        return self.products[product_id]


@dataclass
class FakeAddressesApi:
    error: ApiError | None = None
    addresses: list[Address] = field(default_factory=list)
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    async def create(self, user_id: str, draft: AddressDraft) -> Address:
        self.calls.append(("create", user_id, draft))
        if self.error:
            raise self.error
        address = Address(id=f"addr-{len(self.addresses) + 1}", user_id=user_id, **draft.model_dump(exclude_none=True))
        self.addresses.append(address)
        return address

    async def list_addresses(self, user_id: str) -> list[Address]:
        self.calls.append(("list", user_id))
        return list(self.addresses)

    async def update(self, user_id: str, address_id: str, draft: AddressDraft) -> Address:
        self.calls.append(("update", user_id, address_id))
        return Address(id=address_id, user_id=user_id, **draft.model_dump(exclude_none=True))

    async def delete(self, user_id: str, address_id: str) -> None:
        self.calls.append(("delete", user_id, address_id))
        self.addresses = [a for a in self.addresses if a.id != address_id]


@dataclass
class FakeOrdersApi:
    error: ApiError | None = None
    orders: list[Order] = field(default_factory=list)
    tracking_error: ApiError | None = None
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    async def create_order(self, draft: OrderDraft) -> Order:
        self.calls.append(("create_order", draft))
        if self.error:
            raise self.error
        return Order(
            id="order-1",
            order_number="BH-1001",
            user_id="user-1",
            payment_method=draft.payment_method,
            total_amount=sum(item.price * item.quantity for item in draft.items),
        )

    async def list_orders(self, **params: Any) -> tuple[list[Order], dict[str, Any]]:
        self.calls.append(("list_orders", params))
        return list(self.orders), {"total": len(self.orders)}

    async def get_tracking(self, order_id: str) -> OrderTracking:
        self.calls.append(("get_tracking", order_id))
        if self.tracking_error:
            raise self.tracking_error
        return OrderTracking(order_id=order_id, tracking_number="TRK-9", carrier="TCS", status="in_transit")

    async def rate_order(self, order_id: str, rating: int, review: str | None = None) -> None:
        self.calls.append(("rate_order", order_id, rating, review))


@dataclass
class FakePaymentsApi:
    config: PaymentConfig = field(default_factory=lambda: PaymentConfig(publishable_key="pk_test_123", mode="test"))
    intent: PaymentIntent = field(
        default_factory=lambda: PaymentIntent(client_secret="pi_123_secret_abc", payment_intent_id="pi_123")
    )
    config_error: ApiError | None = None
    intent_error: ApiError | None = None
    confirm_error: ApiError | None = None
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    async def get_config(self) -> PaymentConfig:
        self.calls.append(("get_config",))
        if self.config_error:
            raise self.config_error
        return self.config

    async def create_intent(self, order_id: str) -> PaymentIntent:
        self.calls.append(("create_intent", order_id))
        if self.intent_error:
            raise self.intent_error
        return self.intent

    async def confirm_intent(self, payment_intent_id: str) -> Any:
        self.calls.append(("confirm_intent", payment_intent_id))
        if self.confirm_error:
            raise self.confirm_error
        return {"status": "succeeded"}


@dataclass
class FakeCardConfirmer:
    outcome: CardConfirmation = field(default_factory=lambda: CardConfirmation(True, "pi_123"))
    calls: list[tuple[Any, ...]] = field(default_factory=list)

    async def confirm_card_payment(self, client_secret: str, *, publishable_key: str, card: Any) -> CardConfirmation:
        self.calls.append((client_secret, publishable_key, card))
        return self.outcome


@pytest.fixture()
def auth_api() -> FakeAuthApi:
    return FakeAuthApi()


@pytest.fixture()
def session(auth_api: FakeAuthApi, storage: SessionStorage) -> SessionHolder:
    return SessionHolder(auth_api, storage)


@pytest.fixture()
def product() -> Product:
    return make_product()


@pytest.fixture()
def cart_api(product: Product) -> FakeCartApi:
    return FakeCartApi(catalog={product.id: product.snapshot()})


@pytest.fixture()
def addresses_api() -> FakeAddressesApi:
    return FakeAddressesApi()


@pytest.fixture()
def orders_api() -> FakeOrdersApi:
    return FakeOrdersApi()


@pytest.fixture()
def payments_api() -> FakePaymentsApi:
    return FakePaymentsApi()


@pytest.fixture()
def card_confirmer() -> FakeCardConfirmer:
    return FakeCardConfirmer()
