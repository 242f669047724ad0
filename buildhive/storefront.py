"""
Composition root.

Builds the storage, HTTP client, resource clients and services from
settings and wires them together. Nothing below this module reaches for
globals: every collaborator is passed in explicitly.
"""
from __future__ import annotations

from buildhive.core.config import Settings, load_settings
from buildhive.core.sentry_integration import init_sentry
from buildhive.core.session_storage import SessionStorage
from buildhive.core.ui import (
    CardConfirmer,
    Confirmer,
    Navigator,
    NoticeBoard,
    Notifier,
    RecordingNavigator,
    StaticConfirmer,
)
from buildhive.integrations.addresses_api import AddressesApi
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.auth_api import AuthApi
from buildhive.integrations.cart_api import CartApi
from buildhive.integrations.categories_api import CategoriesApi
from buildhive.integrations.orders_api import OrdersApi
from buildhive.integrations.payments_api import PaymentsApi
from buildhive.integrations.products_api import ProductsApi
from buildhive.integrations.users_api import UsersApi
from buildhive.logging_config import logger, setup_logging
from buildhive.services.account_service import AccountService
from buildhive.services.cart_service import CartSynchronizer
from buildhive.services.catalog_service import CatalogService
from buildhive.services.checkout_service import CheckoutForm, CheckoutOrchestrator
from buildhive.services.session_service import SessionHolder


class Storefront:
    def __init__(
        self,
        settings: Settings,
        *,
        storage: SessionStorage,
        client: ApiClient,
        notifier: Notifier,
        navigator: Navigator,
        confirmer: Confirmer,
        card_confirmer: CardConfirmer | None = None,
    ):
        self.settings = settings
        self.storage = storage
        self.client = client
        self.notifier = notifier
        self.navigator = navigator
        self.confirmer = confirmer

        self.auth_api = AuthApi(client)
        self.cart_api = CartApi(client)
        self.orders_api = OrdersApi(client)
        self.addresses_api = AddressesApi(client)
        self.payments_api = PaymentsApi(client)
        self.products_api = ProductsApi(client)
        self.categories_api = CategoriesApi(client)
        self.users_api = UsersApi(client)

        self.session = SessionHolder(self.auth_api, storage)
        client.on_unauthorized(self.session.expire)

        self.cart = CartSynchronizer(
            self.cart_api,
            self.session,
            notifier,
            navigator,
            confirmer,
            self.products_api,
            tax_rate=settings.tax_rate,
            signin_path=settings.signin_path,
        )
        self.checkout = CheckoutOrchestrator(
            self.session,
            self.cart,
            self.addresses_api,
            self.orders_api,
            self.payments_api,
            notifier,
            card_confirmer,
        )
        self.account = AccountService(
            self.session,
            self.orders_api,
            self.addresses_api,
            self.users_api,
            confirmer,
            base_url=settings.api_url,
        )
        self.catalog = CatalogService(self.products_api, self.categories_api, self.session)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        notifier: Notifier | None = None,
        navigator: Navigator | None = None,
        confirmer: Confirmer | None = None,
        card_confirmer: CardConfirmer | None = None,
    ) -> Storefront:
        settings = settings or load_settings()
        navigator = navigator or RecordingNavigator()
        storage = SessionStorage(
            settings.session.storage_file,
            default_days=settings.session.cookie_days,
            secure=settings.session.secure,
            same_site=settings.session.same_site,
        )
        client = ApiClient(
            settings.api_url,
            storage=storage,
            timeout=settings.api_timeout,
            signin_path=settings.signin_path,
            navigator=navigator,
        )
        return cls(
            settings,
            storage=storage,
            client=client,
            notifier=notifier or NoticeBoard(),
            navigator=navigator,
            confirmer=confirmer or StaticConfirmer(),
            card_confirmer=card_confirmer,
        )

    def new_checkout_form(self, **fields: str) -> CheckoutForm:
        fields.setdefault("country", self.settings.default_country)
        return CheckoutForm(**fields)

    async def start(self) -> None:
        """Restore the persisted session; an authenticated restore triggers the first cart sync."""
        setup_logging(self.settings.log_level)
        init_sentry(self.settings.sentry_dsn, environment=self.settings.environment)
        logger.info(f"Storefront starting against {self.settings.api_url}")
        await self.session.initialize()

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> Storefront:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
