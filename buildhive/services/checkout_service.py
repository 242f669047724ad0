"""
Checkout/payment orchestrator.

Drives one submitted form to a placed order, either directly (cash on
delivery) or through a card confirmation step. Steps run strictly in
sequence: shipping address, then order, then payment setup.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from buildhive.core.exceptions import ApiError, CheckoutStateError
from buildhive.core.sentry_integration import capture_exception
from buildhive.core.ui import CardConfirmer, Notifier
from buildhive.domain.address import AddressDraft
from buildhive.domain.cart import CartTotals
from buildhive.domain.checkout_fsm import (
    TERMINAL_STATES,
    CheckoutState,
    validate_checkout_transition,
)
from buildhive.domain.order import Order, OrderDraft, OrderItemDraft, PaymentMethod
from buildhive.domain.payment import PaymentSession
from buildhive.integrations.addresses_api import AddressesApi
from buildhive.integrations.orders_api import OrdersApi
from buildhive.integrations.payments_api import PaymentsApi
from buildhive.logging_config import logger

if TYPE_CHECKING:
    from buildhive.services.cart_service import CartSynchronizer
    from buildhive.services.session_service import SessionHolder

REQUIRED_FIELDS = {
    "full_name": "Full name is required",
    "phone": "Phone number is required",
    "address_line1": "Address is required",
    "city": "City is required",
    "state": "State is required",
    "postal_code": "Postal code is required",
}

FORM_INCOMPLETE = "Please fill in all required fields"
CART_EMPTY = "Your cart is empty"
CART_INCOMPLETE = "Cart data is incomplete. Please refresh the page and try again."
USER_MISSING = "User not found. Please sign in again."
ORDER_FAILED = "Failed to place order. Please try again."
PAYMENT_SETUP_FAILED = "Failed to start card payment. Please try again."
PAYMENT_CONFIRM_FAILED = "Failed to confirm payment"
CARD_DECLINED = "Payment failed. Please try again."
PAYMENT_SUCCEEDED = "Payment successful! Your order is confirmed."
BUSY = "Your order is already being processed."


class CheckoutForm(BaseModel):
    full_name: str = ""
    phone: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "Pakistan"
    notes: str = ""
    payment_method: str = PaymentMethod.COD

    def field_errors(self) -> dict[str, str]:
        """Per-field messages for missing required fields; whitespace counts as missing."""
        return {
            name: message
            for name, message in REQUIRED_FIELDS.items()
            if not str(getattr(self, name) or "").strip()
        }

    def address_draft(self) -> AddressDraft:
        return AddressDraft(
            full_name=self.full_name,
            phone=self.phone,
            address_line1=self.address_line1,
            address_line2=self.address_line2,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country,
            is_default=False,
        )


@dataclass
class CheckoutResult:
    ok: bool
    state: str
    order_number: str | None = None
    error_key: str | None = None
    message: str | None = None


class CheckoutOrchestrator:
    def __init__(
        self,
        session: SessionHolder,
        cart: CartSynchronizer,
        addresses_api: AddressesApi,
        orders_api: OrdersApi,
        payments_api: PaymentsApi,
        notifier: Notifier,
        card_confirmer: CardConfirmer | None = None,
    ):
        self.session = session
        self.cart = cart
        self.addresses_api = addresses_api
        self.orders_api = orders_api
        self.payments_api = payments_api
        self.notifier = notifier
        self.card_confirmer = card_confirmer

        self.state = CheckoutState.FORM
        self.errors: dict[str, str] = {}
        self.error_message: str | None = None
        self.order: Order | None = None
        self.payment_session: PaymentSession | None = None
        self._processing = False

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def order_number(self) -> str | None:
        return self.order.order_number if self.order else None

    def summary(self, tax_rate: float | None = None) -> CartTotals:
        return self.cart.totals(tax_rate)

    def _transition(self, target: str) -> None:
        result = validate_checkout_transition(self.state, target)
        if not result.allowed:
            raise CheckoutStateError(self.state, target, result.reason)
        logger.debug("Checkout %s -> %s", self.state, target)
        self.state = target

    def _result(self, ok: bool, error_key: str | None = None, message: str | None = None) -> CheckoutResult:
        return CheckoutResult(ok, self.state, self.order_number, error_key, message)

    def _reject(self, error_key: str, message: str) -> CheckoutResult:
        """Pre-submit failure: nothing was sent, state stays FORM."""
        self.error_message = message
        self.notifier.error(message)
        return self._result(False, error_key, message)

    def _fail(self, error_key: str, message: str) -> CheckoutResult:
        self.error_message = message
        self.notifier.error(message)
        self._transition(CheckoutState.FORM)
        return self._result(False, error_key, message)

    async def submit(self, form: CheckoutForm) -> CheckoutResult:
        if self._processing or self.state != CheckoutState.FORM:
            return self._result(False, "busy", BUSY)

        self.errors = form.field_errors()
        self.error_message = None
        if self.errors:
            return self._reject("invalid_form", FORM_INCOMPLETE)

        lines = self.cart.lines
        if not lines:
            return self._reject("empty_cart", CART_EMPTY)
        invalid = [line.id for line in lines if not line.has_price]
        if invalid:
            logger.warning(f"Checkout aborted, lines without product price: {invalid}")
            return self._reject("invalid_cart", CART_INCOMPLETE)

        user = self.session.user
        if not self.session.is_authenticated or user is None:
            return self._reject("auth_required", USER_MISSING)

        payment_method = PaymentMethod.normalize(form.payment_method)
        self._processing = True
        self._transition(CheckoutState.SUBMITTING)
        try:
            try:
                address = await self.addresses_api.create(user.id, form.address_draft())
            except ApiError as e:
                logger.error(f"Shipping address creation failed: {e.message}")
                return self._fail("address_failed", e.best_message(ORDER_FAILED))

            draft = OrderDraft(
                items=[
                    OrderItemDraft(
                        product_id=line.product_id,
                        quantity=line.quantity,
                        price=line.product.price,
                    )
                    for line in lines
                ],
                shipping_address_id=address.id,
                payment_method=payment_method,
                notes=form.notes.strip() or None,
            )
            try:
                self.order = await self.orders_api.create_order(draft)
            except ApiError as e:
                logger.error(f"Order creation failed: {e.message} errors={e.errors!r}")
                return self._fail("order_failed", e.best_message(ORDER_FAILED))

            if payment_method == PaymentMethod.CARD:
                return await self._start_card_payment(self.order)

            self._transition(CheckoutState.PLACED)
            await self.cart.clear_after_order()
            message = f"Order placed successfully! Order #{self.order.order_number}"
            self.notifier.success(message)
            return self._result(True, message=message)
        except Exception as e:
            if self.state != CheckoutState.SUBMITTING:
                raise
            logger.error(f"Checkout submission failed unexpectedly: {e!r}")
            capture_exception(e, user_id=user.id)
            return self._fail("order_failed", ORDER_FAILED)
        finally:
            self._processing = False

    async def _start_card_payment(self, order: Order) -> CheckoutResult:
        try:
            config, intent = await asyncio.gather(
                self.payments_api.get_config(),
                self.payments_api.create_intent(order.id),
            )
        except ApiError as e:
            logger.warning(f"Card payment setup failed for order {order.id}: {e.message}")
            return self._fail("payment_setup_failed", PAYMENT_SETUP_FAILED)

        payment_session = PaymentSession.build(order.id, config, intent)
        if payment_session is None:
            # The order already exists server-side and is left as is
            logger.warning(f"Unusable payment setup data for order {order.id}")
            return self._fail("payment_setup_failed", PAYMENT_SETUP_FAILED)

        self.payment_session = payment_session
        self._transition(CheckoutState.AWAITING_CARD_CONFIRMATION)
        logger.info(f"Awaiting card confirmation for order {order.order_number}")
        return self._result(True)

    async def confirm_card(self, card: Any) -> CheckoutResult:
        """Confirm the card against the payment provider, then notify the backend.

        Failures keep the awaiting state and the payment session so the card
        step alone can be retried with the same order and intent.
        """
        if self.state != CheckoutState.AWAITING_CARD_CONFIRMATION or self.payment_session is None:
            raise CheckoutStateError(self.state, CheckoutState.PLACED, "No card payment in progress")
        if self._processing:
            return self._result(False, "busy", BUSY)
        if self.card_confirmer is None:
            raise CheckoutStateError(self.state, CheckoutState.PLACED, "No card confirmer configured")

        payment_session = self.payment_session
        self._processing = True
        try:
            try:
                outcome = await self.card_confirmer.confirm_card_payment(
                    payment_session.client_secret,
                    publishable_key=payment_session.config.publishable_key,
                    card=card,
                )
            except Exception as e:
                logger.error(f"Card confirmation raised: {e}")
                capture_exception(e, order_id=payment_session.order_id)
                self.error_message = CARD_DECLINED
                self.notifier.error(CARD_DECLINED)
                return self._result(False, "card_declined", CARD_DECLINED)

            if not outcome.succeeded:
                message = outcome.error_message or CARD_DECLINED
                logger.info(f"Card declined for order {payment_session.order_id}: {message}")
                self.error_message = message
                self.notifier.error(message)
                return self._result(False, "card_declined", message)

            intent_id = outcome.payment_intent_id or payment_session.payment_intent_id
            try:
                await self.payments_api.confirm_intent(intent_id)
            except ApiError as e:
                message = e.best_message(PAYMENT_CONFIRM_FAILED)
                logger.error(f"Confirm payment failed for intent {intent_id}: {e.message}")
                self.error_message = message
                self.notifier.error(message)
                return self._result(False, "payment_confirm_failed", message)

            self._transition(CheckoutState.PLACED)
            self.payment_session = None
            self.error_message = None
            await self.cart.clear_after_order()
            self.notifier.success(PAYMENT_SUCCEEDED)
            return self._result(True, message=PAYMENT_SUCCEEDED)
        finally:
            self._processing = False

    def abandon_card_payment(self) -> None:
        """Leave the card step; the order stays server-side unpaid."""
        if self.state != CheckoutState.AWAITING_CARD_CONFIRMATION:
            return
        if self.payment_session is not None:
            logger.warning(f"Card payment abandoned for order {self.payment_session.order_id}")
        self.payment_session = None
        self._transition(CheckoutState.FORM)

    def reset(self) -> None:
        """Start a fresh checkout after a placed order (or clear a stale form)."""
        if self._processing:
            raise CheckoutStateError(self.state, CheckoutState.FORM, "Checkout is in progress")
        if self.state == CheckoutState.AWAITING_CARD_CONFIRMATION:
            self.abandon_card_payment()
        elif self.state in TERMINAL_STATES or self.state == CheckoutState.SUBMITTING:
            self._transition(CheckoutState.FORM)
        self.errors = {}
        self.error_message = None
        self.order = None
        self.payment_session = None
