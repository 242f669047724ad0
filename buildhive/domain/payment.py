"""Card payment handles (ephemeral, client-only)."""
from __future__ import annotations

from dataclasses import dataclass

from buildhive.domain.base import ApiModel


class PaymentConfig(ApiModel):
    publishable_key: str = ""
    mode: str | None = None


class PaymentIntent(ApiModel):
    client_secret: str = ""
    payment_intent_id: str = ""


@dataclass(frozen=True, slots=True)
class PaymentSession:
    """Lives between order creation and card confirmation only."""

    order_id: str
    config: PaymentConfig
    client_secret: str
    payment_intent_id: str

    @classmethod
    def build(
        cls, order_id: str, config: PaymentConfig | None, intent: PaymentIntent | None
    ) -> PaymentSession | None:
        """None unless config, client secret and intent id are all usable."""
        if config is None or intent is None:
            return None
        if not config.publishable_key or not intent.client_secret or not intent.payment_intent_id:
            return None
        return cls(
            order_id=order_id,
            config=config,
            client_secret=intent.client_secret,
            payment_intent_id=intent.payment_intent_id,
        )
