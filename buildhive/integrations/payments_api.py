"""Card payment endpoints (publishable config and payment intents)."""
from __future__ import annotations

from typing import Any

from buildhive.domain.payment import PaymentConfig, PaymentIntent
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import parse_model, unwrap_data


class PaymentsApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_config(self) -> PaymentConfig:
        """Unusable payloads come back as an empty config rather than raising."""
        payload = await self.client.get("/payment/config")
        return parse_model(PaymentConfig, unwrap_data(payload)) or PaymentConfig()

    async def create_intent(self, order_id: str) -> PaymentIntent:
        payload = await self.client.post("/payment/create-payment-intent", {"orderId": order_id})
        return parse_model(PaymentIntent, unwrap_data(payload)) or PaymentIntent()

    async def confirm_intent(self, payment_intent_id: str) -> Any:
        return unwrap_data(
            await self.client.post(
                "/payment/confirm-payment", {"paymentIntentId": payment_intent_id}
            )
        )
