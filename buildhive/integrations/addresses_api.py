"""Per-user address book endpoints."""
from __future__ import annotations

from buildhive.core.exceptions import MalformedResponseError
from buildhive.domain.address import Address, AddressDraft
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import parse_model, parse_models, unwrap_data


class AddressesApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def create(self, user_id: str, draft: AddressDraft) -> Address:
        payload = await self.client.post(f"/users/{user_id}/addresses", draft.to_payload())
        address = parse_model(Address, unwrap_data(payload))
        if address is None:
            raise MalformedResponseError("Failed to save address", payload=payload)
        return address

    async def list_addresses(self, user_id: str) -> list[Address]:
        return parse_models(Address, unwrap_data(await self.client.get(f"/users/{user_id}/addresses")))

    async def update(self, user_id: str, address_id: str, draft: AddressDraft) -> Address:
        payload = await self.client.put(
            f"/users/{user_id}/addresses/{address_id}", draft.to_payload()
        )
        address = parse_model(Address, unwrap_data(payload))
        if address is None:
            raise MalformedResponseError("Failed to save address", payload=payload)
        return address

    async def delete(self, user_id: str, address_id: str) -> None:
        await self.client.delete(f"/users/{user_id}/addresses/{address_id}")
