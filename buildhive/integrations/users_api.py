"""Profile endpoints."""
from __future__ import annotations

from typing import Any

import aiohttp

from buildhive.core.casing import camelize_keys
from buildhive.core.exceptions import MalformedResponseError
from buildhive.domain.identity import Identity
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import parse_model, unwrap_data


class UsersApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_profile(self) -> Identity:
        payload = await self.client.get("/users/profile")
        user = parse_model(Identity, unwrap_data(payload))
        if user is None:
            raise MalformedResponseError("Failed to load profile", payload=payload)
        return user

    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> Identity | None:
        payload = await self.client.put(f"/users/{user_id}", camelize_keys(fields))
        return parse_model(Identity, unwrap_data(payload))

    async def upload_profile_image(
        self,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str | None:
        """Returns the stored image URL as reported by the server."""
        form = aiohttp.FormData()
        form.add_field("image", content, filename=filename, content_type=content_type)
        data = unwrap_data(await self.client.put_form(f"/users/{user_id}/profile-image", form))
        if isinstance(data, dict):
            url = data.get("imageUrl") or data.get("image_url") or data.get("profile_image")
            return str(url) if url else None
        return None

    async def delete_profile_image(self, user_id: str) -> None:
        await self.client.delete(f"/users/{user_id}/profile-image")
