"""Authentication endpoints."""
from __future__ import annotations

from typing import Any

from buildhive.core.casing import camelize_keys
from buildhive.core.exceptions import MalformedResponseError
from buildhive.domain.identity import AuthResult, Identity
from buildhive.integrations.api_client import ApiClient
from buildhive.integrations.responses import parse_model, unwrap_data
from buildhive.logging_config import logger


class AuthApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def _auth_result(self, payload: Any, fallback: str) -> AuthResult:
        result = parse_model(AuthResult, unwrap_data(payload))
        if result is None or not result.access_token:
            raise MalformedResponseError(fallback, payload=payload)
        return result

    async def login(self, email: str, password: str) -> AuthResult:
        # Bad credentials come back as 401; that is not a session expiry
        payload = await self.client.post(
            "/auth/login",
            {"email": email, "password": password},
            handle_unauthorized=False,
        )
        result = self._auth_result(payload, "Login failed")
        logger.info(f"Login succeeded for user {result.user.id} ({result.user.role})")
        return result

    async def register(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        role: str,
        phone: str | None = None,
    ) -> AuthResult:
        body = camelize_keys(
            {
                "email": email,
                "password": password,
                "full_name": full_name,
                "phone": phone or None,
                "role": role,
            }
        )
        payload = await self.client.post("/auth/register", body, handle_unauthorized=False)
        result = self._auth_result(payload, "Registration failed")
        logger.info(f"Registered user {result.user.id} ({result.user.role})")
        return result

    async def logout(self) -> None:
        await self.client.post("/auth/logout", handle_unauthorized=False)

    async def refresh_token(self, refresh_token: str | None = None) -> AuthResult:
        body = {"refreshToken": refresh_token} if refresh_token else None
        payload = await self.client.post("/auth/refresh", body)
        return self._auth_result(payload, "Token refresh failed")

    async def get_current_user(self) -> Identity:
        payload = await self.client.get("/auth/me")
        data = unwrap_data(payload)
        # /auth/me answers either the user or {"user": {...}}
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        user = parse_model(Identity, data)
        if user is None:
            raise MalformedResponseError("Failed to load user", payload=payload)
        return user

    async def change_password(self, current_password: str, new_password: str) -> None:
        logger.info("Changing password")
        await self.client.put(
            "/auth/change-password",
            {"currentPassword": current_password, "newPassword": new_password},
        )

    async def forgot_password(self, email: str) -> None:
        await self.client.post("/auth/forgot-password", {"email": email})

    async def reset_password(self, token: str, new_password: str) -> None:
        await self.client.post(
            "/auth/reset-password",
            {"token": token, "newPassword": new_password},
        )

    async def verify_email(self, token: str) -> None:
        await self.client.get("/auth/verify-email", params={"token": token})
