"""Shared HTTP client for the marketplace REST API."""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Mapping
from urllib.parse import urljoin

import aiohttp

from buildhive.core.exceptions import ApiError, NetworkError, SessionExpiredError
from buildhive.core.session_storage import SessionStorage
from buildhive.core.ui import Navigator
from buildhive.logging_config import logger, mask_token

UnauthorizedHandler = Callable[[], "Awaitable[None] | None"]


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    """Drop ``None`` values and stringify the rest (aiohttp rejects bools)."""
    if not params:
        return None
    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)
    return cleaned or None


class ApiClient:
    """
    aiohttp session wrapper shared by every resource client.

    - Adds ``Authorization: Bearer <token>`` when the session storage holds a token.
    - Raises ``ApiError`` on any non-2xx response and ``NetworkError`` on
      transport failures or timeouts.
    - A 401 clears the persisted session, notifies the registered
      unauthorized handlers, navigates to sign-in and raises
      ``SessionExpiredError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        storage: SessionStorage,
        timeout: float = 30.0,
        signin_path: str = "/signin",
        navigator: Navigator | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.storage = storage
        self.timeout = timeout
        self.signin_path = signin_path
        self.navigator = navigator
        self._session = session
        self._owns_session = session is None
        self._unauthorized_handlers: list[UnauthorizedHandler] = []

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def on_unauthorized(self, handler: UnauthorizedHandler) -> None:
        self._unauthorized_handlers.append(handler)

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"Accept": "application/json"},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed and self._owns_session:
            await self._session.close()

    def _auth_headers(self, path: str) -> dict[str, str]:
        token = self.storage.get_token()
        if token:
            logger.debug("Added auth token %s to request %s", mask_token(token), path)
            return {"Authorization": f"Bearer {token}"}
        logger.debug("Request without auth token: %s", path)
        return {}

    async def _handle_unauthorized(self) -> None:
        logger.warning("401 Unauthorized - clearing session and redirecting to sign-in")
        self.storage.clear_auth()
        for handler in list(self._unauthorized_handlers):
            try:
                result = handler()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Unauthorized handler failed: {e}")
        if self.navigator is not None:
            self.navigator.go(self.signin_path)

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        raw = await response.read()
        if not raw:
            return None
        try:
            return await response.json(content_type=None)
        except ValueError:
            return raw.decode("utf-8", errors="replace")

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
        raw: bool = False,
        handle_unauthorized: bool = True,
    ) -> Any:
        session = await self._get_session()
        url = self.url_for(path)
        headers = self._auth_headers(path)

        try:
            async with session.request(
                method,
                url,
                json=json,
                params=_clean_params(params),
                data=data,
                headers=headers,
            ) as response:
                if 200 <= response.status < 300:
                    logger.debug("Response success: %s %s %s", method, path, response.status)
                    if raw:
                        return await response.read()
                    return await self._read_body(response)

                body = await self._read_body(response)
                logger.error("Response error: %s %s %s", method, path, response.status)
                error = ApiError.from_response(response.status, body)
                if response.status == 401 and handle_unauthorized:
                    await self._handle_unauthorized()
                    raise SessionExpiredError(
                        error.message,
                        status=error.status,
                        errors=error.errors,
                        payload=error.payload,
                        server_message=error.server_message,
                        server_error=error.server_error,
                    )
                raise error
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Network error on {method} {path}: {e!r}")
            raise NetworkError(f"Network error: {e.__class__.__name__}") from e

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def get_bytes(self, path: str) -> bytes:
        return await self.request("GET", path, raw=True)

    async def put_form(self, path: str, form: aiohttp.FormData) -> Any:
        return await self.request("PUT", path, data=form)
