"""
Session/identity holder: the single owner of "who is signed in".

State is hydrated from the persisted session storage on startup so a
restart does not force a new sign-in, then verified against the backend.
"""
from __future__ import annotations

import inspect
from typing import Awaitable, Callable

from pydantic import BaseModel

from buildhive.core.exceptions import (
    ApiError,
    AuthenticationRequired,
    ValidationException,
)
from buildhive.core.sentry_integration import capture_exception, set_user_context
from buildhive.core.session_storage import REFRESH_TOKEN, SessionStorage
from buildhive.domain.identity import AuthResult, Identity, UserRole
from buildhive.integrations.auth_api import AuthApi
from buildhive.logging_config import logger

MIN_PASSWORD_LENGTH = 8

AuthListener = Callable[[bool], "Awaitable[None] | None"]


def _check_password_length(password: str, field: str = "password") -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        message = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        raise ValidationException(message, {field: message})


def _reraise(error: ApiError, message: str) -> ApiError:
    return ApiError(
        message,
        status=error.status,
        errors=error.errors,
        payload=error.payload,
        server_message=error.server_message,
        server_error=error.server_error,
    )


class RegistrationForm(BaseModel):
    email: str
    password: str
    confirm_password: str
    full_name: str
    phone: str | None = None
    role: str = UserRole.BUYER

    def validate_form(self) -> None:
        """Raise ValidationException before any network call."""
        if self.password != self.confirm_password:
            raise ValidationException(
                "Passwords do not match", {"confirm_password": "Passwords do not match"}
            )
        _check_password_length(self.password)
        if self.role not in UserRole.REGISTRABLE:
            raise ValidationException(
                f"Unsupported role: {self.role}", {"role": "Unsupported role"}
            )


class SessionHolder:
    """Owns the in-memory identity and its persisted copy."""

    def __init__(self, auth_api: AuthApi, storage: SessionStorage):
        self.auth_api = auth_api
        self.storage = storage
        self._user: Identity | None = None
        self._token: str | None = None
        self._loading = True
        self._listeners: list[AuthListener] = []

    @property
    def user(self) -> Identity | None:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and self._token is not None

    @property
    def loading(self) -> bool:
        return self._loading

    def require_user(self, action: str) -> Identity:
        if not self.is_authenticated or self._user is None:
            raise AuthenticationRequired(action)
        return self._user

    def add_listener(self, listener: AuthListener) -> None:
        self._listeners.append(listener)

    async def _notify(self) -> None:
        authenticated = self.is_authenticated
        for listener in list(self._listeners):
            try:
                result = listener(authenticated)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Auth listener failed: {e}")
                capture_exception(e, authenticated=authenticated)

    def _set_identity(self, user: Identity | None, token: str | None) -> None:
        self._user = user
        self._token = token
        set_user_context(user.id if user else None, role=user.role if user else None)

    def _hydrate(self) -> bool:
        token = self.storage.get_token()
        data = self.storage.get_user_data()
        if not token or not data:
            return False
        try:
            user = Identity.model_validate(data)
        except ValueError as e:
            logger.error(f"Stored identity is invalid, ignoring it: {e}")
            return False
        self._set_identity(user, token)
        return True

    async def initialize(self) -> None:
        """Hydrate from storage, then verify against the backend (failure keeps stored data)."""
        try:
            if self._hydrate():
                logger.info(f"Session restored for user {self._user.id}")
                await self._notify()
                try:
                    await self.refresh_user()
                except ApiError as e:
                    logger.error(f"Failed to refresh user data: {e.message}")
        finally:
            self._loading = False

    def _store(self, result: AuthResult) -> None:
        self.storage.store_auth(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            user=result.user.to_storage(),
        )
        self._set_identity(result.user, result.access_token)

    async def login(self, email: str, password: str) -> Identity:
        try:
            result = await self.auth_api.login(email, password)
        except ApiError as e:
            logger.error(f"Login error: {e.message}")
            raise _reraise(e, e.server_message or "Login failed") from e
        self._store(result)
        await self._notify()
        return result.user

    async def register(self, form: RegistrationForm) -> Identity:
        form.validate_form()
        try:
            result = await self.auth_api.register(
                email=form.email,
                password=form.password,
                full_name=form.full_name,
                phone=form.phone,
                role=form.role,
            )
        except ApiError as e:
            logger.error(f"Registration error: {e.message}")
            if e.server_message:
                message = e.combined_message("Registration failed")
            else:
                message = e.best_message("Registration failed")
            raise _reraise(e, message) from e
        self._store(result)
        await self._notify()
        return result.user

    async def logout(self) -> None:
        try:
            await self.auth_api.logout()
        except ApiError as e:
            logger.error(f"Logout error: {e.message}")
        finally:
            self.storage.clear_auth()
            self._set_identity(None, None)
        await self._notify()

    async def expire(self) -> None:
        """Global 401 hook: persisted state is already cleared by the HTTP client."""
        if self._user is None and self._token is None:
            return
        logger.warning("Session expired, dropping identity")
        self._set_identity(None, None)
        await self._notify()

    async def refresh_user(self) -> Identity:
        """Replace the held identity with the server's; raises without touching state."""
        user = await self.auth_api.get_current_user()
        self._set_identity(user, self._token)
        if self.storage.get_token():
            self.storage.store_auth(
                access_token=self.storage.get_token(),
                refresh_token=self.storage.get(REFRESH_TOKEN),
                user=user.to_storage(),
            )
        return user

    async def refresh_token(self) -> str:
        result = await self.auth_api.refresh_token(self.storage.get(REFRESH_TOKEN))
        self.storage.store_auth(
            access_token=result.access_token,
            refresh_token=result.refresh_token or self.storage.get(REFRESH_TOKEN),
            user=result.user.to_storage(),
        )
        self._set_identity(result.user, result.access_token)
        return result.access_token

    async def change_password(self, current_password: str, new_password: str) -> None:
        _check_password_length(new_password, "new_password")
        await self.auth_api.change_password(current_password, new_password)

    async def forgot_password(self, email: str) -> None:
        await self.auth_api.forgot_password(email)

    async def reset_password(self, token: str, new_password: str) -> None:
        _check_password_length(new_password, "new_password")
        await self.auth_api.reset_password(token, new_password)

    async def verify_email(self, token: str) -> None:
        await self.auth_api.verify_email(token)
        if self._user is not None:
            self._user = self._user.model_copy(update={"email_verified": True})
