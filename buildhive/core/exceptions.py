"""Custom exceptions for the BuildHive storefront client."""
from __future__ import annotations

from typing import Any


class BuildHiveException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(BuildHiveException):
    """Configuration errors."""

    pass


class ValidationException(BuildHiveException):
    """Client-side validation errors, raised before any network call."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field_errors = dict(field_errors or {})


class AuthenticationRequired(BuildHiveException):
    """An authenticated operation was invoked while signed out."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Sign in required to {action}")
        self.action = action


def _error_entry_text(entry: Any) -> str:
    if isinstance(entry, dict):
        text = entry.get("message") or entry.get("msg")
        if text:
            return str(text)
    if isinstance(entry, str):
        return entry
    return str(entry)


class ApiError(BuildHiveException):
    """Non-2xx response from the backend."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        errors: Any = None,
        payload: Any = None,
        server_message: str | None = None,
        server_error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.errors = errors
        self.payload = payload
        self.server_message = server_message
        self.server_error = server_error

    @classmethod
    def from_response(cls, status: int, payload: Any) -> ApiError:
        server_message = server_error = None
        errors = None
        if isinstance(payload, dict):
            server_message = payload.get("message") or None
            server_error = payload.get("error") or None
            errors = payload.get("errors")
        message = server_message or server_error or f"Request failed with status {status}"
        return cls(
            str(message),
            status=status,
            errors=errors,
            payload=payload,
            server_message=server_message,
            server_error=server_error,
        )

    @property
    def validation_messages(self) -> list[str]:
        if isinstance(self.errors, list):
            return [_error_entry_text(entry) for entry in self.errors]
        if isinstance(self.errors, str) and self.errors:
            return [self.errors]
        return []

    def best_message(self, fallback: str) -> str:
        """Most specific user-facing message: field errors, then server text, then fallback."""
        validation = self.validation_messages
        if validation:
            return ", ".join(validation)
        return self.server_message or self.server_error or fallback

    def combined_message(self, fallback: str) -> str:
        """Server message with the field errors appended, e.g. ``Invalid: a, b``."""
        base = self.server_message or self.server_error or fallback
        validation = self.validation_messages
        if validation:
            return f"{base}: {', '.join(validation)}"
        return base


class SessionExpiredError(ApiError):
    """401 from any call; the persisted session has been cleared."""

    pass


class NetworkError(ApiError):
    """Transport failure or timeout before any response arrived."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status=None)


class MalformedResponseError(ApiError):
    """Response shape could not be normalized where a value is required."""

    pass


class CheckoutStateError(BuildHiveException):
    """Checkout operation invoked in a state that does not allow it."""

    def __init__(self, current: str, target: str, reason: str | None = None) -> None:
        super().__init__(reason or f"Transition '{current} -> {target}' is not allowed.")
        self.current = current
        self.target = target
