"""Environment-driven configuration objects for the storefront client."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from dotenv import load_dotenv

from buildhive.core.exceptions import ConfigurationException

DEFAULT_API_URL = "http://localhost:3000"


def _str_to_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"true", "1", "yes", "y"}


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from e


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from e


@dataclass(slots=True)
class SessionConfig:
    storage_file: str | None = None
    cookie_days: int = 7
    secure: bool = False
    same_site: str = "Lax"


@dataclass(slots=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    api_timeout: float = 30.0
    signin_path: str = "/signin"
    tax_rate: float = 0.05
    default_country: str = "Pakistan"
    environment: str = "production"
    sentry_dsn: str | None = None
    log_level: str = "INFO"
    session: SessionConfig = field(default_factory=SessionConfig)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local", "test")


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    api_url = (os.getenv("BUILDHIVE_API_URL") or DEFAULT_API_URL).rstrip("/")
    parsed = urlsplit(api_url)
    if not parsed.scheme or not parsed.netloc:
        raise ConfigurationException(f"BUILDHIVE_API_URL is not a valid URL: {api_url!r}")

    timeout = _get_float("BUILDHIVE_API_TIMEOUT", 30.0)
    if timeout <= 0:
        raise ConfigurationException("BUILDHIVE_API_TIMEOUT must be positive")

    # Secure cookies follow the transport unless explicitly overridden
    secure_env = os.getenv("BUILDHIVE_COOKIE_SECURE")
    secure = _str_to_bool(secure_env) if secure_env is not None else parsed.scheme == "https"

    session = SessionConfig(
        storage_file=os.getenv("BUILDHIVE_SESSION_FILE") or None,
        cookie_days=_get_int("BUILDHIVE_SESSION_DAYS", 7),
        secure=secure,
    )

    return Settings(
        api_url=api_url,
        api_timeout=timeout,
        signin_path=os.getenv("BUILDHIVE_SIGNIN_PATH", "/signin"),
        tax_rate=_get_float("BUILDHIVE_TAX_RATE", 0.05),
        default_country=os.getenv("BUILDHIVE_DEFAULT_COUNTRY", "Pakistan"),
        environment=os.getenv("ENVIRONMENT", "production"),
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        session=session,
    )
