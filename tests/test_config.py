from __future__ import annotations

import pytest

from buildhive.core.config import load_settings
from buildhive.core.exceptions import ConfigurationException

ENV_VARS = (
    "BUILDHIVE_API_URL",
    "BUILDHIVE_API_TIMEOUT",
    "BUILDHIVE_SESSION_FILE",
    "BUILDHIVE_SESSION_DAYS",
    "BUILDHIVE_COOKIE_SECURE",
    "BUILDHIVE_SIGNIN_PATH",
    "BUILDHIVE_TAX_RATE",
    "BUILDHIVE_DEFAULT_COUNTRY",
    "ENVIRONMENT",
    "SENTRY_DSN",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("buildhive.core.config.load_dotenv", lambda *args, **kwargs: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.api_url == "http://localhost:3000"
    assert settings.api_timeout == 30.0
    assert settings.signin_path == "/signin"
    assert settings.tax_rate == 0.05
    assert settings.default_country == "Pakistan"
    assert settings.session.storage_file is None
    assert settings.session.cookie_days == 7
    assert settings.session.secure is False
    assert settings.sentry_dsn is None


def test_https_enables_secure_cookies(monkeypatch) -> None:
    monkeypatch.setenv("BUILDHIVE_API_URL", "https://api.buildhive.pk/")

    settings = load_settings()

    assert settings.api_url == "https://api.buildhive.pk"
    assert settings.session.secure is True


def test_explicit_cookie_flag_wins(monkeypatch) -> None:
    monkeypatch.setenv("BUILDHIVE_API_URL", "https://api.buildhive.pk")
    monkeypatch.setenv("BUILDHIVE_COOKIE_SECURE", "false")

    assert load_settings().session.secure is False


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("BUILDHIVE_API_TIMEOUT", "12.5")
    monkeypatch.setenv("BUILDHIVE_SESSION_DAYS", "30")
    monkeypatch.setenv("BUILDHIVE_TAX_RATE", "0.17")
    monkeypatch.setenv("ENVIRONMENT", "development")

    settings = load_settings()

    assert settings.api_timeout == 12.5
    assert settings.session.cookie_days == 30
    assert settings.tax_rate == 0.17
    assert settings.is_development


@pytest.mark.parametrize(
    "name, value",
    [
        ("BUILDHIVE_API_TIMEOUT", "soon"),
        ("BUILDHIVE_API_TIMEOUT", "0"),
        ("BUILDHIVE_SESSION_DAYS", "week"),
        ("BUILDHIVE_API_URL", "localhost"),
    ],
)
def test_invalid_values_raise(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationException):
        load_settings()
