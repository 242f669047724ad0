"""Sentry integration for error tracking."""
from __future__ import annotations

import logging
import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)

_initialized = False


def init_sentry(
    dsn: str | None = None,
    environment: str = "production",
    enable_logging: bool = True,
    sample_rate: float = 1.0,
    traces_sample_rate: float = 0.1,
) -> bool:
    """Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN; falls back to the SENTRY_DSN environment variable
        environment: Environment name (production, staging, development)
        enable_logging: Capture ERROR log records as events
        sample_rate: Error sampling rate (1.0 = 100%)
        traces_sample_rate: Performance tracing rate

    Returns:
        True if Sentry was initialized
    """
    global _initialized

    sentry_dsn = dsn or os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    integrations = []
    if enable_logging:
        integrations.append(
            LoggingIntegration(
                level=logging.INFO,  # Breadcrumbs from INFO
                event_level=logging.ERROR,
            )
        )

    try:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,
            integrations=integrations,
            sample_rate=sample_rate,
            traces_sample_rate=traces_sample_rate,
            send_default_pii=False,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False

    _initialized = True
    logger.info(f"Sentry initialized for {environment} environment")
    return True


def is_enabled() -> bool:
    return _initialized


def capture_exception(error: Exception, **extra: Any) -> None:
    """Capture exception and send to Sentry with additional context."""
    if not is_enabled():
        return

    try:
        with sentry_sdk.push_scope() as scope:
            for key, value in extra.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.error(f"Failed to capture exception in Sentry: {e}")


def set_user_context(user_id: str | None, **extra: Any) -> None:
    """Attach (or with ``None`` detach) the signed-in user to Sentry events."""
    if not is_enabled():
        return

    try:
        sentry_sdk.set_user({"id": user_id, **extra} if user_id else None)
    except Exception as e:
        logger.error(f"Failed to set user context in Sentry: {e}")
