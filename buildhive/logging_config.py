"""Package-wide logger."""
from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("buildhive")


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a single stream handler to the ``buildhive`` logger.

    Safe to call more than once: an existing handler is reused and only the
    level is updated.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not any(getattr(h, "_buildhive", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._buildhive = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def mask_token(token: str | None) -> str:
    """Short, log-safe prefix of a bearer token."""
    if not token:
        return "null"
    return f"{token[:12]}..."
