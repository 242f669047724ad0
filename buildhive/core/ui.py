"""Ports the presentation layer plugs into.

Services never talk to a UI directly: they report notices, request
navigation, ask yes/no questions and hand card confirmation to the card
processing library through these interfaces.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from buildhive.logging_config import logger


class NoticeLevel:
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notice:
    level: str
    text: str


class Notifier(Protocol):
    def info(self, text: str) -> None: ...

    def success(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...


class Navigator(Protocol):
    def go(self, path: str) -> None: ...


class Confirmer(Protocol):
    def ask(self, message: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class CardConfirmation:
    """Outcome of client-side card confirmation."""

    succeeded: bool
    payment_intent_id: str | None = None
    error_message: str | None = None


class CardConfirmer(Protocol):
    async def confirm_card_payment(
        self,
        client_secret: str,
        *,
        publishable_key: str,
        card: Any,
    ) -> CardConfirmation: ...


@dataclass
class NoticeBoard:
    """Notifier that keeps every notice and mirrors it to the log."""

    notices: list[Notice] = field(default_factory=list)

    def _push(self, level: str, text: str) -> None:
        self.notices.append(Notice(level, text))
        if level == NoticeLevel.ERROR:
            logger.warning("Notice [%s]: %s", level, text)
        else:
            logger.info("Notice [%s]: %s", level, text)

    def info(self, text: str) -> None:
        self._push(NoticeLevel.INFO, text)

    def success(self, text: str) -> None:
        self._push(NoticeLevel.SUCCESS, text)

    def error(self, text: str) -> None:
        self._push(NoticeLevel.ERROR, text)

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def texts(self, level: str | None = None) -> list[str]:
        return [n.text for n in self.notices if level is None or n.level == level]


@dataclass
class RecordingNavigator:
    history: list[str] = field(default_factory=list)

    def go(self, path: str) -> None:
        logger.debug("Navigate to %s", path)
        self.history.append(path)

    @property
    def location(self) -> str | None:
        return self.history[-1] if self.history else None


@dataclass
class StaticConfirmer:
    """Answers every prompt the same way and remembers what was asked."""

    answer: bool = True
    asked: list[str] = field(default_factory=list)

    def ask(self, message: str) -> bool:
        self.asked.append(message)
        return self.answer
