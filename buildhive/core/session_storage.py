"""Cookie-style key/value storage for the persisted session.

Entries carry an expiry, a path and a SameSite policy like browser cookies.
When a storage file is configured the entries survive restarts; otherwise
(or after an I/O failure) they live in memory only.
"""
from __future__ import annotations

import json
import os
import time
from dataclasses import asdict, dataclass
from typing import Any

from buildhive.logging_config import logger

DAY_SECONDS = 24 * 60 * 60

AUTH_TOKEN = "auth_token"
USER_ID = "user_id"
USER_ROLE = "user_role"
REFRESH_TOKEN = "refresh_token"
USER_DATA = "user_data"

AUTH_COOKIES = (AUTH_TOKEN, USER_ID, USER_ROLE, REFRESH_TOKEN, USER_DATA)


@dataclass
class CookieEntry:
    value: str
    expires_at: float | None
    path: str = "/"
    secure: bool = False
    same_site: str = "Lax"

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CookieEntry:
        expires_at = data.get("expires_at")
        return cls(
            value=str(data.get("value", "")),
            expires_at=float(expires_at) if expires_at is not None else None,
            path=str(data.get("path", "/")),
            secure=bool(data.get("secure", False)),
            same_site=str(data.get("same_site", "Lax")),
        )


class SessionStorage:
    """Persisted session cookies with expiry and in-memory fallback."""

    def __init__(
        self,
        path: str | None = None,
        *,
        default_days: int = 7,
        secure: bool = False,
        same_site: str = "Lax",
    ):
        self._path = path
        self.default_days = default_days
        self.secure = secure
        self.same_site = same_site
        self._entries: dict[str, CookieEntry] = {}
        if self._path:
            self._entries = self._read_file()

    @property
    def persistent(self) -> bool:
        return self._path is not None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Session storage fallback to memory mode: %s", reason)
        self._path = None

    def _read_file(self) -> dict[str, CookieEntry]:
        if not self._path or not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable session file %s, starting empty: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            return {}
        entries: dict[str, CookieEntry] = {}
        for name, data in raw.items():
            if isinstance(data, dict):
                entries[name] = CookieEntry.from_dict(data)
        return entries

    def _flush(self) -> None:
        if not self._path:
            return
        payload = {name: asdict(entry) for name, entry in self._entries.items()}
        tmp_path = f"{self._path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            self._switch_to_memory_fallback(exc)

    def set(self, name: str, value: str, *, days: int | None = None, path: str = "/") -> None:
        lifetime = self.default_days if days is None else days
        expires_at = time.time() + lifetime * DAY_SECONDS if lifetime else None
        self._entries[name] = CookieEntry(
            value=value,
            expires_at=expires_at,
            path=path,
            secure=self.secure,
            same_site=self.same_site,
        )
        self._flush()

    def get(self, name: str) -> str | None:
        entry = self._entries.get(name)
        if entry is None:
            return None
        if entry.is_expired():
            self.remove(name)
            return None
        return entry.value

    def remove(self, name: str) -> None:
        if self._entries.pop(name, None) is not None:
            self._flush()

    def entry(self, name: str) -> CookieEntry | None:
        return self._entries.get(name)

    # Token-specific helpers

    def get_token(self) -> str | None:
        return self.get(AUTH_TOKEN)

    def get_user_data(self) -> dict[str, Any] | None:
        """Stored identity, or None; an undecodable entry is dropped."""
        raw = self.get(USER_DATA)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.error("Invalid user_data cookie, clearing it")
            self.remove(USER_DATA)
            return None
        if not isinstance(data, dict):
            self.remove(USER_DATA)
            return None
        return data

    def store_auth(
        self,
        *,
        access_token: str,
        refresh_token: str | None,
        user: dict[str, Any],
    ) -> None:
        self.set(AUTH_TOKEN, access_token)
        self.set(USER_ID, str(user.get("id", "")))
        self.set(USER_ROLE, str(user.get("role", "")))
        if refresh_token:
            self.set(REFRESH_TOKEN, refresh_token)
        self.set(USER_DATA, json.dumps(user, ensure_ascii=False))

    def clear_auth(self) -> None:
        changed = False
        for name in AUTH_COOKIES:
            if self._entries.pop(name, None) is not None:
                changed = True
        if changed:
            self._flush()
