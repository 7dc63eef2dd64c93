"""Persisted login session.

The bearer token and the signed-in user live in a small JSON key/value
file under fixed key names.  ``Session`` is the context object handed to
the API client and the auth manager; it reads the store on every access
so a token written by ``login`` is picked up by the very next request.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cmsdesk.models import User

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
USER_KEY = "user"


class SessionStore:
    """JSON-backed key/value storage.

    Loads the file on init and writes after every mutation.  Without a
    path the store lives in memory only.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._data: dict[str, str] = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("Corrupt session file at %s, starting fresh", self._path)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Corrupt session file at %s, starting fresh", self._path)
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    # ── Public API ───────────────────────────────────────────────

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()


class Session:
    """Explicit session context over a ``SessionStore``."""

    def __init__(self, store: SessionStore | None = None) -> None:
        self.store = store if store is not None else SessionStore()

    @classmethod
    def from_path(cls, path: Path) -> Session:
        return cls(SessionStore(path))

    @property
    def token(self) -> str | None:
        return self.store.get(TOKEN_KEY)

    @property
    def user(self) -> User | None:
        """The stored user, or None if absent or unreadable."""
        raw = self.store.get(USER_KEY)
        if not raw:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("Stored user object is unreadable, ignoring it")
            return None

    @property
    def is_authenticated(self) -> bool:
        """True only when both a token and a readable user are stored."""
        return bool(self.token) and self.user is not None

    def save(self, token: str, user: User | dict[str, Any]) -> None:
        """Persist the token and the user object from a login response."""
        if isinstance(user, User):
            user_json = user.model_dump_json(by_alias=True, exclude_none=True)
        else:
            user_json = json.dumps(user)
        self.store.set(TOKEN_KEY, token)
        self.store.set(USER_KEY, user_json)

    def clear_token(self) -> None:
        self.store.remove(TOKEN_KEY)

    def clear(self) -> None:
        self.store.remove(TOKEN_KEY)
        self.store.remove(USER_KEY)
