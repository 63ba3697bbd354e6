"""Local persistence for chat history.

A tiny key/value store (the terminal counterpart of browser local storage)
plus a ChatHistory helper that keeps the whole message log as one JSON blob
under a fixed key. The blob is overwritten wholesale on every change.

Uses SQLite for persistence across app restarts.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .config import default_storage_path

# JSON type for persisted records
JSON = Union[dict[str, "JSON"], list["JSON"], str, int, float, bool, None]

HISTORY_KEY = "geminiChatHistory"

log = logging.getLogger(__name__)


@dataclass
class ChatMessage:
    """A single entry in the chat log."""

    text: str
    from_user: bool

    def to_dict(self) -> dict[str, JSON]:
        return {"text": self.text, "fromUser": self.from_user}

    @classmethod
    def from_dict(cls, data: dict[str, JSON]) -> ChatMessage:
        """Build a message from its stored form.

        Raises:
            ValueError: If the record is not a {"text": str, "fromUser": bool} object
        """
        if not isinstance(data, dict):
            raise ValueError(f"Message record must be an object, got {type(data).__name__}")
        text = data.get("text")
        from_user = data.get("fromUser")
        if not isinstance(text, str) or not isinstance(from_user, bool):
            raise ValueError(f"Malformed message record: {data!r}")
        return cls(text=text, from_user=from_user)


class LocalStorage:
    """String key/value store backed by a SQLite file."""

    def __init__(self, db_path: Path | None = None) -> None:
        if db_path is None:
            db_path = default_storage_path()
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS local_storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """
            )
            conn.commit()
        log.info(f"Local storage initialized at: {self.db_path}")

    def get_item(self, key: str) -> str | None:
        """Return the value stored under key, or None."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM local_storage WHERE key = ?",
                (key,),
            ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO local_storage (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            conn.commit()

    def remove_item(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            conn.commit()


class ChatHistory:
    """The ordered message log persisted as one JSON array."""

    def __init__(self, storage: LocalStorage, key: str = HISTORY_KEY) -> None:
        self.storage = storage
        self.key = key

    def load(self) -> list[ChatMessage]:
        """Load the stored log.

        A missing key yields an empty list. A corrupt value is logged,
        removed from storage, and also yields an empty list.
        """
        try:
            raw = self.storage.get_item(self.key)
            if raw is None:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"Expected a list of messages, got {type(data).__name__}")
            return [ChatMessage.from_dict(item) for item in data]
        except (ValueError, sqlite3.Error) as e:
            log.error(f"Failed to load chat history from local storage: {e}")
            try:
                self.storage.remove_item(self.key)
            except sqlite3.Error as remove_error:
                log.error(f"Failed to remove corrupt chat history: {remove_error}")
            return []

    def save(self, messages: list[ChatMessage]) -> None:
        """Overwrite the stored log with messages. Failures are logged."""
        try:
            self.storage.set_item(self.key, json.dumps([m.to_dict() for m in messages]))
        except sqlite3.Error as e:
            log.error(f"Failed to save chat history to local storage: {e}")

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except sqlite3.Error as e:
            log.error(f"Failed to clear chat history: {e}")


# One shared store per database file
_storages: dict[Path, LocalStorage] = {}


def get_local_storage(db_path: Path | None = None) -> LocalStorage:
    """Get the shared LocalStorage for db_path (default location if None).

    Calls with the same path return the same instance; different paths get
    separate stores.
    """
    path = (db_path or default_storage_path()).expanduser().resolve()
    if path not in _storages:
        _storages[path] = LocalStorage(path)
    return _storages[path]
