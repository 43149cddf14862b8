"""Key-value persistence adapters.

The hub keeps all of its state as JSON text under string keys. Registries
talk only to :class:`KeyValueStore`, so moving from the SQL table to another
backend is a change at this boundary and nowhere else.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.orm import Session

from app.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String key -> string value store with prefix listing."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the raw value for key, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; a missing key is not an error."""

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """Return all keys starting with prefix, sorted."""

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode the JSON value under key.

        Absent keys return ``default``. Malformed content is logged and also
        treated as ``default`` so a corrupt slot never blocks the UI.
        """
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed JSON under key %s: %s", key, e)
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and throwaway demos."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the ``kv_entries`` table; commits on every write."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, key: str) -> str | None:
        entry = self.db.get(KeyValueEntry, key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        entry = self.db.get(KeyValueEntry, key)
        if entry is None:
            self.db.add(KeyValueEntry(key=key, value=value))
        else:
            entry.value = value
        self.db.commit()

    def delete(self, key: str) -> None:
        entry = self.db.get(KeyValueEntry, key)
        if entry is None:
            return
        self.db.delete(entry)
        self.db.commit()

    def keys(self, prefix: str = "") -> list[str]:
        rows = (
            self.db.query(KeyValueEntry.key)
            .filter(KeyValueEntry.key.startswith(prefix, autoescape=True))
            .order_by(KeyValueEntry.key)
            .all()
        )
        return [row[0] for row in rows]
