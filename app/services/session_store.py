"""Session store: the authenticated user snapshot per browser session."""

from __future__ import annotations

import logging
import secrets

from pydantic import ValidationError

from app.schemas.user import User
from app.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


def session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


class SessionStore:
    """Open, read, refresh and close persisted sessions."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def open(self, user: User) -> str:
        """Persist a snapshot of user under a fresh session id and return the id."""
        session_id = secrets.token_urlsafe(16)
        self.kv.set(session_key(session_id), user.model_dump_json())
        logger.info("Session opened for %s", user.username)
        return session_id

    def get(self, session_id: str) -> User | None:
        raw = self.kv.get(session_key(session_id))
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring malformed session %s: %s", session_id, e)
            return None

    def close(self, session_id: str) -> None:
        self.kv.delete(session_key(session_id))

    def refresh_user(self, user: User) -> int:
        """Rewrite every open session belonging to user. Returns sessions touched."""
        touched = 0
        for key in self.kv.keys(SESSION_KEY_PREFIX):
            session_id = key[len(SESSION_KEY_PREFIX) :]
            snapshot = self.get(session_id)
            if snapshot is not None and snapshot.id == user.id:
                self.kv.set(key, user.model_dump_json())
                touched += 1
        return touched

    def close_all(self) -> int:
        keys = self.kv.keys(SESSION_KEY_PREFIX)
        for key in keys:
            self.kv.delete(key)
        return len(keys)
