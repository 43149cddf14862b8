"""User directory: the demo roster persisted under one key."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from app.schemas.user import Role, User
from app.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

USERS_KEY = "users"


class UserDirectory:
    """Load and save the full user list ("save the whole collection")."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def is_seeded(self) -> bool:
        return self.kv.get(USERS_KEY) is not None

    def all(self) -> list[User]:
        raw = self.kv.get_json(USERS_KEY, [])
        try:
            return [User.model_validate(item) for item in raw]
        except (ValidationError, TypeError) as e:
            logger.warning("Ignoring malformed user roster: %s", e)
            return []

    def save_all(self, users: list[User]) -> None:
        self.kv.set_json(USERS_KEY, [u.model_dump(mode="json") for u in users])

    def get(self, user_id: str) -> User | None:
        return next((u for u in self.all() if u.id == user_id), None)

    def get_by_username(self, username: str) -> User | None:
        return next((u for u in self.all() if u.username == username), None)

    def seed(self, roster: list[dict]) -> None:
        """Write the roster (password fields are dropped)."""
        users = [
            User(
                id=entry["id"],
                username=entry["username"],
                role=Role(entry["role"]),
                workspaces=list(entry.get("workspaces") or []),
            )
            for entry in roster
        ]
        self.save_all(users)
        logger.info("Seeded %d users", len(users))
