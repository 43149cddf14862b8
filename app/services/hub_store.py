"""Hub store: the single state object behind every route.

Composes the user directory, session store, workspace registry, file
registry and activity log over one :class:`KeyValueStore`.
"""

from __future__ import annotations

import logging

from app.config import get_settings
from app.schemas.user import User
from app.services.activity_log import ActivityLog, get_activity_log
from app.services.auth import CredentialDirectory, authenticate_user, get_credential_directory
from app.services.file_registry import (
    FILES_KEY_PREFIX,
    FileRegistry,
    TransientContentStore,
    get_content_store,
)
from app.services.kv_store import KeyValueStore
from app.services.session_store import SessionStore
from app.services.user_directory import UserDirectory
from app.services.workspace_registry import WorkspaceRegistry

logger = logging.getLogger(__name__)


class HubStore:
    """Explicit store with defined mutation operations over a persistence adapter."""

    def __init__(
        self,
        kv: KeyValueStore,
        content: TransientContentStore | None = None,
        credentials: CredentialDirectory | None = None,
        activity: ActivityLog | None = None,
        max_upload_bytes: int | None = None,
    ) -> None:
        if max_upload_bytes is None:
            max_upload_bytes = get_settings().max_upload_bytes
        self.kv = kv
        self.credentials = credentials if credentials is not None else get_credential_directory()
        self.activity = activity if activity is not None else get_activity_log()
        self.users = UserDirectory(kv)
        self.sessions = SessionStore(kv)
        self.files = FileRegistry(
            kv,
            content if content is not None else get_content_store(),
            max_upload_bytes=max_upload_bytes,
        )
        self.workspaces = WorkspaceRegistry(kv, self.users, self.sessions, self.files)

    # ── Seeding ──────────────────────────────────────────────────────

    def ensure_seeded(self) -> bool:
        """Write the demo seed into empty keys. Returns True if anything was written."""
        from app.seed.loader import load_seed

        wrote = False
        if not self.workspaces.is_seeded():
            self.workspaces.seed(load_seed()["workspaces"])
            wrote = True
        if not self.users.is_seeded():
            self.users.seed(load_seed()["users"])
            wrote = True
        return wrote

    def reset(self) -> None:
        """Restore the demo seed and clear every session and file list."""
        from app.seed.loader import load_seed

        closed = self.sessions.close_all()
        for key in self.kv.keys(FILES_KEY_PREFIX):
            self.kv.delete(key)
        seed = load_seed()
        self.workspaces.seed(seed["workspaces"])
        self.users.seed(seed["users"])
        logger.info("Demo data reset (%d session(s) closed)", closed)

    # ── Session ──────────────────────────────────────────────────────

    def login(self, username: str, password: str) -> tuple[User, str] | None:
        """Authenticate and open a session. Returns (user, session_id) or None."""
        user = authenticate_user(self.users, self.credentials, username, password)
        if user is None:
            logger.info("Login failed for %r", username)
            return None
        return user, self.sessions.open(user)

    def logout(self, session_id: str | None) -> None:
        if session_id:
            self.sessions.close(session_id)

    def current_user(self, session_id: str | None) -> User | None:
        if not session_id:
            return None
        return self.sessions.get(session_id)
