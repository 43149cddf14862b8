"""Workspace registry and access control.

Workspace definitions live under the ``workspaces`` key; who may open a
workspace is recorded on each user's access list. Every mutation keeps three
things in step: the registry entry, the affected users, and any open
sessions of those users, so permission changes show up on the next request
without re-login.
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from app.schemas.user import Role, User
from app.schemas.workspace import (
    COLOR_OPTIONS,
    DEFAULT_COLOR,
    DEFAULT_ICON,
    ICON_OPTIONS,
    WorkspaceConfig,
    WorkspaceCreate,
    WorkspaceUpdate,
)
from app.services.file_registry import FileRegistry
from app.services.kv_store import KeyValueStore
from app.services.session_store import SessionStore
from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)

WORKSPACES_KEY = "workspaces"

_WHITESPACE_RE = re.compile(r"\s+")
_WORKSPACE_ID_RE = re.compile(r"[a-z0-9_-]+")


class WorkspaceValidationError(ValueError):
    """Raised when a required workspace field is missing or a reference is unknown."""


class WorkspaceConflictError(ValueError):
    """Raised when adding a workspace whose id is already defined."""


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace id is not in the registry."""


def normalize_workspace_id(raw: str) -> str:
    """Lowercase and replace whitespace runs with ``-`` ("Frontend Dev" -> "frontend-dev")."""
    return _WHITESPACE_RE.sub("-", raw.strip().lower())


def matches_search(workspace: WorkspaceConfig, term: str) -> bool:
    """Case-insensitive substring match on id, title or description."""
    needle = (term or "").lower()
    return (
        needle in workspace.id.lower()
        or needle in workspace.title.lower()
        or needle in workspace.description.lower()
    )


def build_workspace_config(
    workspace_id: str,
    title: str,
    description: str,
    icon: str = DEFAULT_ICON,
    color: str = DEFAULT_COLOR,
) -> WorkspaceConfig:
    """Build a config, falling back to defaults for unknown icon or colour."""
    if icon not in ICON_OPTIONS:
        icon = DEFAULT_ICON
    if color not in COLOR_OPTIONS:
        color = DEFAULT_COLOR
    return WorkspaceConfig(
        id=workspace_id,
        title=title,
        description=description,
        icon=icon,
        color=color,
        light_color=COLOR_OPTIONS[color][1],
    )


class WorkspaceRegistry:
    """Add, edit, delete and list workspaces; maintain user access lists."""

    def __init__(
        self,
        kv: KeyValueStore,
        users: UserDirectory,
        sessions: SessionStore,
        files: FileRegistry,
    ) -> None:
        self.kv = kv
        self.users = users
        self.sessions = sessions
        self.files = files

    # ── Read path ────────────────────────────────────────────────────

    def is_seeded(self) -> bool:
        return self.kv.get(WORKSPACES_KEY) is not None

    def all(self) -> list[WorkspaceConfig]:
        raw = self.kv.get_json(WORKSPACES_KEY, [])
        try:
            return [WorkspaceConfig.model_validate(item) for item in raw]
        except (ValidationError, TypeError) as e:
            logger.warning("Ignoring malformed workspace registry: %s", e)
            return []

    def get(self, workspace_id: str) -> WorkspaceConfig | None:
        return next((ws for ws in self.all() if ws.id == workspace_id), None)

    def require(self, workspace_id: str) -> WorkspaceConfig:
        workspace = self.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(f"Workspace '{workspace_id}' not found")
        return workspace

    def visible_for(self, user: User, search: str = "") -> list[WorkspaceConfig]:
        """Workspaces the registry defines and the user may open, filtered by search."""
        return [
            ws
            for ws in self.all()
            if user.has_workspace(ws.id) and matches_search(ws, search)
        ]

    def user_ids_with_access(self, workspace_id: str) -> list[str]:
        return [u.id for u in self.users.all() if u.has_workspace(workspace_id)]

    # ── Persistence helpers ──────────────────────────────────────────

    def _save(self, workspaces: list[WorkspaceConfig]) -> None:
        self.kv.set_json(WORKSPACES_KEY, [ws.model_dump(mode="json") for ws in workspaces])

    def _save_users(self, users: list[User], changed: list[User]) -> None:
        self.users.save_all(users)
        for user in changed:
            self.sessions.refresh_user(user)

    def _check_user_ids(self, users: list[User], user_ids: list[str]) -> None:
        known = {u.id for u in users}
        unknown = [uid for uid in user_ids if uid not in known]
        if unknown:
            raise WorkspaceValidationError(f"Unknown user id(s): {', '.join(unknown)}")

    def seed(self, definitions: list[dict]) -> None:
        workspaces = [
            build_workspace_config(
                d["id"], d["title"], d["description"], d.get("icon", DEFAULT_ICON),
                d.get("color", DEFAULT_COLOR),
            )
            for d in definitions
        ]
        self._save(workspaces)
        logger.info("Seeded %d workspaces", len(workspaces))

    # ── Mutations ────────────────────────────────────────────────────

    def add(self, data: WorkspaceCreate) -> WorkspaceConfig:
        """Create a workspace and grant it to ``data.user_ids``.

        Raises:
            WorkspaceValidationError: id, title or description missing, id has characters
                outside letters, digits, ``-`` and ``_``, or unknown user ids.
            WorkspaceConflictError: the normalized id is already defined.
        """
        if not data.id.strip() or not data.title.strip() or not data.description.strip():
            raise WorkspaceValidationError("Please fill in all required fields")

        workspace_id = normalize_workspace_id(data.id)
        if not _WORKSPACE_ID_RE.fullmatch(workspace_id):
            raise WorkspaceValidationError(
                "Workspace ID may only contain letters, digits, hyphens and underscores"
            )
        workspaces = self.all()
        if any(ws.id == workspace_id for ws in workspaces):
            raise WorkspaceConflictError(f"Workspace '{workspace_id}' already exists")

        users = self.users.all()
        self._check_user_ids(users, data.user_ids)

        workspace = build_workspace_config(
            workspace_id, data.title.strip(), data.description.strip(), data.icon, data.color
        )
        self._save(workspaces + [workspace])

        changed: list[User] = []
        for user in users:
            if user.id in data.user_ids and not user.has_workspace(workspace_id):
                user.workspaces.append(workspace_id)
                changed.append(user)
        if changed:
            self._save_users(users, changed)

        logger.info("Workspace %s created, granted to %d user(s)", workspace_id, len(changed))
        return workspace

    def update(self, workspace_id: str, data: WorkspaceUpdate) -> WorkspaceConfig:
        """Apply a partial edit: title, description, exact access set, role changes.

        Raises:
            WorkspaceNotFoundError: workspace_id is not defined.
            WorkspaceValidationError: a provided title/description is blank, or unknown user ids.
        """
        workspaces = self.all()
        index = next((i for i, ws in enumerate(workspaces) if ws.id == workspace_id), None)
        if index is None:
            raise WorkspaceNotFoundError(f"Workspace '{workspace_id}' not found")

        if data.title is not None and not data.title.strip():
            raise WorkspaceValidationError("Title is required")
        if data.description is not None and not data.description.strip():
            raise WorkspaceValidationError("Description is required")

        users = self.users.all()
        if data.user_ids is not None:
            self._check_user_ids(users, data.user_ids)
        self._check_user_ids(users, list(data.role_changes))

        workspace = workspaces[index]
        updates: dict = {}
        if data.title is not None:
            updates["title"] = data.title.strip()
        if data.description is not None:
            updates["description"] = data.description.strip()
        if updates:
            workspace = workspace.model_copy(update=updates)
            workspaces[index] = workspace
            self._save(workspaces)

        changed: dict[str, User] = {}
        if data.user_ids is not None:
            granted = set(data.user_ids)
            for user in users:
                has = user.has_workspace(workspace_id)
                if user.id in granted and not has:
                    user.workspaces.append(workspace_id)
                    changed[user.id] = user
                elif user.id not in granted and has:
                    user.workspaces.remove(workspace_id)
                    changed[user.id] = user
        for user in users:
            new_role = data.role_changes.get(user.id)
            if new_role is not None and user.role != new_role:
                user.role = Role(new_role)
                changed[user.id] = user
        if changed:
            self._save_users(users, list(changed.values()))

        logger.info("Workspace %s updated (%d user(s) changed)", workspace_id, len(changed))
        return workspace

    def delete(self, workspace_id: str) -> None:
        """Remove a workspace, revoke it from every user and drop its files.

        Raises:
            WorkspaceNotFoundError: workspace_id is not defined.
        """
        workspaces = self.all()
        remaining = [ws for ws in workspaces if ws.id != workspace_id]
        if len(remaining) == len(workspaces):
            raise WorkspaceNotFoundError(f"Workspace '{workspace_id}' not found")
        self._save(remaining)

        users = self.users.all()
        changed: list[User] = []
        for user in users:
            if user.has_workspace(workspace_id):
                user.workspaces = [w for w in user.workspaces if w != workspace_id]
                changed.append(user)
        if changed:
            self._save_users(users, changed)

        self.files.drop_workspace(workspace_id)
        logger.info("Workspace %s deleted, revoked from %d user(s)", workspace_id, len(changed))

    def change_role(self, user_id: str, role: Role) -> User:
        """Change one user's role. Raises WorkspaceValidationError for unknown ids."""
        users = self.users.all()
        user = next((u for u in users if u.id == user_id), None)
        if user is None:
            raise WorkspaceValidationError(f"Unknown user id(s): {user_id}")
        if user.role != role:
            user.role = Role(role)
            self._save_users(users, [user])
            logger.info("User %s role changed to %s", user.username, user.role.value)
        return user
