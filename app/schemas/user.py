"""User and role schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Capability tier of a user."""

    admin = "admin"
    editor = "editor"
    viewer = "viewer"


# Roles allowed to upload and delete files
EDIT_ROLES = frozenset({Role.admin, Role.editor})


class User(BaseModel):
    """A demo user and its workspace access list."""

    id: str
    username: str
    role: Role
    workspaces: list[str] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    @property
    def can_edit(self) -> bool:
        return self.role in EDIT_ROLES

    def has_workspace(self, workspace_id: str) -> bool:
        return workspace_id in self.workspaces
