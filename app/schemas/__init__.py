"""Pydantic schemas for request/response validation and persisted records."""

from app.schemas.activity import ActivityLogEntry
from app.schemas.auth import LoginRequest, TokenResponse, UserRead
from app.schemas.file import WorkspaceFile
from app.schemas.user import Role, User
from app.schemas.workspace import WorkspaceConfig, WorkspaceCreate, WorkspaceUpdate

__all__ = [
    "ActivityLogEntry",
    "LoginRequest",
    "Role",
    "TokenResponse",
    "User",
    "UserRead",
    "WorkspaceConfig",
    "WorkspaceCreate",
    "WorkspaceFile",
    "WorkspaceUpdate",
]
