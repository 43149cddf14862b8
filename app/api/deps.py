"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db  # re-export
from app.schemas.user import User
from app.schemas.workspace import WorkspaceConfig
from app.services.auth import decode_access_token
from app.services.hub_store import HubStore
from app.services.kv_store import KeyValueStore, SqlKeyValueStore

__all__ = [
    "AUTH_COOKIE",
    "get_db",
    "get_kv_store",
    "get_hub",
    "get_session_id",
    "get_current_user",
    "require_auth",
    "require_admin",
    "require_ui_auth",
    "require_workspace_access",
]

# Cookie name for browser sessions
AUTH_COOKIE = "access_token"


def get_kv_store(db: Session = Depends(get_db)) -> KeyValueStore:
    """Persistence adapter for this request (SQL table by default)."""
    return SqlKeyValueStore(db)


def get_hub(kv: KeyValueStore = Depends(get_kv_store)) -> HubStore:
    """Hub store over the request's adapter; seeds empty keys on first use."""
    hub = HubStore(kv)
    hub.ensure_seeded()
    return hub


def get_session_id(
    authorization: str | None = Header(None),
    access_token: str | None = Cookie(None),
) -> str | None:
    """Return the session id carried by the request's token, or None.

    Checks (in order):
    1. Authorization: Bearer <token> header
    2. access_token cookie
    """
    token: str | None = None

    # Check Authorization header
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer ") :]

    # Fall back to cookie
    if token is None and access_token:
        token = access_token

    if token is None:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None
    return payload.get("sid")


def get_current_user(
    hub: HubStore = Depends(get_hub),
    session_id: str | None = Depends(get_session_id),
) -> User | None:
    """Return the session's user snapshot or None."""
    return hub.current_user(session_id)


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """Dependency that requires authentication (401 for API clients)."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """Dependency that requires the admin role."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return user


def require_ui_auth(user: User | None = Depends(get_current_user)) -> User:
    """Dependency that requires authentication for browser/UI routes.

    Redirects to /login instead of returning a 401 JSON response.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Not authenticated",
            headers={"Location": "/login"},
        )
    return user


def require_workspace_access(hub: HubStore, user: User, workspace_id: str) -> WorkspaceConfig:
    """Return the workspace or raise 404 (undefined) / 403 (not on access list)."""
    workspace = hub.workspaces.get(workspace_id)
    if workspace is None:
        raise HTTPException(status_code=404, detail="Workspace not found")
    if not user.has_workspace(workspace_id):
        raise HTTPException(
            status_code=403,
            detail="You do not have access to this workspace",
        )
    return workspace
