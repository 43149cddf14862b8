"""Admin API: user table, activity log, panel stats and role changes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.deps import get_hub, require_admin
from app.schemas.activity import ActivityLogEntry, AdminStats, UserActivityRow
from app.schemas.auth import UserRead
from app.schemas.user import Role, User
from app.services.hub_store import HubStore
from app.services.workspace_registry import WorkspaceValidationError

router = APIRouter()


class RoleChangeRequest(BaseModel):
    role: Role


@router.get("/users")
def list_users(
    search: str = "",
    hub: HubStore = Depends(get_hub),
    _admin: User = Depends(require_admin),
) -> dict:
    """User management rows filtered on username or role."""
    rows: list[UserActivityRow] = hub.activity.user_rows(hub.users.all(), search)
    return {"users": [r.model_dump(mode="json") for r in rows]}


@router.get("/activity")
def list_activity(
    search: str = "",
    hub: HubStore = Depends(get_hub),
    _admin: User = Depends(require_admin),
) -> dict:
    """Activity log filtered on username, action or workspace."""
    entries: list[ActivityLogEntry] = hub.activity.entries(search)
    return {"entries": [e.model_dump(mode="json") for e in entries]}


@router.get("/stats", response_model=AdminStats)
def admin_stats(
    hub: HubStore = Depends(get_hub),
    _admin: User = Depends(require_admin),
) -> AdminStats:
    return hub.activity.stats(hub.users.all())


@router.put("/users/{user_id}/role", response_model=UserRead)
def change_user_role(
    user_id: str,
    body: RoleChangeRequest,
    hub: HubStore = Depends(get_hub),
    _admin: User = Depends(require_admin),
) -> UserRead:
    try:
        user = hub.workspaces.change_role(user_id, body.role)
    except WorkspaceValidationError:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRead.model_validate(user)
