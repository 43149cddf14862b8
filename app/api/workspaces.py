"""Workspace API routes: list/search for users, CRUD for admins."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_hub, require_admin, require_auth, require_workspace_access
from app.schemas.user import User
from app.schemas.workspace import (
    WorkspaceConfig,
    WorkspaceCreate,
    WorkspaceListResponse,
    WorkspaceRead,
    WorkspaceUpdate,
)
from app.services.hub_store import HubStore
from app.services.workspace_registry import (
    WorkspaceConflictError,
    WorkspaceNotFoundError,
    WorkspaceValidationError,
)

router = APIRouter()


def _access_label(user: User) -> str:
    return "Full Access" if user.can_edit else "View Only"


@router.get("", response_model=WorkspaceListResponse)
def api_list_workspaces(
    search: str = "",
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_auth),
) -> WorkspaceListResponse:
    """List workspaces the caller may open, filtered by title/description search."""
    label = _access_label(user)
    items = [
        WorkspaceRead(**ws.model_dump(), access=label)
        for ws in hub.workspaces.visible_for(user, search)
    ]
    return WorkspaceListResponse(items=items)


@router.get("/{workspace_id}", response_model=WorkspaceRead)
def api_get_workspace(
    workspace_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_auth),
) -> WorkspaceRead:
    workspace = require_workspace_access(hub, user, workspace_id)
    return WorkspaceRead(**workspace.model_dump(), access=_access_label(user))


@router.post("", status_code=201, response_model=WorkspaceConfig)
def api_add_workspace(
    data: WorkspaceCreate,
    hub: HubStore = Depends(get_hub),
    _admin: User = Depends(require_admin),
) -> WorkspaceConfig:
    """Create a workspace and grant it to the selected users."""
    try:
        return hub.workspaces.add(data)
    except WorkspaceValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except WorkspaceConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.patch("/{workspace_id}", response_model=WorkspaceConfig)
def api_update_workspace(
    workspace_id: str,
    data: WorkspaceUpdate,
    hub: HubStore = Depends(get_hub),
    _admin: User = Depends(require_admin),
) -> WorkspaceConfig:
    """Edit title/description, replace the access set, change roles."""
    try:
        return hub.workspaces.update(workspace_id, data)
    except WorkspaceNotFoundError:
        raise HTTPException(status_code=404, detail="Workspace not found")
    except WorkspaceValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{workspace_id}", status_code=204)
def api_delete_workspace(
    workspace_id: str,
    hub: HubStore = Depends(get_hub),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a workspace; revokes it from every user and drops its files."""
    try:
        hub.workspaces.delete(workspace_id)
    except WorkspaceNotFoundError:
        raise HTTPException(status_code=404, detail="Workspace not found")
