"""View controller: which top-level screen a request may show.

States: LoggedOut -> WorkspaceList -> WorkspaceDetail(id), and
WorkspaceList -> AdminPanel for admins. Guards are evaluated against the
live session snapshot on every request, never cached, so a permission change
applies on the next render.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.schemas.user import User
from app.services.workspace_registry import WorkspaceRegistry


class View(str, Enum):
    logged_out = "logged_out"
    workspace_list = "workspace_list"
    workspace_detail = "workspace_detail"
    admin_panel = "admin_panel"


class ViewEvent(str, Enum):
    login_succeeded = "login_succeeded"
    open_workspace = "open_workspace"
    back = "back"
    open_admin_panel = "open_admin_panel"
    logout = "logout"


@dataclass(frozen=True)
class ViewState:
    view: View
    workspace_id: Optional[str] = None

    @property
    def path(self) -> str:
        """URL that renders this state."""
        if self.view == View.logged_out:
            return "/login"
        if self.view == View.workspace_detail:
            return f"/workspaces/{self.workspace_id}"
        if self.view == View.admin_panel:
            return "/admin"
        return "/"


LOGGED_OUT = ViewState(View.logged_out)
WORKSPACE_LIST = ViewState(View.workspace_list)
ADMIN_PANEL = ViewState(View.admin_panel)


def resolve_view(
    user: User | None, requested: ViewState, registry: WorkspaceRegistry
) -> ViewState:
    """Return the state actually shown for a requested state.

    - no user: LoggedOut
    - AdminPanel without the admin role: WorkspaceList
    - WorkspaceDetail for a workspace that is gone or not on the user's
      access list: WorkspaceList
    """
    if user is None:
        return LOGGED_OUT
    if requested.view == View.logged_out:
        return WORKSPACE_LIST
    if requested.view == View.admin_panel and not user.is_admin:
        return WORKSPACE_LIST
    if requested.view == View.workspace_detail:
        workspace_id = requested.workspace_id
        if (
            workspace_id is None
            or not user.has_workspace(workspace_id)
            or registry.get(workspace_id) is None
        ):
            return WORKSPACE_LIST
    return requested


def transition(
    current: ViewState,
    event: ViewEvent,
    user: User | None,
    registry: WorkspaceRegistry,
    workspace_id: str | None = None,
) -> ViewState:
    """Apply a UI event to the current state, then re-check guards."""
    if event == ViewEvent.logout:
        return LOGGED_OUT
    if event == ViewEvent.login_succeeded:
        requested = WORKSPACE_LIST
    elif event == ViewEvent.open_workspace and current.view == View.workspace_list:
        requested = ViewState(View.workspace_detail, workspace_id)
    elif event == ViewEvent.open_admin_panel and current.view == View.workspace_list:
        requested = ADMIN_PANEL
    elif event == ViewEvent.back and current.view in (View.workspace_detail, View.admin_panel):
        requested = WORKSPACE_LIST
    else:
        requested = current
    return resolve_view(user, requested, registry)
