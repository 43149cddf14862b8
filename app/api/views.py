"""HTML-serving view routes for the WorkSpace Hub UI."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
)
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.api.auth import issue_token, set_auth_cookie
from app.api.deps import (
    AUTH_COOKIE,
    get_current_user,
    get_hub,
    get_session_id,
    require_ui_auth,
)
from app.api.files import download_response, read_uploads
from app.schemas.user import Role, User
from app.schemas.workspace import COLOR_OPTIONS, ICON_OPTIONS, WorkspaceCreate, WorkspaceUpdate
from app.services.activity_log import format_relative_time
from app.services.auth import INVALID_CREDENTIALS_MESSAGE
from app.services.file_registry import (
    FileContentGoneError,
    FilePermissionError,
    UploadTooLargeError,
    WorkspaceFileNotFoundError,
    file_kind,
    format_file_size,
    search_files,
)
from app.services.hub_store import HubStore
from app.services.view_controller import (
    ADMIN_PANEL,
    LOGGED_OUT,
    View,
    ViewState,
    resolve_view,
)
from app.services.workspace_registry import (
    WorkspaceConflictError,
    WorkspaceNotFoundError,
    WorkspaceValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))
templates.env.filters["filesize"] = format_file_size
templates.env.filters["filekind"] = file_kind
templates.env.filters["reltime"] = format_relative_time

_ADMIN_TABS = frozenset({"users", "activity"})


# ── Helpers ──────────────────────────────────────────────────────────


def _redirect(path: str, success: str | None = None, error: str | None = None):
    """303 redirect carrying a one-time flash message in the query string."""
    if success:
        path = f"{path}?success={quote(success)}"
    elif error:
        path = f"{path}?error={quote(error)}"
    return RedirectResponse(url=path, status_code=303)


def _flash(request: Request) -> dict:
    success = request.query_params.get("success")
    error = request.query_params.get("error")
    if success:
        return {"flash_message": success, "flash_type": "success"}
    if error:
        return {"flash_message": error, "flash_type": "error"}
    return {"flash_message": None, "flash_type": None}


def _guard(hub: HubStore, user: User | None, requested: ViewState):
    """Return a redirect when the role guards refuse the requested view."""
    shown = resolve_view(user, requested, hub.workspaces)
    if shown == requested:
        return None
    if requested.view == View.workspace_detail and shown != LOGGED_OUT:
        return _redirect(shown.path, error="That workspace is not available")
    return _redirect(shown.path)


# ── Public routes ────────────────────────────────────────────────────


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    hub: HubStore = Depends(get_hub),
    user: User | None = Depends(get_current_user),
):
    """Render login form (signed-in users go straight to their workspaces)."""
    redirect = _guard(hub, user, LOGGED_OUT)
    if redirect is not None:
        return redirect
    return templates.TemplateResponse(request, "login.html", {"request": request, **_flash(request)})


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    hub: HubStore = Depends(get_hub),
    username: str = Form(""),
    password: str = Form(""),
):
    """Handle login form submission."""
    result = hub.login(username, password) if username and password else None
    if result is None:
        return templates.TemplateResponse(
            request,
            "login.html",
            {
                "request": request,
                "error": INVALID_CREDENTIALS_MESSAGE,
                "username": username,
            },
            status_code=401,
        )
    user, session_id = result
    resp = _redirect("/", success=f"Welcome back, {user.username}!")
    set_auth_cookie(resp, issue_token(user, session_id))
    return resp


@router.get("/logout")
def logout(
    hub: HubStore = Depends(get_hub),
    session_id: str | None = Depends(get_session_id),
):
    """Close the session, clear the auth cookie and return to login."""
    hub.logout(session_id)
    resp = _redirect("/login", success="You have been successfully logged out")
    resp.delete_cookie(key=AUTH_COOKIE, path="/")
    return resp


# ── Workspace list ───────────────────────────────────────────────────


@router.get("/", response_class=HTMLResponse)
def workspace_list(
    request: Request,
    search: str = "",
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
):
    """Grid of workspaces the user may open."""
    return templates.TemplateResponse(
        request,
        "workspaces.html",
        {
            "request": request,
            "user": user,
            "workspaces": hub.workspaces.visible_for(user, search),
            "search": search,
            **_flash(request),
        },
    )


# ── Workspace detail (file manager) ──────────────────────────────────


@router.get("/workspaces/{workspace_id}", response_class=HTMLResponse)
def workspace_detail(
    request: Request,
    workspace_id: str,
    search: str = "",
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
):
    """File manager for one workspace."""
    redirect = _guard(hub, user, ViewState(View.workspace_detail, workspace_id))
    if redirect is not None:
        return redirect
    files = hub.files.list(workspace_id)
    return templates.TemplateResponse(
        request,
        "workspace.html",
        {
            "request": request,
            "user": user,
            "workspace": hub.workspaces.get(workspace_id),
            "files": search_files(files, search),
            "search": search,
            "can_edit": user.can_edit,
            "stats": hub.files.stats(files, user),
            **_flash(request),
        },
    )


@router.post("/workspaces/{workspace_id}/files")
def workspace_upload(
    workspace_id: str,
    files: list[UploadFile] = File(...),
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
):
    """Handle upload form submission."""
    redirect = _guard(hub, user, ViewState(View.workspace_detail, workspace_id))
    if redirect is not None:
        return redirect
    path = f"/workspaces/{workspace_id}"
    uploads = read_uploads(files)
    if not uploads:
        return _redirect(path, error="No files selected")
    try:
        created = hub.files.upload(workspace_id, user, uploads)
    except FilePermissionError:
        raise HTTPException(status_code=403, detail="You cannot upload files in this workspace")
    except UploadTooLargeError as e:
        return _redirect(path, error=str(e))
    return _redirect(path, success=f"{len(created)} file(s) uploaded successfully")


@router.post("/workspaces/{workspace_id}/files/{file_id}/delete")
def workspace_delete_file(
    workspace_id: str,
    file_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
):
    """Handle per-file delete button."""
    redirect = _guard(hub, user, ViewState(View.workspace_detail, workspace_id))
    if redirect is not None:
        return redirect
    path = f"/workspaces/{workspace_id}"
    try:
        hub.files.delete(workspace_id, user, file_id)
    except FilePermissionError:
        raise HTTPException(status_code=403, detail="You cannot delete files in this workspace")
    except WorkspaceFileNotFoundError:
        return _redirect(path, error="File not found")
    return _redirect(path, success="File has been removed from the workspace")


@router.get("/workspaces/{workspace_id}/files/{file_id}/download")
def workspace_download_file(
    workspace_id: str,
    file_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
):
    """Stream a file while its content handle is live."""
    redirect = _guard(hub, user, ViewState(View.workspace_detail, workspace_id))
    if redirect is not None:
        return redirect
    path = f"/workspaces/{workspace_id}"
    try:
        record, data = hub.files.read_content(workspace_id, file_id)
    except WorkspaceFileNotFoundError:
        return _redirect(path, error="File not found")
    except FileContentGoneError:
        return _redirect(path, error="File content is no longer available; upload it again")
    return download_response(record, data)


# ── Admin panel ──────────────────────────────────────────────────────


@router.get("/admin", response_class=HTMLResponse)
def admin_panel(
    request: Request,
    tab: str = "users",
    search: str = "",
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
):
    """User management, activity log and workspace administration."""
    redirect = _guard(hub, user, ADMIN_PANEL)
    if redirect is not None:
        return redirect
    if tab not in _ADMIN_TABS:
        tab = "users"
    users = hub.users.all()
    workspaces = hub.workspaces.all()
    access = {ws.id: hub.workspaces.user_ids_with_access(ws.id) for ws in workspaces}
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "request": request,
            "user": user,
            "tab": tab,
            "search": search,
            "user_rows": hub.activity.user_rows(users, search),
            "activity": hub.activity.entries(search),
            "stats": hub.activity.stats(users),
            "all_users": users,
            "workspaces": workspaces,
            "access": access,
            "roles": [r.value for r in Role],
            "icon_options": ICON_OPTIONS,
            "color_options": COLOR_OPTIONS,
            **_flash(request),
        },
    )


@router.post("/admin/workspaces")
def admin_add_workspace(
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
    workspace_id: str = Form(""),
    title: str = Form(""),
    description: str = Form(""),
    icon: str = Form("FileText"),
    color: str = Form("bg-blue-500"),
    user_ids: list[str] = Form([]),
):
    """Handle "Create Workspace" form."""
    redirect = _guard(hub, user, ADMIN_PANEL)
    if redirect is not None:
        return redirect
    data = WorkspaceCreate(
        id=workspace_id,
        title=title,
        description=description,
        icon=icon,
        color=color,
        user_ids=user_ids,
    )
    try:
        workspace = hub.workspaces.add(data)
    except (WorkspaceValidationError, WorkspaceConflictError) as e:
        return _redirect("/admin", error=str(e))
    return _redirect(
        "/admin", success=f"{workspace.title} workspace has been successfully created"
    )


@router.post("/admin/workspaces/{workspace_id}")
def admin_edit_workspace(
    workspace_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
    title: str = Form(""),
    description: str = Form(""),
    user_ids: list[str] = Form([]),
):
    """Handle "Edit Workspace" form: title, description and the exact access set."""
    redirect = _guard(hub, user, ADMIN_PANEL)
    if redirect is not None:
        return redirect
    data = WorkspaceUpdate(title=title, description=description, user_ids=user_ids)
    try:
        workspace = hub.workspaces.update(workspace_id, data)
    except WorkspaceNotFoundError:
        return _redirect("/admin", error="Workspace not found")
    except WorkspaceValidationError as e:
        return _redirect("/admin", error=str(e))
    return _redirect("/admin", success=f"{workspace.title} workspace updated")


@router.post("/admin/workspaces/{workspace_id}/delete")
def admin_delete_workspace(
    workspace_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
):
    """Handle workspace delete button."""
    redirect = _guard(hub, user, ADMIN_PANEL)
    if redirect is not None:
        return redirect
    try:
        hub.workspaces.delete(workspace_id)
    except WorkspaceNotFoundError:
        return _redirect("/admin", error="Workspace not found")
    return _redirect("/admin", success=f"Workspace {workspace_id} deleted")


@router.post("/admin/users/{user_id}/role")
def admin_change_role(
    user_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_ui_auth),
    role: str = Form(...),
):
    """Handle role select in the user table."""
    redirect = _guard(hub, user, ADMIN_PANEL)
    if redirect is not None:
        return redirect
    try:
        changed = hub.workspaces.change_role(user_id, Role(role))
    except (ValueError, WorkspaceValidationError) as e:
        return _redirect("/admin", error=str(e))
    return _redirect("/admin", success=f"{changed.username} is now {changed.role.value}")
