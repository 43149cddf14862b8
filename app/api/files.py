"""Workspace file API routes."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from app.api.deps import get_hub, require_auth, require_workspace_access
from app.schemas.file import WorkspaceFile, WorkspaceFileListResponse, WorkspaceStats
from app.schemas.user import User
from app.services.file_registry import (
    FileContentGoneError,
    FilePermissionError,
    UploadedContent,
    UploadTooLargeError,
    WorkspaceFileNotFoundError,
    search_files,
)
from app.services.hub_store import HubStore

router = APIRouter()


def read_uploads(files: list[UploadFile]) -> list[UploadedContent]:
    """Drain upload parts into memory, skipping empty file inputs."""
    return [
        UploadedContent(
            name=f.filename,
            content_type=f.content_type or "",
            data=f.file.read(),
        )
        for f in files
        if f.filename
    ]


def download_response(record: WorkspaceFile, data: bytes) -> Response:
    return Response(
        content=data,
        media_type=record.type or "application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.name)}"
        },
    )


@router.get("/{workspace_id}/files", response_model=WorkspaceFileListResponse)
def api_list_files(
    workspace_id: str,
    search: str = "",
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_auth),
) -> WorkspaceFileListResponse:
    """List files in a workspace, filtered by name search."""
    require_workspace_access(hub, user, workspace_id)
    return WorkspaceFileListResponse(
        items=search_files(hub.files.list(workspace_id), search)
    )


@router.get("/{workspace_id}/stats", response_model=WorkspaceStats)
def api_workspace_stats(
    workspace_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_auth),
) -> WorkspaceStats:
    require_workspace_access(hub, user, workspace_id)
    return hub.files.stats(hub.files.list(workspace_id), user)


@router.post("/{workspace_id}/files", status_code=201, response_model=WorkspaceFileListResponse)
def api_upload_files(
    workspace_id: str,
    files: list[UploadFile] = File(...),
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_auth),
) -> WorkspaceFileListResponse:
    """Upload one or more files (editor/admin only)."""
    require_workspace_access(hub, user, workspace_id)
    uploads = read_uploads(files)
    if not uploads:
        raise HTTPException(status_code=422, detail="No files selected")
    try:
        created = hub.files.upload(workspace_id, user, uploads)
    except FilePermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except UploadTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    return WorkspaceFileListResponse(items=created)


@router.delete("/{workspace_id}/files/{file_id}", status_code=204)
def api_delete_file(
    workspace_id: str,
    file_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_auth),
) -> None:
    """Delete a file (editor/admin only)."""
    require_workspace_access(hub, user, workspace_id)
    try:
        hub.files.delete(workspace_id, user, file_id)
    except FilePermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except WorkspaceFileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")


@router.get("/{workspace_id}/files/{file_id}/download")
def api_download_file(
    workspace_id: str,
    file_id: str,
    hub: HubStore = Depends(get_hub),
    user: User = Depends(require_auth),
) -> Response:
    """Download file content while its transient handle is still live."""
    require_workspace_access(hub, user, workspace_id)
    try:
        record, data = hub.files.read_content(workspace_id, file_id)
    except WorkspaceFileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    except FileContentGoneError as e:
        raise HTTPException(status_code=410, detail=str(e))
    return download_response(record, data)
