"""File registry: per-workspace file records with transient content.

Each workspace's file list lives under ``workspace_files_<id>`` and is
re-serialized whole after every mutation. File bytes are never persisted:
uploads are parked in a process-local :class:`TransientContentStore` and the
record keeps only the ``blob:`` handle, which dies with the process.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import lru_cache

from pydantic import ValidationError

from app.schemas.file import WorkspaceFile, WorkspaceStats
from app.schemas.user import User
from app.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

FILES_KEY_PREFIX = "workspace_files_"

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


class FilePermissionError(PermissionError):
    """Raised when a user may not change files in a workspace."""


class WorkspaceFileNotFoundError(LookupError):
    """Raised when a file id is not in the workspace's list."""


class FileContentGoneError(LookupError):
    """Raised when a record's content handle no longer resolves."""


class UploadTooLargeError(ValueError):
    """Raised when an uploaded file exceeds the configured size limit."""


@dataclass(frozen=True)
class UploadedContent:
    """One file received from an upload form."""

    name: str
    content_type: str
    data: bytes


def files_key(workspace_id: str) -> str:
    return f"{FILES_KEY_PREFIX}{workspace_id}"


class TransientContentStore:
    """Process-local handle -> bytes map backing ``blob:`` URLs."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    def put(self, data: bytes) -> str:
        handle = f"blob:{uuid.uuid4()}"
        self._blobs[handle] = data
        return handle

    def get(self, handle: str | None) -> bytes | None:
        if handle is None:
            return None
        return self._blobs.get(handle)

    def discard(self, handle: str | None) -> None:
        if handle is not None:
            self._blobs.pop(handle, None)


@lru_cache(maxsize=1)
def get_content_store() -> TransientContentStore:
    """Return the content store for this process."""
    return TransientContentStore()


def search_files(files: list[WorkspaceFile], term: str) -> list[WorkspaceFile]:
    """Case-insensitive substring match on file name."""
    needle = (term or "").lower()
    return [f for f in files if needle in f.name.lower()]


def format_file_size(num_bytes: int) -> str:
    """Human-readable size using 1024 steps, e.g. ``1.5 KB``."""
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def file_kind(mime_type: str) -> str:
    """Display category for a MIME type: image, document or file."""
    if mime_type.startswith("image/"):
        return "image"
    if "text" in mime_type or "document" in mime_type:
        return "document"
    return "file"


class FileRegistry:
    """List, upload, delete and download workspace files."""

    def __init__(
        self,
        kv: KeyValueStore,
        content: TransientContentStore | None = None,
        max_upload_bytes: int | None = None,
    ) -> None:
        self.kv = kv
        self.content = content if content is not None else get_content_store()
        self.max_upload_bytes = max_upload_bytes

    # ── Read path ────────────────────────────────────────────────────

    def list(self, workspace_id: str) -> list[WorkspaceFile]:
        """Load the workspace's files; an absent key is an empty list."""
        raw = self.kv.get_json(files_key(workspace_id), [])
        try:
            return [WorkspaceFile.model_validate(item) for item in raw]
        except (ValidationError, TypeError) as e:
            logger.warning("Ignoring malformed file list for workspace %s: %s", workspace_id, e)
            return []

    def get(self, workspace_id: str, file_id: str) -> WorkspaceFile:
        for f in self.list(workspace_id):
            if f.id == file_id:
                return f
        raise WorkspaceFileNotFoundError(f"File {file_id} not found in workspace {workspace_id}")

    def read_content(self, workspace_id: str, file_id: str) -> tuple[WorkspaceFile, bytes]:
        """Return the record and its bytes.

        Raises:
            WorkspaceFileNotFoundError: Unknown file id.
            FileContentGoneError: The handle was issued by an earlier process.
        """
        record = self.get(workspace_id, file_id)
        data = self.content.get(record.url)
        if data is None:
            raise FileContentGoneError(f"Content for {record.name} is no longer available")
        return record, data

    # ── Mutations ────────────────────────────────────────────────────

    def _save(self, workspace_id: str, files: list[WorkspaceFile]) -> None:
        self.kv.set_json(files_key(workspace_id), [f.model_dump(mode="json") for f in files])

    def _require_edit(self, user: User, workspace_id: str) -> None:
        if not user.can_edit:
            raise FilePermissionError(f"Role '{user.role.value}' cannot modify files")
        if not user.has_workspace(workspace_id):
            raise FilePermissionError(f"{user.username} has no access to workspace {workspace_id}")

    def upload(
        self,
        workspace_id: str,
        user: User,
        uploads: list[UploadedContent],
    ) -> list[WorkspaceFile]:
        """Append one record per upload, authored by user at the current time."""
        self._require_edit(user, workspace_id)
        if self.max_upload_bytes is not None:
            for item in uploads:
                if len(item.data) > self.max_upload_bytes:
                    raise UploadTooLargeError(f"{item.name} exceeds the upload size limit")

        now = datetime.now(UTC)
        new_files = [
            WorkspaceFile(
                id=uuid.uuid4().hex,
                name=item.name,
                size=len(item.data),
                type=item.content_type or "",
                uploaded_by=user.username,
                uploaded_at=now,
                url=self.content.put(item.data),
            )
            for item in uploads
        ]
        self._save(workspace_id, self.list(workspace_id) + new_files)
        logger.info(
            "%s uploaded %d file(s) to workspace %s", user.username, len(new_files), workspace_id
        )
        return new_files

    def delete(self, workspace_id: str, user: User, file_id: str) -> WorkspaceFile:
        """Remove a file by id and return the removed record."""
        self._require_edit(user, workspace_id)
        files = self.list(workspace_id)
        removed = next((f for f in files if f.id == file_id), None)
        if removed is None:
            raise WorkspaceFileNotFoundError(
                f"File {file_id} not found in workspace {workspace_id}"
            )
        self._save(workspace_id, [f for f in files if f.id != file_id])
        self.content.discard(removed.url)
        logger.info("%s deleted %s from workspace %s", user.username, removed.name, workspace_id)
        return removed

    def drop_workspace(self, workspace_id: str) -> None:
        """Forget every file of a deleted workspace."""
        for f in self.list(workspace_id):
            self.content.discard(f.url)
        self.kv.delete(files_key(workspace_id))

    # ── Summary ──────────────────────────────────────────────────────

    @staticmethod
    def stats(files: list[WorkspaceFile], user: User) -> WorkspaceStats:
        total_size = sum(f.size for f in files)
        return WorkspaceStats(
            total_files=len(files),
            total_size=total_size,
            total_size_display=format_file_size(total_size),
            contributors=len({f.uploaded_by for f in files}),
            access_level="Editor" if user.can_edit else "Viewer",
        )
