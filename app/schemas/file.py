"""Workspace file schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class WorkspaceFile(BaseModel):
    """Metadata for one uploaded file.

    ``url`` is the transient content handle. It is stored with the record
    but only resolves while the process that issued it is running.
    """

    id: str
    name: str
    size: int
    type: str = ""
    uploaded_by: str
    uploaded_at: datetime
    url: Optional[str] = None


class WorkspaceFileListResponse(BaseModel):
    items: list[WorkspaceFile]


class WorkspaceStats(BaseModel):
    """Summary block shown under the file grid."""

    total_files: int
    total_size: int
    total_size_display: str
    contributors: int
    access_level: str
