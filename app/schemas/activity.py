"""Activity log schemas (admin panel)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.user import Role


class ActivityLogEntry(BaseModel):
    """One row of the admin activity log."""

    id: str
    username: str
    action: str
    workspace: str
    timestamp: datetime
    details: str


class UserActivityRow(BaseModel):
    """User management table row."""

    id: str
    username: str
    role: Role
    workspaces: list[str]
    status: str
    last_activity: Optional[str] = None


class AdminStats(BaseModel):
    total_users: int
    active_today: int
    recent_actions: int
    last_hour: int
