"""Workspace schemas: persisted config and admin requests."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.user import Role

DEFAULT_ICON = "FileText"
DEFAULT_COLOR = "bg-blue-500"

# icon name -> label shown in the picker
ICON_OPTIONS: dict[str, str] = {
    "Code": "Development",
    "Bug": "Testing",
    "Eye": "Review",
    "Settings": "Administration",
    "Database": "Data",
    "FileText": "Documentation",
    "Clipboard": "Planning",
}

# colour token -> (label, light colour token)
COLOR_OPTIONS: dict[str, tuple[str, str]] = {
    "bg-blue-500": ("Blue", "bg-blue-50 border-blue-200"),
    "bg-green-500": ("Green", "bg-green-50 border-green-200"),
    "bg-purple-500": ("Purple", "bg-purple-50 border-purple-200"),
    "bg-red-500": ("Red", "bg-red-50 border-red-200"),
    "bg-indigo-500": ("Indigo", "bg-indigo-50 border-indigo-200"),
    "bg-orange-500": ("Orange", "bg-orange-50 border-orange-200"),
    "bg-teal-500": ("Teal", "bg-teal-50 border-teal-200"),
    "bg-pink-500": ("Pink", "bg-pink-50 border-pink-200"),
}


class WorkspaceConfig(BaseModel):
    """Display metadata for one workspace."""

    id: str
    title: str
    description: str
    icon: str = DEFAULT_ICON
    color: str = DEFAULT_COLOR
    light_color: str = COLOR_OPTIONS[DEFAULT_COLOR][1]


class WorkspaceCreate(BaseModel):
    """Schema for the admin "add workspace" action.

    Required fields are checked by the registry so HTML forms and the JSON
    API report missing values the same way.
    """

    id: str = ""
    title: str = ""
    description: str = ""
    icon: str = DEFAULT_ICON
    color: str = DEFAULT_COLOR
    user_ids: list[str] = Field(default_factory=list)


class WorkspaceUpdate(BaseModel):
    """Schema for the admin "edit workspace" action. All fields optional."""

    title: Optional[str] = None
    description: Optional[str] = None
    user_ids: Optional[list[str]] = None
    role_changes: dict[str, Role] = Field(default_factory=dict)


class WorkspaceRead(WorkspaceConfig):
    """Workspace as returned to a user, with the caller's access label."""

    access: str


class WorkspaceListResponse(BaseModel):
    items: list[WorkspaceRead]
