"""Demo seed schema validation.

Validates that demo.yaml has the required structure:
- users: non-empty list with unique ids/usernames, a password and a known role
- workspaces: non-empty list with unique ids, title and description
- every workspace id on a user's access list is defined under workspaces
- activity (optional): list of entries with a non-negative minutes_ago
"""

from __future__ import annotations

from typing import Any

_ROLES = frozenset({"admin", "editor", "viewer"})
_USER_FIELDS = ("id", "username", "password", "role")
_WORKSPACE_FIELDS = ("id", "title", "description")
_ACTIVITY_FIELDS = ("id", "username", "action", "workspace", "details")


class SeedValidationError(ValueError):
    """Raised when the demo seed is structurally invalid."""


def _require_strings(entry: Any, fields: tuple[str, ...], where: str) -> None:
    if not isinstance(entry, dict):
        raise SeedValidationError(f"{where} entries must be mappings, got {entry!r}")
    for field in fields:
        value = entry.get(field)
        if not isinstance(value, str) or not value.strip():
            raise SeedValidationError(f"{where} entry missing non-empty '{field}': {entry!r}")


def validate_seed(seed: dict[str, Any]) -> None:
    """Validate demo seed structure.

    Args:
        seed: Loaded demo.yaml content.

    Raises:
        SeedValidationError: When structure or referential integrity fails.
    """
    if not isinstance(seed, dict):
        raise SeedValidationError("demo seed must be a dict")

    workspaces = seed.get("workspaces")
    if not isinstance(workspaces, list) or not workspaces:
        raise SeedValidationError("demo seed 'workspaces' must be a non-empty list")
    workspace_ids: set[str] = set()
    for ws in workspaces:
        _require_strings(ws, _WORKSPACE_FIELDS, "workspaces")
        if ws["id"] in workspace_ids:
            raise SeedValidationError(f"demo seed 'workspaces' contains duplicate: '{ws['id']}'")
        workspace_ids.add(ws["id"])

    users = seed.get("users")
    if not isinstance(users, list) or not users:
        raise SeedValidationError("demo seed 'users' must be a non-empty list")
    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    for user in users:
        _require_strings(user, _USER_FIELDS, "users")
        if user["role"] not in _ROLES:
            raise SeedValidationError(f"users.{user['username']} has unknown role '{user['role']}'")
        if user["id"] in seen_ids or user["username"] in seen_names:
            raise SeedValidationError(f"demo seed 'users' contains duplicate: '{user['username']}'")
        seen_ids.add(user["id"])
        seen_names.add(user["username"])
        for ws_id in user.get("workspaces") or []:
            if ws_id not in workspace_ids:
                raise SeedValidationError(
                    f"users.{user['username']} references '{ws_id}' not in workspaces"
                )

    activity = seed.get("activity")
    if activity is None:
        return
    if not isinstance(activity, list):
        raise SeedValidationError("demo seed 'activity' must be a list")
    for entry in activity:
        _require_strings(entry, _ACTIVITY_FIELDS, "activity")
        minutes = entry.get("minutes_ago")
        if not isinstance(minutes, int) or minutes < 0:
            raise SeedValidationError(
                f"activity.{entry['id']} 'minutes_ago' must be a non-negative integer"
            )
