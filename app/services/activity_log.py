"""Admin activity log: static demo entries, user presence and panel stats.

There is no write path: entries come from the demo seed with timestamps
anchored to process start.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from functools import lru_cache

from app.schemas.activity import ActivityLogEntry, AdminStats, UserActivityRow
from app.schemas.user import User

ONLINE_WINDOW = timedelta(hours=1)
RECENT_WINDOW = timedelta(hours=24)


def format_relative_time(timestamp: datetime, now: datetime | None = None) -> str:
    """``N minutes ago`` under an hour, ``N hours ago`` under a day, else the date."""
    now = now or datetime.now(UTC)
    minutes = int((now - timestamp).total_seconds() // 60)
    if minutes < 60:
        return f"{minutes} minutes ago"
    if minutes < 1440:
        return f"{minutes // 60} hours ago"
    return timestamp.strftime("%Y-%m-%d")


def presence_status(last_seen: datetime | None, now: datetime | None = None) -> str:
    """Online (< 1 h), Recent (< 24 h), Offline, or Inactive when never seen."""
    if last_seen is None:
        return "Inactive"
    age = (now or datetime.now(UTC)) - last_seen
    if age < ONLINE_WINDOW:
        return "Online"
    if age < RECENT_WINDOW:
        return "Recent"
    return "Offline"


class ActivityLog:
    """Read-only view over a fixed list of activity entries."""

    def __init__(self, entries: list[ActivityLogEntry]) -> None:
        self._entries = list(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self, search: str = "") -> list[ActivityLogEntry]:
        """Entries matching search on username, action or workspace (case-insensitive)."""
        needle = (search or "").lower()
        return [
            e
            for e in self._entries
            if needle in e.username.lower()
            or needle in e.action.lower()
            or needle in e.workspace.lower()
        ]

    def last_activity_for(self, username: str) -> ActivityLogEntry | None:
        mine = [e for e in self._entries if e.username == username]
        return max(mine, key=lambda e: e.timestamp, default=None)

    def user_rows(
        self, users: list[User], search: str = "", now: datetime | None = None
    ) -> list[UserActivityRow]:
        """User management rows, filtered on username or role."""
        now = now or datetime.now(UTC)
        needle = (search or "").lower()
        rows: list[UserActivityRow] = []
        for user in users:
            if needle not in user.username.lower() and needle not in user.role.value:
                continue
            last = self.last_activity_for(user.username)
            rows.append(
                UserActivityRow(
                    id=user.id,
                    username=user.username,
                    role=user.role,
                    workspaces=user.workspaces,
                    status=presence_status(last.timestamp if last else None, now),
                    last_activity=format_relative_time(last.timestamp, now) if last else None,
                )
            )
        return rows

    def stats(self, users: list[User], now: datetime | None = None) -> AdminStats:
        now = now or datetime.now(UTC)
        active_today = 0
        for user in users:
            last = self.last_activity_for(user.username)
            if last is not None and now - last.timestamp < RECENT_WINDOW:
                active_today += 1
        return AdminStats(
            total_users=len(users),
            active_today=active_today,
            recent_actions=len(self._entries),
            last_hour=sum(1 for e in self._entries if now - e.timestamp < ONLINE_WINDOW),
        )


def build_activity_log(seed_entries: list[dict], now: datetime) -> ActivityLog:
    """Materialize seed entries with ``minutes_ago`` relative to now."""
    return ActivityLog(
        [
            ActivityLogEntry(
                id=e["id"],
                username=e["username"],
                action=e["action"],
                workspace=e["workspace"],
                timestamp=now - timedelta(minutes=e["minutes_ago"]),
                details=e["details"],
            )
            for e in seed_entries
        ]
    )


@lru_cache(maxsize=1)
def get_activity_log() -> ActivityLog:
    """Return the demo activity log, anchored to the first call in this process."""
    from app.seed.loader import load_seed

    return build_activity_log(load_seed().get("activity") or [], datetime.now(UTC))
