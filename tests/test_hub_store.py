"""Tests for seeding, reset and session entry points of the hub store."""

from __future__ import annotations

from app.services.file_registry import UploadedContent, files_key
from app.services.hub_store import HubStore
from app.services.user_directory import USERS_KEY
from app.services.workspace_registry import WORKSPACES_KEY
from tests.test_constants import ADMIN_PASSWORD, ADMIN_USERNAME, TEST_PASSWORD_WRONG


def test_ensure_seeded_writes_empty_keys(kv, content):
    hub = HubStore(kv, content=content)
    assert hub.ensure_seeded() is True
    assert len(hub.users.all()) == 7
    assert len(hub.workspaces.all()) == 7
    assert hub.ensure_seeded() is False


def test_ensure_seeded_keeps_existing_data(hub):
    hub.workspaces.delete("qa")
    assert hub.ensure_seeded() is False
    assert hub.workspaces.get("qa") is None


def test_ensure_seeded_fills_only_missing_key(hub):
    hub.workspaces.delete("qa")
    hub.kv.delete(USERS_KEY)
    assert hub.ensure_seeded() is True
    assert hub.workspaces.get("qa") is None
    assert len(hub.users.all()) == 7


def test_reset_restores_demo_data(hub):
    admin = hub.users.get_by_username(ADMIN_USERNAME)
    hub.files.upload("dev", admin, [UploadedContent("a.txt", "text/plain", b"a")])
    hub.sessions.open(admin)
    hub.workspaces.delete("qa")

    hub.reset()

    assert hub.workspaces.get("qa") is not None
    assert "qa" in hub.users.get_by_username("qa-manager").workspaces
    assert hub.kv.get(files_key("dev")) is None
    assert hub.kv.keys("session:") == []
    assert hub.kv.get(WORKSPACES_KEY) is not None


def test_login_and_logout(hub):
    result = hub.login(ADMIN_USERNAME, ADMIN_PASSWORD)
    assert result is not None
    user, sid = result
    assert hub.current_user(sid) == user

    hub.logout(sid)
    assert hub.current_user(sid) is None


def test_failed_login_opens_nothing(hub):
    assert hub.login(ADMIN_USERNAME, TEST_PASSWORD_WRONG) is None
    assert hub.kv.keys("session:") == []


def test_current_user_without_session(hub):
    assert hub.current_user(None) is None
    assert hub.current_user("") is None
    hub.logout(None)
