"""Tests for view resolution and UI transitions."""

from __future__ import annotations

import pytest

from app.services.view_controller import (
    ADMIN_PANEL,
    LOGGED_OUT,
    WORKSPACE_LIST,
    View,
    ViewEvent,
    ViewState,
    resolve_view,
    transition,
)


@pytest.fixture
def admin(hub):
    return hub.users.get_by_username("admin")


@pytest.fixture
def viewer(hub):
    return hub.users.get_by_username("viewer")


def _detail(workspace_id: str) -> ViewState:
    return ViewState(View.workspace_detail, workspace_id)


class TestPaths:
    def test_paths(self):
        assert LOGGED_OUT.path == "/login"
        assert WORKSPACE_LIST.path == "/"
        assert ADMIN_PANEL.path == "/admin"
        assert _detail("qa").path == "/workspaces/qa"


class TestResolveView:
    def test_no_user_is_logged_out(self, hub):
        assert resolve_view(None, ADMIN_PANEL, hub.workspaces) == LOGGED_OUT

    def test_logged_in_user_skips_login(self, hub, viewer):
        assert resolve_view(viewer, LOGGED_OUT, hub.workspaces) == WORKSPACE_LIST

    def test_admin_panel_for_admin(self, hub, admin):
        assert resolve_view(admin, ADMIN_PANEL, hub.workspaces) == ADMIN_PANEL

    def test_admin_panel_refused_for_viewer(self, hub, viewer):
        assert resolve_view(viewer, ADMIN_PANEL, hub.workspaces) == WORKSPACE_LIST

    def test_detail_on_access_list(self, hub, viewer):
        assert resolve_view(viewer, _detail("qa"), hub.workspaces) == _detail("qa")

    def test_detail_not_on_access_list(self, hub, viewer):
        assert resolve_view(viewer, _detail("data"), hub.workspaces) == WORKSPACE_LIST

    def test_detail_of_deleted_workspace(self, hub, admin):
        hub.workspaces.delete("qa")
        assert resolve_view(admin, _detail("qa"), hub.workspaces) == WORKSPACE_LIST


class TestTransition:
    def test_login(self, hub, viewer):
        assert transition(LOGGED_OUT, ViewEvent.login_succeeded, viewer, hub.workspaces) == WORKSPACE_LIST

    def test_open_workspace(self, hub, viewer):
        state = transition(WORKSPACE_LIST, ViewEvent.open_workspace, viewer, hub.workspaces, "dev")
        assert state == _detail("dev")

    def test_open_forbidden_workspace_stays_on_list(self, hub, viewer):
        state = transition(WORKSPACE_LIST, ViewEvent.open_workspace, viewer, hub.workspaces, "admin")
        assert state == WORKSPACE_LIST

    def test_back(self, hub, viewer):
        assert transition(_detail("dev"), ViewEvent.back, viewer, hub.workspaces) == WORKSPACE_LIST

    def test_open_admin_panel(self, hub, admin, viewer):
        assert transition(WORKSPACE_LIST, ViewEvent.open_admin_panel, admin, hub.workspaces) == ADMIN_PANEL
        assert transition(WORKSPACE_LIST, ViewEvent.open_admin_panel, viewer, hub.workspaces) == WORKSPACE_LIST

    def test_logout_from_anywhere(self, hub, admin):
        for state in (WORKSPACE_LIST, ADMIN_PANEL, _detail("dev")):
            assert transition(state, ViewEvent.logout, admin, hub.workspaces) == LOGGED_OUT

    def test_revoked_access_kicks_back_to_list(self, hub, viewer):
        state = transition(WORKSPACE_LIST, ViewEvent.open_workspace, viewer, hub.workspaces, "dev")
        viewer.workspaces.remove("dev")
        assert resolve_view(viewer, state, hub.workspaces) == WORKSPACE_LIST

    def test_event_not_valid_in_state_is_ignored(self, hub, admin):
        assert transition(ADMIN_PANEL, ViewEvent.open_workspace, admin, hub.workspaces, "dev") == ADMIN_PANEL
