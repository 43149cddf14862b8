"""End-to-end tests for the HTML views."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.services.file_registry import TransientContentStore, UploadedContent
from tests.test_constants import (
    ADMIN_PASSWORD,
    ADMIN_USERNAME,
    EDITOR_PASSWORD,
    EDITOR_USERNAME,
    TEST_PASSWORD_WRONG,
    VIEWER_PASSWORD,
    VIEWER_USERNAME,
)


def _ui_login(client: TestClient, username: str, password: str):
    return client.post(
        "/login",
        data={"username": username, "password": password},
        follow_redirects=False,
    )


class TestLoginFlow:
    def test_root_redirects_to_login(self, client: TestClient):
        resp = client.get("/", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/login"

    def test_login_page(self, client: TestClient):
        resp = client.get("/login")
        assert resp.status_code == 200
        assert "Sign In" in resp.text

    def test_admin_lands_on_all_workspaces(self, client: TestClient):
        resp = _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        assert resp.status_code == 303
        assert resp.headers["location"].startswith("/?success=")
        assert "access_token" in resp.cookies

        page = client.get(resp.headers["location"])
        assert page.status_code == 200
        assert "Welcome back, admin!" in page.text
        assert page.text.count('class="card workspace-card') == 7
        assert "Admin Panel" in page.text
        assert "Add New Workspace" in page.text

    def test_wrong_password_shows_generic_error(self, client: TestClient):
        resp = _ui_login(client, VIEWER_USERNAME, TEST_PASSWORD_WRONG)
        assert resp.status_code == 401
        assert "Invalid username or password" in resp.text
        assert "access_token" not in resp.cookies

    def test_unknown_user_shows_same_error(self, client: TestClient):
        resp = _ui_login(client, "ghost", "whatever")
        assert resp.status_code == 401
        assert "Invalid username or password" in resp.text

    def test_login_page_redirects_when_signed_in(self, client: TestClient):
        _ui_login(client, VIEWER_USERNAME, VIEWER_PASSWORD)
        resp = client.get("/login", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/"

    def test_logout(self, client: TestClient, hub):
        _ui_login(client, VIEWER_USERNAME, VIEWER_PASSWORD)
        resp = client.get("/logout", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"].startswith("/login?success=")
        assert hub.kv.keys("session:") == []
        assert client.get("/", follow_redirects=False).status_code == 303


class TestWorkspaceList:
    def test_viewer_sees_four(self, client: TestClient):
        _ui_login(client, VIEWER_USERNAME, VIEWER_PASSWORD)
        page = client.get("/")
        assert page.text.count('class="card workspace-card') == 4
        assert "View Only" in page.text
        assert "Admin Panel" not in page.text

    def test_search(self, client: TestClient):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        page = client.get("/", params={"search": "qa"})
        assert page.text.count('class="card workspace-card') == 1
        assert "Quality Assurance" in page.text

    def test_no_workspaces(self, client: TestClient, hub):
        _ui_login(client, EDITOR_USERNAME, EDITOR_PASSWORD)
        hub.workspaces.delete("qa")
        hub.workspaces.delete("docs")
        page = client.get("/")
        assert "No workspaces available" in page.text


class TestWorkspaceDetail:
    def test_viewer_has_no_edit_controls(self, client: TestClient, hub):
        editor = hub.users.get_by_username(EDITOR_USERNAME)
        hub.files.upload("qa", editor, [UploadedContent("plan.txt", "text/plain", b"plan")])
        _ui_login(client, VIEWER_USERNAME, VIEWER_PASSWORD)
        page = client.get("/workspaces/qa")
        assert page.status_code == 200
        assert "plan.txt" in page.text
        assert "Download" in page.text
        assert "upload-form" not in page.text
        assert "delete-file" not in page.text

    def test_editor_upload_and_remove(self, client: TestClient, hub):
        _ui_login(client, EDITOR_USERNAME, EDITOR_PASSWORD)
        page = client.get("/workspaces/qa")
        assert "upload-form" in page.text
        assert "No files uploaded" in page.text

        resp = client.post(
            "/workspaces/qa/files",
            files=[
                ("files", ("one.txt", b"1", "text/plain")),
                ("files", ("two.png", b"22", "image/png")),
            ],
        )
        assert resp.status_code == 200
        assert "2 file(s) uploaded successfully" in resp.text
        assert "one.txt" in resp.text and "two.png" in resp.text

        file_id = hub.files.list("qa")[0].id
        resp = client.post(f"/workspaces/qa/files/{file_id}/delete")
        assert "File has been removed from the workspace" in resp.text
        assert [f.name for f in hub.files.list("qa")] == ["two.png"]

    def test_viewer_upload_forbidden(self, client: TestClient, hub):
        _ui_login(client, VIEWER_USERNAME, VIEWER_PASSWORD)
        resp = client.post(
            "/workspaces/qa/files", files=[("files", ("x.txt", b"x", "text/plain"))]
        )
        assert resp.status_code == 403
        assert hub.files.list("qa") == []

    def test_forbidden_workspace_redirects_to_list(self, client: TestClient):
        _ui_login(client, EDITOR_USERNAME, EDITOR_PASSWORD)
        resp = client.get("/workspaces/dev", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"].startswith("/?error=")

    def test_download(self, client: TestClient, hub):
        _ui_login(client, EDITOR_USERNAME, EDITOR_PASSWORD)
        client.post("/workspaces/qa/files", files=[("files", ("a.txt", b"abc", "text/plain"))])
        file_id = hub.files.list("qa")[0].id
        resp = client.get(f"/workspaces/qa/files/{file_id}/download")
        assert resp.status_code == 200
        assert resp.content == b"abc"

    def test_download_after_restart(self, client: TestClient, hub):
        _ui_login(client, EDITOR_USERNAME, EDITOR_PASSWORD)
        client.post("/workspaces/qa/files", files=[("files", ("a.txt", b"abc", "text/plain"))])
        file_id = hub.files.list("qa")[0].id
        hub.files.content = TransientContentStore()
        resp = client.get(f"/workspaces/qa/files/{file_id}/download", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"].startswith("/workspaces/qa?error=")

    def test_revoked_while_viewing(self, client: TestClient, hub):
        _ui_login(client, EDITOR_USERNAME, EDITOR_PASSWORD)
        assert client.get("/workspaces/qa").status_code == 200
        hub.workspaces.delete("qa")
        resp = client.get("/workspaces/qa", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"].startswith("/?error=")


class TestAdminPanel:
    def test_viewer_redirected(self, client: TestClient):
        _ui_login(client, VIEWER_USERNAME, VIEWER_PASSWORD)
        resp = client.get("/admin", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/"

    def test_admin_panel_renders(self, client: TestClient):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        page = client.get("/admin")
        assert page.status_code == 200
        assert "Total Users" in page.text
        assert "Create New Workspace" in page.text
        assert "qa-manager" in page.text

    def test_activity_tab(self, client: TestClient):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        page = client.get("/admin", params={"tab": "activity"})
        assert "Uploaded component.tsx" in page.text

    def test_create_workspace(self, client: TestClient, hub):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post(
            "/admin/workspaces",
            data={
                "workspace_id": "Frontend Dev",
                "title": "Frontend",
                "description": "UI work",
                "icon": "Code",
                "color": "bg-pink-500",
                "user_ids": ["1", "2"],
            },
        )
        assert resp.status_code == 200
        assert "Frontend workspace has been successfully created" in resp.text
        assert "frontend-dev" in hub.users.get("2").workspaces
        assert client.get("/").text.count('class="card workspace-card') == 8

    def test_create_workspace_missing_fields(self, client: TestClient, hub):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post("/admin/workspaces", data={"workspace_id": "x", "title": "X"})
        assert "Please fill in all required fields" in resp.text
        assert len(hub.workspaces.all()) == 7

    def test_edit_workspace(self, client: TestClient, hub):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post(
            "/admin/workspaces/qa",
            data={"title": "QA", "description": "Tests", "user_ids": ["1"]},
        )
        assert "QA workspace updated" in resp.text
        assert hub.workspaces.user_ids_with_access("qa") == ["1"]

    def test_delete_workspace(self, client: TestClient, hub):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post("/admin/workspaces/qa/delete")
        assert "Workspace qa deleted" in resp.text
        assert hub.workspaces.get("qa") is None
        assert "qa" not in hub.users.get_by_username(EDITOR_USERNAME).workspaces
        assert client.get("/").text.count('class="card workspace-card') == 6

    def test_change_role(self, client: TestClient, hub):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post("/admin/users/7/role", data={"role": "editor"})
        assert "viewer is now editor" in resp.text
        assert hub.users.get("7").can_edit is True

    def test_create_workspace_with_slash_in_id(self, client: TestClient, hub):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post(
            "/admin/workspaces",
            data={"workspace_id": "a/b", "title": "A", "description": "B"},
        )
        assert "Workspace ID may only contain" in resp.text
        assert hub.workspaces.get("a/b") is None

    def test_change_role_unknown_value(self, client: TestClient, hub):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post("/admin/users/7/role", data={"role": "owner"})
        assert resp.status_code == 200
        assert "is not a valid Role" in resp.text
        assert hub.users.get("7").role.value == "viewer"

    def test_change_role_unknown_user(self, client: TestClient):
        _ui_login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
        resp = client.post("/admin/users/99/role", data={"role": "editor"})
        assert "Unknown user id(s): 99" in resp.text

    def test_admin_post_refused_for_editor(self, client: TestClient, hub):
        _ui_login(client, EDITOR_USERNAME, EDITOR_PASSWORD)
        client.post("/admin/workspaces/qa/delete")
        assert hub.workspaces.get("qa") is not None
