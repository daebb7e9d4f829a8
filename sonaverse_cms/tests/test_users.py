"""Tests for admin account management."""

import pytest

from conftest import SUPER_ADMIN_EMAIL


def _create(client, **overrides):
    body = {
        "email": "writer@sonaverse.kr",
        "name": "writer",
        "password": "writer-pass-1",
        "role": "editor",
    }
    body.update(overrides)
    return client.post("/api/admin/users", json=body)


def _super_admin_id(client):
    users = client.get("/api/admin/users").json()["users"]
    return next(u["id"] for u in users if u["email"] == SUPER_ADMIN_EMAIL)


class TestListAndCreate:
    def test_bootstrap_account_listed_without_hash(self, admin_client):
        response = admin_client.get("/api/admin/users")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total"] == 1
        user = data["users"][0]
        assert user["email"] == SUPER_ADMIN_EMAIL
        assert user["role"] == "super_admin"
        assert "password_hash" not in user
        assert "password" not in user

    def test_create_user(self, admin_client, client, login):
        response = _create(admin_client)
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "writer@sonaverse.kr"
        assert user["username"] == "writer"
        assert user["role"] == "editor"
        assert user["is_active"] is True

        client.cookies.clear()
        assert login(client, "writer@sonaverse.kr", "writer-pass-1").status_code == 200

    def test_create_requires_all_fields(self, admin_client):
        response = _create(admin_client, password="")
        assert response.status_code == 400
        assert response.json()["error"] == "모든 필드를 입력해주세요."

    def test_create_rejects_short_password(self, admin_client):
        response = _create(admin_client, password="short")
        assert response.status_code == 400
        assert response.json()["error"] == "비밀번호는 최소 8자 이상이어야 합니다."

    def test_create_rejects_bad_role(self, admin_client):
        assert _create(admin_client, role="owner").status_code == 400

    def test_duplicate_email_and_username(self, admin_client):
        assert _create(admin_client).status_code == 201

        dup_email = _create(admin_client, name="other")
        assert dup_email.status_code == 400
        assert dup_email.json()["error"] == "이미 존재하는 이메일입니다."

        dup_name = _create(admin_client, email="other@sonaverse.kr")
        assert dup_name.status_code == 400
        assert dup_name.json()["error"] == "이미 존재하는 사용자 이름입니다."

    def test_requires_session(self, client):
        response = client.get("/api/admin/users")
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "인증이 필요합니다."}

    def test_editor_forbidden(self, editor_client):
        response = editor_client.get("/api/admin/users")
        assert response.status_code == 403
        assert response.json()["error"] == "권한이 없습니다."

    def test_configured_email_counts_as_super_admin(self, app, client, session_cookie):
        name, token = session_cookie(role="admin", email=SUPER_ADMIN_EMAIL)
        client.cookies.set(name, token)
        assert client.get("/api/admin/users").status_code == 200


class TestUpdate:
    def test_update_role_and_password(self, admin_client, client, login):
        user_id = _create(admin_client).json()["user"]["id"]
        response = admin_client.patch(
            f"/api/admin/users/{user_id}",
            json={"role": "admin", "password": "new-writer-pass"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

        client.cookies.clear()
        assert login(client, "writer@sonaverse.kr", "writer-pass-1").status_code == 401
        assert login(client, "writer@sonaverse.kr", "new-writer-pass").status_code == 200

    @pytest.mark.parametrize("body", [{"role": "editor"}, {"is_active": False}])
    def test_protected_account_cannot_be_demoted(self, admin_client, body):
        response = admin_client.patch(
            f"/api/admin/users/{_super_admin_id(admin_client)}", json=body
        )
        assert response.status_code == 400
        assert (
            response.json()["error"]
            == "최고 관리자 계정의 권한이나 상태는 변경할 수 없습니다."
        )

    def test_update_missing_user(self, admin_client):
        response = admin_client.patch("/api/admin/users/missing", json={"role": "admin"})
        assert response.status_code == 404


class TestDelete:
    def test_delete_user(self, admin_client):
        user_id = _create(admin_client).json()["user"]["id"]
        response = admin_client.delete(f"/api/admin/users/{user_id}")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert admin_client.get("/api/admin/users").json()["total"] == 1

    def test_protected_account_refused_for_super_admin(self, admin_client):
        response = admin_client.delete(
            f"/api/admin/users/{_super_admin_id(admin_client)}"
        )
        assert response.status_code == 400
        assert response.json()["error"] == "최고 관리자 계정은 삭제할 수 없습니다."

    def test_protected_account_refused_for_editor(
        self, admin_client, editor_client
    ):
        target = _super_admin_id(admin_client)
        response = editor_client.delete(f"/api/admin/users/{target}")
        assert response.status_code == 400
        assert response.json()["error"] == "최고 관리자 계정은 삭제할 수 없습니다."

    def test_editor_cannot_delete_others(self, admin_client, editor_client):
        user_id = _create(admin_client).json()["user"]["id"]
        response = editor_client.delete(f"/api/admin/users/{user_id}")
        assert response.status_code == 403

    def test_delete_missing(self, admin_client):
        assert admin_client.delete("/api/admin/users/missing").status_code == 404

    def test_delete_requires_session(self, client):
        assert client.delete("/api/admin/users/anything").status_code == 401
