"""Tests for customer inquiries."""

import pytest


def _inquiry(**overrides):
    body = {
        "inquiry_type": "product",
        "name": "홍길동",
        "company_name": "길동상사",
        "phone_number": "010-1234-5678",
        "email": "gildong@example.com",
        "message": "보행기 구매 문의드립니다.",
        "privacy_consented": True,
        "attached_files": ["https://files.example.com/spec.pdf"],
    }
    body.update(overrides)
    return body


class TestSubmit:
    def test_public_submission(self, client):
        response = client.post("/api/inquiries", json=_inquiry())
        assert response.status_code == 201
        inquiry = response.json()["inquiry"]
        assert inquiry["status"] == "pending"
        assert inquiry["status_history"] == []
        assert inquiry["attached_files"] == ["https://files.example.com/spec.pdf"]

    @pytest.mark.parametrize("field", ["inquiry_type", "name", "phone_number", "message"])
    def test_missing_required_field(self, client, field):
        response = client.post("/api/inquiries", json=_inquiry(**{field: "  "}))
        assert response.status_code == 400
        assert response.json()["error"] == f"필수 필드가 누락되었습니다: {field}"

    def test_invalid_email(self, client):
        response = client.post("/api/inquiries", json=_inquiry(email="nope"))
        assert response.status_code == 400
        assert response.json()["error"] == "올바른 이메일 형식을 입력해주세요."

    @pytest.mark.parametrize("consent", [False, None, "true"])
    def test_privacy_consent_required(self, client, consent):
        response = client.post("/api/inquiries", json=_inquiry(privacy_consented=consent))
        assert response.status_code == 400
        assert response.json()["error"] == "개인정보 수집 및 이용에 동의해주세요."

    def test_attached_files_must_be_strings(self, client):
        response = client.post("/api/inquiries", json=_inquiry(attached_files=[1, 2]))
        assert response.status_code == 400


class TestManage:
    def test_list_requires_session(self, client):
        assert client.get("/api/inquiries").status_code == 401

    def test_list_and_status_filter(self, admin_client):
        first = admin_client.post("/api/inquiries", json=_inquiry()).json()["inquiry"]
        admin_client.post("/api/inquiries", json=_inquiry(name="김철수"))
        admin_client.put(f"/api/inquiries/{first['id']}", json={"status": "in_progress"})

        data = admin_client.get("/api/inquiries").json()
        assert data["total"] == 2
        pending = admin_client.get("/api/inquiries?status=pending").json()
        assert [i["name"] for i in pending["results"]] == ["김철수"]

    def test_unknown_status_filter(self, admin_client):
        assert admin_client.get("/api/inquiries?status=lost").status_code == 400

    def test_status_changes_are_recorded(self, admin_client):
        created = admin_client.post("/api/inquiries", json=_inquiry()).json()["inquiry"]
        url = f"/api/inquiries/{created['id']}"

        response = admin_client.put(url, json={"status": "in_progress", "notes": "확인 중"})
        assert response.status_code == 200
        inquiry = response.json()["inquiry"]
        assert inquiry["status"] == "in_progress"
        assert inquiry["responded_at"] is None
        assert len(inquiry["status_history"]) == 1
        assert inquiry["status_history"][0]["notes"] == "확인 중"

        done = admin_client.put(
            url, json={"status": "completed", "admin_notes": "견적 발송"}
        ).json()["inquiry"]
        assert done["status"] == "completed"
        assert done["admin_notes"] == "견적 발송"
        assert done["responded_at"] is not None
        assert done["responded_by"]
        assert [h["status"] for h in done["status_history"]] == [
            "in_progress",
            "completed",
        ]

        fetched = admin_client.get(url).json()["inquiry"]
        assert len(fetched["status_history"]) == 2

    @pytest.mark.parametrize("status", [["completed"], {"value": "completed"}, 3])
    def test_non_string_status_rejected(self, admin_client, status):
        created = admin_client.post("/api/inquiries", json=_inquiry()).json()["inquiry"]
        response = admin_client.put(
            f"/api/inquiries/{created['id']}", json={"status": status}
        )
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "잘못된 요청 형식입니다."}
        detail = admin_client.get(f"/api/inquiries/{created['id']}").json()["inquiry"]
        assert detail["status"] == "pending"
        assert detail["status_history"] == []

    def test_same_status_not_recorded(self, admin_client):
        created = admin_client.post("/api/inquiries", json=_inquiry()).json()["inquiry"]
        inquiry = admin_client.put(
            f"/api/inquiries/{created['id']}", json={"status": "pending"}
        ).json()["inquiry"]
        assert inquiry["status_history"] == []

    def test_invalid_status(self, admin_client):
        created = admin_client.post("/api/inquiries", json=_inquiry()).json()["inquiry"]
        response = admin_client.put(
            f"/api/inquiries/{created['id']}", json={"status": "archived"}
        )
        assert response.status_code == 400

    def test_missing_inquiry(self, admin_client):
        response = admin_client.get("/api/inquiries/missing")
        assert response.status_code == 404
        assert response.json()["error"] == "문의를 찾을 수 없습니다."

    def test_delete(self, admin_client):
        created = admin_client.post("/api/inquiries", json=_inquiry()).json()["inquiry"]
        url = f"/api/inquiries/{created['id']}"
        admin_client.put(url, json={"status": "completed"})
        assert admin_client.delete(url).status_code == 200
        assert admin_client.get(url).status_code == 404
