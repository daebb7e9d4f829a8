"""Tests for app wiring: health, version, request IDs, errors and config."""

import pytest
from fastapi.testclient import TestClient


def test_health_returns_ok(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "sonaverse-cms"
    assert "timestamp" in data


def test_health_propagates_request_id(client):
    custom_id = "test-request-123"
    response = client.get("/health", headers={"X-Request-Id": custom_id})
    assert response.headers["X-Request-Id"] == custom_id
    assert response.json()["request_id"] == custom_id


def test_unsafe_request_id_replaced(client):
    response = client.get("/health", headers={"X-Request-Id": "bad id with spaces"})
    assert response.headers["X-Request-Id"] != "bad id with spaces"
    assert response.json()["request_id"] == response.headers["X-Request-Id"]


def test_version_endpoint(client):
    data = client.get("/version").json()
    assert data["service"] == "sonaverse-cms"
    assert data["version"] == "1.0.0"
    assert data["api_version"] == "v1"


def test_unknown_api_route_uses_error_shape(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_unhandled_exception_becomes_json_500(app):
    async def boom():
        raise RuntimeError("database exploded")

    app.add_api_route("/api/boom", boom)
    with TestClient(app, raise_server_exceptions=False) as c:
        response = c.get("/api/boom", headers={"X-Request-Id": "boom-1"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "서버 오류가 발생했습니다."}
    assert "database exploded" not in response.text
    assert response.headers["X-Request-Id"] == "boom-1"


def test_missing_secret_fails_startup(monkeypatch):
    monkeypatch.delenv("SV_JWT_SECRET")
    from sonaverse_cms.main import build_app

    with pytest.raises(RuntimeError, match="SV_JWT_SECRET"):
        build_app()


def test_production_requires_long_secret_and_origins(monkeypatch):
    from sonaverse_cms.auth.config import get_auth_config

    monkeypatch.setenv("SV_ENV", "prod")
    monkeypatch.setenv("SV_JWT_SECRET", "short")
    errors = get_auth_config().validate()
    assert any("at least 32" in e for e in errors)
    assert any("SV_CORS_ORIGINS" in e for e in errors)


def test_production_cookie_is_secure(monkeypatch):
    from starlette.responses import Response

    from sonaverse_cms.auth.config import AuthConfig
    from sonaverse_cms.auth.session import SessionCookie

    response = Response()
    SessionCookie(AuthConfig(env="prod", jwt_secret="x" * 40)).set(response, "a.b.c")
    header = response.headers["set-cookie"]
    attrs = [part.strip().lower() for part in header.split(";")[1:]]
    assert "secure" in attrs
    assert "httponly" in attrs


def test_no_bootstrap_password_means_no_seeded_account(monkeypatch):
    monkeypatch.delenv("SV_BOOTSTRAP_ADMIN_PASSWORD")
    from sonaverse_cms.main import build_app

    with TestClient(build_app()) as c:
        response = c.post(
            "/api/auth/login",
            json={"email": "admin@sonaverse.kr", "password": "bootstrap-pass-123"},
        )
    assert response.status_code == 401


class TestCookieHardening:
    def test_adds_missing_attributes(self):
        from sonaverse_cms.middleware.session_cookie import harden_cookie

        hardened = harden_cookie("admin_token=a.b.c; Path=/", secure=True)
        attrs = [part.strip().lower() for part in hardened.split(";")[1:]]
        assert {"httponly", "samesite=strict", "secure", "path=/"} <= set(attrs)

    def test_keeps_existing_attributes(self):
        from sonaverse_cms.middleware.session_cookie import harden_cookie

        header = "admin_token=a.b.c; HttpOnly; Path=/; SameSite=strict"
        assert harden_cookie(header, secure=False) == header


def test_access_log_levels(app, caplog):
    async def boom():
        raise RuntimeError("kaboom")

    app.add_api_route("/api/boom", boom)
    with caplog.at_level("DEBUG", logger="sonaverse-cms"):
        with TestClient(app, raise_server_exceptions=False) as c:
            c.get("/health")
            c.get("/api/boom")

    access = [r for r in caplog.records if r.name == "sonaverse-cms.access"]
    by_path = {r.path: r.levelname for r in access}
    assert by_path["/health"] == "DEBUG"
    assert "/api/boom" not in by_path
    assert any(r.name == "sonaverse-cms.error-shield" for r in caplog.records)
