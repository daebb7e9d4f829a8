"""Test fixtures for the Sonaverse CMS."""

import sys

import pytest
from fastapi.testclient import TestClient

SUPER_ADMIN_EMAIL = "admin@sonaverse.kr"
SUPER_ADMIN_PASSWORD = "bootstrap-pass-123"
TEST_JWT_SECRET = "test-jwt-secret-for-sonaverse-cms-suite"


@pytest.fixture(autouse=True)
def setup_test_env(tmp_path, monkeypatch):
    """Set up test environment with SQLite and a seeded super admin."""
    db_path = tmp_path / "test.db"

    monkeypatch.setenv("SV_SQLITE_PATH", str(db_path))
    monkeypatch.delenv("SV_DB_URL", raising=False)

    monkeypatch.setenv("SV_ENV", "test")
    monkeypatch.setenv("SV_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("SV_SUPER_ADMIN_EMAIL", SUPER_ADMIN_EMAIL)
    monkeypatch.setenv("SV_BOOTSTRAP_ADMIN_PASSWORD", SUPER_ADMIN_PASSWORD)

    # Keep argon2 cheap in tests
    monkeypatch.setenv("SV_PASSWORD_HASH_TIME_COST", "1")
    monkeypatch.setenv("SV_PASSWORD_HASH_MEMORY_KIB", "8192")
    monkeypatch.setenv("SV_PASSWORD_HASH_PARALLELISM", "1")

    for key in (
        "SV_TOKEN_TTL_SECONDS",
        "SV_COOKIE_NAME",
        "SV_COOKIE_DOMAIN",
        "SV_CORS_ORIGINS",
        "SV_ANALYTICS_IN_DEV",
    ):
        monkeypatch.delenv(key, raising=False)

    # Clear module cache to pick up new env vars
    mods_to_remove = [k for k in sys.modules if k.startswith("sonaverse_cms")]
    for mod in mods_to_remove:
        del sys.modules[mod]

    yield


@pytest.fixture
def app(setup_test_env):
    """Create FastAPI app with the test environment."""
    from sonaverse_cms.main import build_app

    return build_app()


@pytest.fixture
def client(app):
    """Anonymous test client; the lifespan seeds the super admin."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login():
    """Return a function that logs a client in and returns the response."""

    def _login(client, email=SUPER_ADMIN_EMAIL, password=SUPER_ADMIN_PASSWORD):
        return client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )

    return _login


@pytest.fixture
def admin_client(client, login):
    """Test client holding the super admin's session cookie."""
    response = login(client)
    assert response.status_code == 200
    return client


@pytest.fixture
def session_cookie(app):
    """Return a function that signs a session cookie for arbitrary claims."""

    def _factory(
        role="editor",
        email="editor@sonaverse.kr",
        username="editor",
        user_id="editor-id",
    ):
        from sonaverse_cms.auth.config import get_auth_config

        token = app.state.tokens.issue(
            {"id": user_id, "email": email, "username": username, "role": role}
        )
        return get_auth_config().cookie_name, token

    return _factory


@pytest.fixture
def editor_client(app, client, session_cookie):
    """Second client (sharing the app's database) with an editor session."""
    name, token = session_cookie()
    c = TestClient(app)
    c.cookies.set(name, token)
    return c
