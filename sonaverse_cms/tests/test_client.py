"""Tests for the admin console auth client (bootstrap, login, logout)."""

import json

import httpx
import pytest

from sonaverse_cms.client import (
    LEGACY_TOKEN_KEYS,
    SESSION_FLAG_KEY,
    AdminAuthClient,
    BrowserContext,
    LoginFailed,
)

USER = {
    "id": "u1",
    "email": "admin@sonaverse.kr",
    "username": "admin",
    "role": "super_admin",
}


class FakeServer:
    """Records requests and answers like the auth API."""

    def __init__(self, me_status=200, logout_status=200, login_status=200):
        self.me_status = me_status
        self.logout_status = logout_status
        self.login_status = login_status
        self.calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        if request.url.path == "/api/auth/me":
            if self.me_status == 200:
                return httpx.Response(200, json={"success": True, "user": USER})
            return httpx.Response(
                self.me_status, json={"success": False, "error": "인증되지 않은 사용자입니다."}
            )
        if request.url.path == "/api/auth/login":
            body = json.loads(request.content)
            if self.login_status == 200:
                return httpx.Response(
                    200,
                    json={"success": True, "user": {**USER, "email": body["email"]}},
                    headers={"set-cookie": "admin_token=a.b.c; HttpOnly; Path=/"},
                )
            return httpx.Response(
                self.login_status,
                json={"success": False, "error": "이메일 또는 비밀번호가 올바르지 않습니다."},
            )
        if request.url.path == "/api/auth/logout":
            if self.logout_status >= 500:
                return httpx.Response(self.logout_status, json={"success": False})
            return httpx.Response(
                200,
                json={"success": True},
                headers={"set-cookie": "admin_token=; Max-Age=0; Path=/"},
            )
        return httpx.Response(404)


def _client(server, browser=None, clock=None):
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(server.handler), base_url="http://cms.test"
    )
    kwargs = {"browser": browser or BrowserContext()}
    if clock is not None:
        kwargs["clock"] = clock
    return AdminAuthClient(http, **kwargs)


def _dirty_browser(**kwargs):
    return BrowserContext(
        local_storage={key: "stale" for key in LEGACY_TOKEN_KEYS},
        service_workers=["/sw.js"],
        cache_names={"next-data", "static"},
        **kwargs,
    )


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_without_session_flag_redirects_to_login(self):
        server = FakeServer()
        browser = _dirty_browser()
        client = _client(server, browser)

        state = await client.bootstrap("/admin/press")

        assert state.checked is True
        assert state.authenticated is False
        assert browser.location == "/admin/login?returnUrl=%2Fadmin%2Fpress"
        assert browser.service_workers == []
        assert browser.cache_names == set()
        assert browser.local_storage == {}
        # No server round trip without the flag
        assert server.calls == []

    @pytest.mark.asyncio
    async def test_login_page_does_not_redirect(self):
        browser = BrowserContext(location="/admin/login")
        client = _client(FakeServer(), browser)
        await client.bootstrap("/admin/login")
        assert browser.history == []

    @pytest.mark.asyncio
    async def test_confirmed_session(self):
        server = FakeServer()
        browser = BrowserContext(session_storage={SESSION_FLAG_KEY: "true"})
        client = _client(server, browser)

        state = await client.bootstrap("/admin")

        assert state.authenticated is True
        assert state.user == USER
        assert browser.history == []
        assert server.calls == [("GET", "/api/auth/me")]

    @pytest.mark.asyncio
    async def test_rejected_session_drops_flag(self):
        browser = BrowserContext(session_storage={SESSION_FLAG_KEY: "true"})
        client = _client(FakeServer(me_status=401), browser)

        state = await client.bootstrap("/admin/inquiries")

        assert state.authenticated is False
        assert SESSION_FLAG_KEY not in browser.session_storage
        assert browser.location == "/admin/login?returnUrl=%2Fadmin%2Finquiries"

    @pytest.mark.asyncio
    async def test_runs_once(self):
        server = FakeServer()
        browser = BrowserContext(session_storage={SESSION_FLAG_KEY: "true"})
        client = _client(server, browser)

        first = await client.bootstrap("/admin")
        second = await client.bootstrap("/admin")

        assert first is second
        assert server.calls == [("GET", "/api/auth/me")]

    @pytest.mark.asyncio
    async def test_scrub_failure_does_not_block(self):
        class BrokenBrowser(BrowserContext):
            async def unregister_service_workers(self):
                raise RuntimeError("service workers unavailable")

        browser = BrokenBrowser(session_storage={SESSION_FLAG_KEY: "true"})
        client = _client(FakeServer(), browser)
        state = await client.bootstrap("/admin")
        assert state.authenticated is True


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_sets_flag_and_returns_safe_url(self):
        browser = BrowserContext()
        client = _client(FakeServer(), browser)

        target = await client.login("admin@sonaverse.kr", "secret-pass", "/admin/press")

        assert target == "/admin/press"
        assert browser.session_storage[SESSION_FLAG_KEY] == "true"
        assert client.state.authenticated is True
        assert client.http.cookies.get("admin_token") == "a.b.c"

    @pytest.mark.asyncio
    async def test_login_ignores_external_return_url(self):
        client = _client(FakeServer())
        target = await client.login(
            "admin@sonaverse.kr", "secret-pass", "https://evil.example/admin"
        )
        assert target == "/admin"

    @pytest.mark.asyncio
    async def test_login_failure_raises_server_message(self):
        browser = BrowserContext()
        client = _client(FakeServer(login_status=401), browser)

        with pytest.raises(LoginFailed) as exc_info:
            await client.login("admin@sonaverse.kr", "wrong-pass")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "이메일 또는 비밀번호가 올바르지 않습니다."
        assert SESSION_FLAG_KEY not in browser.session_storage


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_clears_everything(self):
        server = FakeServer()
        browser = _dirty_browser(session_storage={SESSION_FLAG_KEY: "true"})
        client = _client(server, browser, clock=lambda: 1_700_000_000.5)
        client.http.cookies.set("admin_token", "a.b.c")
        client.state.user = dict(USER)

        target = await client.logout()

        assert target == "/admin/login?_t=1700000000500"
        assert browser.location == target
        assert ("POST", "/api/auth/logout") in server.calls
        assert browser.session_storage == {}
        assert browser.local_storage == {}
        assert browser.service_workers == []
        assert browser.cache_names == set()
        assert client.state.authenticated is False
        assert client.http.cookies.get("admin_token") is None

    @pytest.mark.asyncio
    async def test_logout_survives_server_failure(self):
        browser = BrowserContext(session_storage={SESSION_FLAG_KEY: "true"})
        client = _client(FakeServer(logout_status=500), browser)

        target = await client.logout()

        assert target.startswith("/admin/login?_t=")
        assert browser.session_storage == {}

    @pytest.mark.asyncio
    async def test_logout_survives_network_error(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        browser = BrowserContext(session_storage={SESSION_FLAG_KEY: "true"})
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://cms.test"
        )
        client = AdminAuthClient(http, browser=browser)

        target = await client.logout()

        assert browser.location == target
        assert SESSION_FLAG_KEY not in browser.session_storage
