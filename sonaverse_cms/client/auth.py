"""Admin console auth bootstrap, login and logout.

Mirrors what the admin shell does in the browser: scrub stale offline state,
confirm the session with the server, and on logout tear down everything
client-side before returning to the login page.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Optional

import httpx

from sonaverse_cms.auth.config import LOGIN_PATH
from sonaverse_cms.client.browser import (
    LEGACY_TOKEN_KEYS,
    SESSION_FLAG_KEY,
    AuthState,
    BrowserContext,
)
from sonaverse_cms.errors import MSG_SERVER_ERROR
from sonaverse_cms.middleware.route_guard import (
    is_login_path,
    login_redirect_url,
    safe_return_url,
)

log = logging.getLogger("sonaverse-cms.client")

ME_PATH = "/api/auth/me"
LOGIN_API_PATH = "/api/auth/login"
LOGOUT_API_PATH = "/api/auth/logout"


class LoginFailed(Exception):
    """Raised when the server rejects a login attempt."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class AdminAuthClient:
    """Client-side auth flow for one admin page load."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        browser: Optional[BrowserContext] = None,
        clock: Callable[[], float] = time.time,
        cookie_name: str = "admin_token",
    ):
        self.http = http
        self.browser = browser or BrowserContext()
        self.state = AuthState()
        self._clock = clock
        self.cookie_name = cookie_name

    async def _step(self, name: str, action: Callable[[], Awaitable[Any]]) -> bool:
        """Run one best-effort step; failures are logged, never raised."""
        try:
            await action()
            return True
        except Exception:
            log.warning("client auth step failed", extra={"step": name}, exc_info=True)
            return False

    async def _scrub_offline_state(self) -> None:
        await self._step("service_workers", self.browser.unregister_service_workers)
        await self._step("caches", self.browser.clear_caches)

        async def drop_legacy_keys() -> None:
            for key in LEGACY_TOKEN_KEYS:
                self.browser.local_storage.pop(key, None)

        await self._step("legacy_keys", drop_legacy_keys)

    def _to_login(self, pathname: str) -> None:
        if not is_login_path(pathname):
            self.browser.navigate(login_redirect_url(pathname))

    async def bootstrap(self, pathname: str) -> AuthState:
        """Confirm the session for the page at pathname.

        Runs once per client; later calls return the cached state.
        """
        if self.state.checked:
            return self.state
        self.state.checked = True

        await self._scrub_offline_state()

        if not self.browser.session_storage.get(SESSION_FLAG_KEY):
            self.state.user = None
            self._to_login(pathname)
            return self.state

        try:
            response = await self.http.get(ME_PATH, headers={"Cache-Control": "no-cache"})
            data = _json(response)
            ok = response.status_code == 200 and data.get("success") is True
            user = data.get("user") if ok else None
        except httpx.HTTPError:
            log.warning("auth check failed", exc_info=True)
            user = None

        if not isinstance(user, dict):
            self.browser.session_storage.pop(SESSION_FLAG_KEY, None)
            self.state.user = None
            self._to_login(pathname)
            return self.state

        self.state.user = user
        return self.state

    async def login(
        self, email: str, password: str, return_url: Optional[str] = None
    ) -> str:
        """Log in and return the admin URL to land on.

        Raises:
            LoginFailed: With the server's message when login is rejected
        """
        try:
            response = await self.http.post(
                LOGIN_API_PATH, json={"email": email, "password": password}
            )
        except httpx.HTTPError:
            log.warning("login request failed", exc_info=True)
            raise LoginFailed(MSG_SERVER_ERROR)

        data = _json(response)
        if response.status_code != 200 or data.get("success") is not True:
            raise LoginFailed(
                str(data.get("error") or MSG_SERVER_ERROR), response.status_code
            )

        self.browser.session_storage[SESSION_FLAG_KEY] = "true"
        self.state.user = data.get("user")
        self.state.checked = True
        return safe_return_url(return_url)

    async def logout(self) -> str:
        """Log out everywhere on the client and go to the login page.

        Each step is best-effort; navigation always happens.
        """

        async def server_logout() -> None:
            response = await self.http.post(
                LOGOUT_API_PATH, headers={"Cache-Control": "no-cache"}
            )
            response.raise_for_status()

        async def clear_client_state() -> None:
            self.browser.session_storage.pop(SESSION_FLAG_KEY, None)
            for key in LEGACY_TOKEN_KEYS:
                self.browser.local_storage.pop(key, None)
            self.state.user = None
            self.http.cookies.delete(self.cookie_name)

        await self._step("server_logout", server_logout)
        await self._step("client_state", clear_client_state)
        await self._step("service_workers", self.browser.unregister_service_workers)
        await self._step("caches", self.browser.clear_caches)

        target = f"{LOGIN_PATH}?_t={int(self._clock() * 1000)}"
        self.browser.navigate(target)
        return target
