"""Route guard for the admin console pages.

Redirects unauthenticated requests for /admin pages to the login page and
keeps authenticated users off the login form. API paths are left to the
handlers, which answer 401 JSON through dependencies.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional
from urllib.parse import quote, urlsplit

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from sonaverse_cms.auth.config import (
    ADMIN_PREFIX,
    DEFAULT_LANDING_PATH,
    LOGIN_PATH,
    RETURN_URL_PARAM,
    get_auth_config,
)
from sonaverse_cms.auth.session import SessionCookie
from sonaverse_cms.auth.tokens import TokenService

log = logging.getLogger("sonaverse-cms.route-guard")


def is_admin_path(path: str) -> bool:
    """Check if a path belongs to the admin console."""
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


def is_login_path(path: str) -> bool:
    return path.rstrip("/") == LOGIN_PATH


def safe_return_url(value: Optional[str]) -> str:
    """Return value when it is a local admin URL, else the default landing page."""
    if not value or "\\" in value or value.startswith("//"):
        return DEFAULT_LANDING_PATH
    parts = urlsplit(value)
    if parts.scheme or parts.netloc or not is_admin_path(parts.path):
        return DEFAULT_LANDING_PATH
    return value


def login_redirect_url(path: str) -> str:
    """Login page URL carrying path as the return URL (encoded once)."""
    return f"{LOGIN_PATH}?{RETURN_URL_PARAM}={quote(path, safe='')}"


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Session check for every /admin page request.

    This middleware:
    1. Ignores non-admin paths
    2. Verifies the session cookie
    3. Redirects to the login page when the session is missing or invalid
    4. Redirects away from the login page when the session is valid
    5. Sets the verified claims in request.state.user for handlers
    """

    def __init__(self, app):
        super().__init__(app)
        self._config = None
        self._tokens = None
        self._cookie = None

    @property
    def config(self):
        if self._config is None:
            self._config = get_auth_config()
        return self._config

    @property
    def tokens(self) -> TokenService:
        if self._tokens is None:
            self._tokens = TokenService.from_config(self.config)
        return self._tokens

    @property
    def cookie(self) -> SessionCookie:
        if self._cookie is None:
            self._cookie = SessionCookie(self.config)
        return self._cookie

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not is_admin_path(path):
            return await call_next(request)

        tokens = getattr(request.app.state, "tokens", None) or self.tokens
        claims = tokens.verify(self.cookie.read(request))
        request.state.user = claims

        if is_login_path(path):
            if claims is not None:
                target = safe_return_url(request.query_params.get(RETURN_URL_PARAM))
                return RedirectResponse(target, status_code=302)
            return await call_next(request)

        if claims is None:
            log.info(
                "admin page requires login",
                extra={
                    "path": path,
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
            return RedirectResponse(login_redirect_url(path), status_code=302)

        return await call_next(request)
