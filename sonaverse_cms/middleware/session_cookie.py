"""Admin session cookie hardening.

Whatever sets the admin session cookie, the outgoing Set-Cookie header always
carries HttpOnly and SameSite=Strict, plus Secure in production.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from sonaverse_cms.auth.config import get_auth_config


def harden_cookie(header: str, secure: bool) -> str:
    """Add any missing session attributes to one Set-Cookie header value."""
    attrs = {part.strip().split("=", 1)[0].lower() for part in header.split(";")[1:]}
    extra = []
    if "httponly" not in attrs:
        extra.append("HttpOnly")
    if "samesite" not in attrs:
        extra.append("SameSite=strict")
    if secure and "secure" not in attrs:
        extra.append("Secure")
    if not extra:
        return header
    return "; ".join([header, *extra])


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Rewrite Set-Cookie headers for the admin session cookie."""

    def __init__(self, app, cookie_name: str = "admin_token"):
        super().__init__(app)
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        cookies = response.headers.getlist("set-cookie")
        prefix = f"{self.cookie_name}="
        if not any(c.startswith(prefix) for c in cookies):
            return response

        secure = get_auth_config().is_prod
        hardened = [
            harden_cookie(c, secure) if c.startswith(prefix) else c for c in cookies
        ]
        if hardened == cookies:
            return response

        del response.headers["set-cookie"]
        for cookie in hardened:
            response.headers.append("set-cookie", cookie)
        return response
