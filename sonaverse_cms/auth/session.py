"""Session cookie transport.

The signed session token travels in an httpOnly cookie that lives for the
browser session (no Max-Age). The token itself carries the 8 hour expiry.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import Request, Response

from sonaverse_cms.auth.config import AuthConfig, get_auth_config
from sonaverse_cms.auth.tokens import TokenClaims, TokenService

log = logging.getLogger("sonaverse-cms.session")

_JWT_SHAPE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*$")


class SessionCookie:
    """Reads, sets and clears the admin session cookie."""

    def __init__(self, config: Optional[AuthConfig] = None):
        self.config = config or get_auth_config()

    @property
    def name(self) -> str:
        return self.config.cookie_name

    def set(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.name,
            value=token,
            httponly=True,
            secure=self.config.is_prod,
            samesite="strict",
            path="/",
            domain=self.config.cookie_domain,
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(
            key=self.name,
            path="/",
            domain=self.config.cookie_domain,
            httponly=True,
            secure=self.config.is_prod,
            samesite="strict",
        )

    def read(self, request: Request) -> Optional[str]:
        """Return the cookie value when it looks like a JWT, else None."""
        value = request.cookies.get(self.name)
        if not value:
            return None
        value = value.strip()
        if not _JWT_SHAPE.match(value):
            log.debug("Ignoring malformed session cookie")
            return None
        return value


def claims_from_request(
    request: Request,
    tokens: TokenService,
    cookie: Optional[SessionCookie] = None,
) -> Optional[TokenClaims]:
    """Verify the session cookie on a request.

    Claims already placed on request.state by the route guard are reused.
    """
    cached = getattr(request.state, "user", None)
    if isinstance(cached, TokenClaims):
        return cached
    cookie = cookie or SessionCookie()
    claims = tokens.verify(cookie.read(request))
    if claims is not None:
        request.state.user = claims
    return claims
