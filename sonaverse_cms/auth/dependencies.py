"""FastAPI dependencies for authentication."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request

from sonaverse_cms.auth.config import AuthConfig, get_auth_config
from sonaverse_cms.auth.session import SessionCookie, claims_from_request
from sonaverse_cms.auth.tokens import TokenClaims, TokenService
from sonaverse_cms.db.models import AdminRole
from sonaverse_cms.errors import Forbidden, Unauthorized

log = logging.getLogger("sonaverse-cms.auth")


def get_token_service(request: Request) -> TokenService:
    """Token service built at startup, or from config when absent."""
    tokens = getattr(request.app.state, "tokens", None)
    if tokens is None:
        tokens = TokenService.from_config(get_auth_config())
        request.app.state.tokens = tokens
    return tokens


def get_session_cookie() -> SessionCookie:
    return SessionCookie(get_auth_config())


def is_super_admin(user: TokenClaims, config: Optional[AuthConfig] = None) -> bool:
    """super_admin role, or the configured protected account."""
    config = config or get_auth_config()
    return (
        user.role == AdminRole.SUPER_ADMIN.value
        or user.email.strip().lower() == config.super_admin_email
    )


async def get_optional_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    cookie: SessionCookie = Depends(get_session_cookie),
) -> Optional[TokenClaims]:
    """Verified session claims, or None (does not require auth)."""
    return claims_from_request(request, tokens, cookie)


async def get_current_user(
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> TokenClaims:
    """Current authenticated admin.

    Raises:
        Unauthorized: If there is no valid session cookie
    """
    if user is None:
        raise Unauthorized()
    return user


async def require_super_admin(
    user: TokenClaims = Depends(get_current_user),
) -> TokenClaims:
    """Require super admin rights."""
    if not is_super_admin(user):
        log.warning(
            "super admin access denied",
            extra={"user_id": user.id, "role": user.role},
        )
        raise Forbidden()
    return user
