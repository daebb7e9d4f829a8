"""Authentication router.

Handles email/password login, logout and the current-user lookup.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth import accounts
from sonaverse_cms.auth.config import LOGIN_PATH
from sonaverse_cms.auth.dependencies import (
    get_optional_user,
    get_session_cookie,
    get_token_service,
)
from sonaverse_cms.auth.passwords import MIN_PASSWORD_LENGTH
from sonaverse_cms.auth.session import SessionCookie
from sonaverse_cms.auth.tokens import TokenClaims, TokenService
from sonaverse_cms.db import get_db
from sonaverse_cms.errors import (
    MSG_CREDENTIALS_REQUIRED,
    MSG_INVALID_CREDENTIALS,
    MSG_INVALID_EMAIL,
    MSG_INVALID_REQUEST,
    MSG_LOGGED_OUT,
    MSG_PASSWORD_TOO_SHORT,
    MSG_UNAUTHENTICATED,
    BadRequest,
    Unauthorized,
    read_json_object,
)

log = logging.getLogger("sonaverse-cms.auth-router")

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _credentials(data: dict) -> tuple[str, str]:
    """Validate login input before the credential store is touched."""
    email = data.get("email")
    password = data.get("password")
    if email is not None and not isinstance(email, str):
        raise BadRequest(MSG_INVALID_REQUEST)
    if password is not None and not isinstance(password, str):
        raise BadRequest(MSG_INVALID_REQUEST)

    email = (email or "").strip()
    password = password or ""
    if not email or not password:
        raise BadRequest(MSG_CREDENTIALS_REQUIRED)
    if not accounts.is_valid_email(email):
        raise BadRequest(MSG_INVALID_EMAIL)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(MSG_PASSWORD_TOO_SHORT)
    return email, password


@router.post("/login")
async def login(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    cookie: SessionCookie = Depends(get_session_cookie),
) -> JSONResponse:
    """Authenticate with email and password and set the session cookie."""
    data = await read_json_object(request)
    email, password = _credentials(data)

    user = await accounts.authenticate(db, email, password)
    if user is None:
        raise Unauthorized(MSG_INVALID_CREDENTIALS)

    await accounts.touch_last_login(db, user)
    await db.commit()
    token = tokens.issue(user.claims())

    log.info(
        "login succeeded",
        extra={
            "user_id": user.id,
            "role": user.role,
            "request_id": getattr(request.state, "request_id", None),
        },
    )

    response = JSONResponse({"success": True, "user": user.claims()})
    cookie.set(response, token)
    return response


@router.post("/logout")
async def logout(
    cookie: SessionCookie = Depends(get_session_cookie),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> JSONResponse:
    """Clear the session cookie."""
    if user is not None:
        log.info("logout", extra={"user_id": user.id})
    response = JSONResponse({"success": True, "message": MSG_LOGGED_OUT})
    cookie.clear(response)
    return response


@router.get("/logout")
async def logout_redirect(
    cookie: SessionCookie = Depends(get_session_cookie),
) -> RedirectResponse:
    """Clear the session cookie and go to the login page."""
    response = RedirectResponse(url=LOGIN_PATH, status_code=302)
    cookie.clear(response)
    return response


@router.get("/me")
async def me(
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    """Current user from the verified session claims."""
    if user is None:
        raise Unauthorized(MSG_UNAUTHENTICATED)
    return {"success": True, "user": user.safe_user()}
