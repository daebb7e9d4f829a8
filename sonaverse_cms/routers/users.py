"""Admin account management router (super admin only)."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth import accounts
from sonaverse_cms.auth.dependencies import (
    get_current_user,
    is_super_admin,
    require_super_admin,
)
from sonaverse_cms.auth.passwords import MIN_PASSWORD_LENGTH, hash_password
from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.db import AdminRole, AdminUser, get_db
from sonaverse_cms.errors import (
    MSG_DUPLICATE_EMAIL,
    MSG_DUPLICATE_USERNAME,
    MSG_INVALID_EMAIL,
    MSG_INVALID_REQUEST,
    MSG_PASSWORD_TOO_SHORT,
    MSG_PROTECTED_ACCOUNT,
    MSG_PROTECTED_ACCOUNT_CHANGE,
    MSG_USER_NOT_FOUND,
    BadRequest,
    Forbidden,
    NotFound,
    read_json_object,
)

log = logging.getLogger("sonaverse-cms.users")

router = APIRouter(prefix="/api/admin/users", tags=["users"])

MSG_ALL_FIELDS_REQUIRED = "모든 필드를 입력해주세요."

_ROLES = {r.value for r in AdminRole}


def _str_field(data: dict, *names: str) -> str:
    for name in names:
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise BadRequest(MSG_INVALID_REQUEST)
        return value.strip()
    return ""


def _role(value: Any) -> str:
    if not isinstance(value, str) or value not in _ROLES:
        raise BadRequest(MSG_INVALID_REQUEST)
    return value


def _duplicate_message(err: accounts.DuplicateAccountError) -> str:
    return MSG_DUPLICATE_EMAIL if err.field == "email" else MSG_DUPLICATE_USERNAME


async def _load(db: AsyncSession, user_id: str) -> AdminUser:
    user = await accounts.get_by_id(db, user_id)
    if user is None:
        raise NotFound(MSG_USER_NOT_FOUND)
    return user


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    _admin: TokenClaims = Depends(require_super_admin),
) -> dict:
    """List admin accounts, newest first (never includes password hashes)."""
    result = await db.execute(select(AdminUser).order_by(AdminUser.created_at.desc()))
    users = [u.to_dict() for u in result.scalars().all()]
    return {"success": True, "users": users, "total": len(users)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: TokenClaims = Depends(require_super_admin),
) -> JSONResponse:
    """Create an admin account."""
    data = await read_json_object(request)
    email = _str_field(data, "email")
    username = _str_field(data, "name", "username")
    password = data.get("password") or ""
    if not isinstance(password, str):
        raise BadRequest(MSG_INVALID_REQUEST)
    role = _role(data.get("role", AdminRole.ADMIN.value))

    if not email or not username or not password:
        raise BadRequest(MSG_ALL_FIELDS_REQUIRED)
    if not accounts.is_valid_email(email):
        raise BadRequest(MSG_INVALID_EMAIL)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(MSG_PASSWORD_TOO_SHORT)

    try:
        user = await accounts.create_account(
            db, email=email, username=username, password=password, role=role
        )
    except accounts.DuplicateAccountError as e:
        raise BadRequest(_duplicate_message(e))
    await db.commit()

    log.info("admin account created via console", extra={"actor": admin.id, "user_id": user.id})
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"success": True, "user": user.to_dict()},
    )


@router.patch("/{user_id}")
async def update_user(
    request: Request,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: TokenClaims = Depends(require_super_admin),
) -> dict:
    """Update username, role, active flag or password."""
    data = await read_json_object(request)
    user = await _load(db, user_id)
    protected = accounts.is_protected(user)

    if "role" in data:
        role = _role(data["role"])
        if protected and role != AdminRole.SUPER_ADMIN.value:
            raise BadRequest(MSG_PROTECTED_ACCOUNT_CHANGE)
        user.role = role

    if "is_active" in data:
        if not isinstance(data["is_active"], bool):
            raise BadRequest(MSG_INVALID_REQUEST)
        if protected and not data["is_active"]:
            raise BadRequest(MSG_PROTECTED_ACCOUNT_CHANGE)
        user.is_active = data["is_active"]

    username = _str_field(data, "name", "username")
    if username and username != user.username:
        try:
            await accounts.ensure_unique(db, username=username, exclude_id=user.id)
        except accounts.DuplicateAccountError as e:
            raise BadRequest(_duplicate_message(e))
        user.username = username

    if data.get("password") is not None:
        password = data["password"]
        if not isinstance(password, str):
            raise BadRequest(MSG_INVALID_REQUEST)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise BadRequest(MSG_PASSWORD_TOO_SHORT)
        user.password_hash = hash_password(password)

    await db.commit()
    log.info("admin account updated", extra={"actor": admin.id, "user_id": user.id})
    return {"success": True, "user": user.to_dict()}


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    caller: TokenClaims = Depends(get_current_user),
) -> dict:
    """Delete an admin account.

    The protected super-admin account is refused for every caller.
    """
    target = await accounts.get_by_id(db, user_id)
    if target is not None and accounts.is_protected(target):
        raise BadRequest(MSG_PROTECTED_ACCOUNT)
    if not is_super_admin(caller):
        raise Forbidden()
    if target is None:
        raise NotFound(MSG_USER_NOT_FOUND)

    await db.delete(target)
    await db.commit()
    log.info("admin account deleted", extra={"actor": caller.id, "user_id": user_id})
    return {"success": True}
