"""Credential store operations for admin accounts."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth.config import AuthConfig, get_auth_config
from sonaverse_cms.auth.passwords import hash_password, verify_password
from sonaverse_cms.db.models import AdminRole, AdminUser, utcnow

log = logging.getLogger("sonaverse-cms.accounts")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class DuplicateAccountError(ValueError):
    """Raised when an email or username is already taken."""

    def __init__(self, field: str):
        super().__init__(f"duplicate {field}")
        self.field = field


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def is_protected(user: AdminUser, config: Optional[AuthConfig] = None) -> bool:
    """True for the configured super-admin account."""
    config = config or get_auth_config()
    return normalize_email(user.email) == config.super_admin_email


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("sonaverse-timing-equalizer")


async def get_by_email(db: AsyncSession, email: str) -> Optional[AdminUser]:
    result = await db.execute(
        select(AdminUser).where(AdminUser.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_by_id(db: AsyncSession, user_id: str) -> Optional[AdminUser]:
    return await db.get(AdminUser, user_id)


async def authenticate(
    db: AsyncSession, email: str, password: str
) -> Optional[AdminUser]:
    """Return the account when the credentials are valid and it is active.

    Unknown email, wrong password and inactive accounts all return None.
    """
    user = await get_by_email(db, email)
    if user is None:
        # Spend comparable time on unknown accounts.
        verify_password(password, _dummy_hash())
        log.info("login rejected", extra={"reason": "unknown_account"})
        return None

    if not verify_password(password, user.password_hash):
        log.info("login rejected", extra={"reason": "bad_password", "user_id": user.id})
        return None

    if not user.is_active:
        log.info("login rejected", extra={"reason": "inactive", "user_id": user.id})
        return None

    return user


async def touch_last_login(
    db: AsyncSession, user: AdminUser, now: Optional[datetime] = None
) -> None:
    user.last_login_at = now or utcnow()
    await db.flush()


async def ensure_unique(
    db: AsyncSession,
    email: Optional[str] = None,
    username: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> None:
    """Raise DuplicateAccountError when email or username is already used."""
    conditions = []
    if email:
        conditions.append(AdminUser.email == normalize_email(email))
    if username:
        conditions.append(AdminUser.username == username.strip())
    if not conditions:
        return

    stmt = select(AdminUser).where(or_(*conditions))
    if exclude_id:
        stmt = stmt.where(AdminUser.id != exclude_id)
    for existing in (await db.execute(stmt)).scalars():
        if email and existing.email == normalize_email(email):
            raise DuplicateAccountError("email")
        raise DuplicateAccountError("username")


async def create_account(
    db: AsyncSession,
    email: str,
    username: str,
    password: str,
    role: str = AdminRole.ADMIN.value,
    is_active: bool = True,
) -> AdminUser:
    await ensure_unique(db, email=email, username=username)
    user = AdminUser(
        email=normalize_email(email),
        username=username.strip(),
        password_hash=hash_password(password),
        role=AdminRole(role).value,
        is_active=is_active,
    )
    db.add(user)
    await db.flush()
    log.info("admin account created", extra={"user_id": user.id, "role": user.role})
    return user


async def count_accounts(db: AsyncSession) -> int:
    return int((await db.execute(select(func.count(AdminUser.id)))).scalar_one())


async def bootstrap_super_admin(
    db: AsyncSession, config: Optional[AuthConfig] = None
) -> Optional[AdminUser]:
    """Seed the super admin when no accounts exist and a password is configured."""
    config = config or get_auth_config()
    if not config.bootstrap_admin_password:
        return None
    if await count_accounts(db) > 0:
        return None

    username = config.super_admin_email.split("@", 1)[0] or "admin"
    user = await create_account(
        db,
        email=config.super_admin_email,
        username=username,
        password=config.bootstrap_admin_password,
        role=AdminRole.SUPER_ADMIN.value,
    )
    log.warning("bootstrap super admin seeded", extra={"user_id": user.id})
    return user
