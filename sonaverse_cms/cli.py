"""Create or reset an admin account from the command line.

Usage:
    sonaverse-create-admin --email admin@sonaverse.kr --username admin
        [--role super_admin|admin|editor] [--reset-password]

The password is read from SV_ADMIN_PASSWORD or prompted for.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import os
import sys

from sonaverse_cms.auth import accounts
from sonaverse_cms.auth.passwords import MIN_PASSWORD_LENGTH, hash_password
from sonaverse_cms.db import AdminRole, close_db, init_db, session_scope

log = logging.getLogger("sonaverse-cms.cli")


def _read_password() -> str:
    password = os.getenv("SV_ADMIN_PASSWORD")
    if password:
        return password
    first = getpass.getpass("Password: ")
    second = getpass.getpass("Repeat password: ")
    if first != second:
        raise ValueError("passwords do not match")
    return first


async def _run(email: str, username: str, role: str, password: str, reset: bool) -> str:
    await init_db()
    try:
        async with session_scope() as db:
            existing = await accounts.get_by_email(db, email)
            if existing is None:
                user = await accounts.create_account(
                    db, email=email, username=username, password=password, role=role
                )
                return f"created {user.role} account {user.email} ({user.id})"
            if not reset:
                raise ValueError(f"account already exists: {email}")
            existing.password_hash = hash_password(password)
            existing.is_active = True
            return f"password reset for {existing.email}"
    finally:
        await close_db()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or reset a Sonaverse admin account")
    parser.add_argument("--email", required=True, help="Account email")
    parser.add_argument("--username", help="Display name (defaults to the email local part)")
    parser.add_argument(
        "--role",
        default=AdminRole.ADMIN.value,
        choices=[r.value for r in AdminRole],
        help="Account role",
    )
    parser.add_argument(
        "--reset-password",
        action="store_true",
        help="Reset the password (and reactivate) when the account exists",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")

    email = accounts.normalize_email(args.email)
    if not accounts.is_valid_email(email):
        print(f"invalid email: {args.email}", file=sys.stderr)
        return 2
    username = (args.username or email.split("@", 1)[0]).strip()

    try:
        password = _read_password()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"password must be at least {MIN_PASSWORD_LENGTH} characters", file=sys.stderr)
        return 2

    try:
        message = asyncio.run(
            _run(email, username, args.role, password, args.reset_password)
        )
    except accounts.DuplicateAccountError as e:
        print(f"duplicate {e.field}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
