"""Password hashing for admin accounts (argon2id)."""

from __future__ import annotations

import logging
import os
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

log = logging.getLogger("sonaverse-cms.passwords")

MIN_PASSWORD_LENGTH = 8


def _hasher() -> PasswordHasher:
    """argon2id hasher tuned by SV_PASSWORD_HASH_* (tests lower the cost)."""
    return PasswordHasher(
        time_cost=int(os.getenv("SV_PASSWORD_HASH_TIME_COST", "2")),
        memory_cost=int(os.getenv("SV_PASSWORD_HASH_MEMORY_KIB", "65536")),
        parallelism=int(os.getenv("SV_PASSWORD_HASH_PARALLELISM", "1")),
    )


def hash_password(password: str) -> str:
    return _hasher().hash(password)


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    """Check a password against a stored argon2 hash. Never raises."""
    if not stored_hash:
        return False
    try:
        return _hasher().verify(stored_hash, password)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError):
        log.warning("Stored password hash could not be verified")
        return False
    except Exception:
        log.exception("argon2 verify failed")
        return False


def needs_rehash(stored_hash: str) -> bool:
    try:
        return _hasher().check_needs_rehash(stored_hash)
    except InvalidHashError:
        return True
