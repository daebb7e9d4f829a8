"""Authentication configuration.

Handles token, cookie and account settings from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

_TRUE = {"1", "true", "yes", "y", "on"}

# Fixed claim binding for every session token.
TOKEN_ISSUER = "sonaverse-admin"
TOKEN_AUDIENCE = "admin-users"

ADMIN_PREFIX = "/admin"
LOGIN_PATH = "/admin/login"
DEFAULT_LANDING_PATH = "/admin"
RETURN_URL_PARAM = "returnUrl"

_MIN_PROD_SECRET_LENGTH = 32


_PROD_ENVS = frozenset({"prod", "production"})
_DEV_ENVS = frozenset({"dev", "development", "local"})
KNOWN_ENVS = _PROD_ENVS | _DEV_ENVS | {"staging", "test"}


def _flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in _TRUE


def _number(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw.lstrip("-").isdigit() else default


def _csv(name: str) -> list[str]:
    return [part.strip() for part in (os.getenv(name) or "").split(",") if part.strip()]


@dataclass(frozen=True)
class AuthConfig:
    """Authentication configuration from environment variables.

    Environment Variables:
        SV_ENV: Environment (prod/staging/dev/test)
        SV_JWT_SECRET: Secret for signing session tokens (required)
        SV_TOKEN_TTL_SECONDS: Token lifetime in seconds (default: 28800 = 8 hours)
        SV_COOKIE_NAME: Session cookie name (default: admin_token)
        SV_COOKIE_DOMAIN: Optional cookie domain
        SV_SUPER_ADMIN_EMAIL: Protected super-admin account (default: admin@sonaverse.kr)
        SV_BOOTSTRAP_ADMIN_PASSWORD: Seed the super admin when no accounts exist
        SV_CORS_ORIGINS: CSV of allowed CORS origins
        SV_ANALYTICS_IN_DEV: Record visitor logs outside production
    """

    env: str = "dev"
    jwt_secret: Optional[str] = None
    token_ttl_seconds: int = 28800

    cookie_name: str = "admin_token"
    cookie_domain: Optional[str] = None

    super_admin_email: str = "admin@sonaverse.kr"
    bootstrap_admin_password: Optional[str] = None

    cors_origins: list[str] = field(default_factory=list)
    analytics_in_dev: bool = False

    @property
    def env_lower(self) -> str:
        return (self.env or "dev").strip().lower()

    @property
    def is_prod(self) -> bool:
        return self.env_lower in _PROD_ENVS

    @property
    def is_prod_like(self) -> bool:
        return self.is_prod or self.env_lower == "staging"

    @property
    def is_dev(self) -> bool:
        return self.env_lower in _DEV_ENVS

    @property
    def is_test(self) -> bool:
        return self.env_lower == "test"

    @property
    def record_analytics(self) -> bool:
        return self.is_prod_like or self.analytics_in_dev

    def validate(self) -> list[str]:
        """Return every configuration problem; empty means startable."""
        problems: list[str] = []

        if self.env_lower not in KNOWN_ENVS:
            problems.append(
                f"Invalid SV_ENV='{self.env}'. Valid values: {', '.join(sorted(KNOWN_ENVS))}."
            )

        secret = (self.jwt_secret or "").strip()
        if not secret:
            problems.append("SV_JWT_SECRET must be set")
        elif self.is_prod_like and len(secret) < _MIN_PROD_SECRET_LENGTH:
            problems.append(
                f"SV_JWT_SECRET must be at least {_MIN_PROD_SECRET_LENGTH} characters in production"
            )

        if self.token_ttl_seconds <= 0:
            problems.append("SV_TOKEN_TTL_SECONDS must be positive")
        if "@" not in self.super_admin_email:
            problems.append("SV_SUPER_ADMIN_EMAIL must be an email address")

        if self.is_prod:
            if not self.cors_origins:
                problems.append("SV_CORS_ORIGINS must be set in production")
            elif "*" in self.cors_origins:
                problems.append("Wildcard CORS origin (*) is not allowed in production")

        return problems


@lru_cache(maxsize=1)
def get_auth_config() -> AuthConfig:
    return AuthConfig(
        env=os.getenv("SV_ENV", "dev"),
        jwt_secret=os.getenv("SV_JWT_SECRET"),
        token_ttl_seconds=_number("SV_TOKEN_TTL_SECONDS", 28800),
        cookie_name=os.getenv("SV_COOKIE_NAME", "admin_token"),
        cookie_domain=(os.getenv("SV_COOKIE_DOMAIN") or "").strip() or None,
        super_admin_email=os.getenv("SV_SUPER_ADMIN_EMAIL", "admin@sonaverse.kr")
        .strip()
        .lower(),
        bootstrap_admin_password=os.getenv("SV_BOOTSTRAP_ADMIN_PASSWORD") or None,
        cors_origins=_csv("SV_CORS_ORIGINS"),
        analytics_in_dev=_flag("SV_ANALYTICS_IN_DEV"),
    )


def reset_auth_config() -> None:
    get_auth_config.cache_clear()
