"""Session token service.

Issues and verifies the signed, time-limited tokens carried by the admin
session cookie. Tokens are HS256 JWTs bound to a fixed issuer and audience.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import jwt

from sonaverse_cms.auth.config import (
    TOKEN_AUDIENCE,
    TOKEN_ISSUER,
    AuthConfig,
    get_auth_config,
)

log = logging.getLogger("sonaverse-cms.tokens")

_JWT_ALG = "HS256"
_REQUIRED_CLAIMS = ("id", "email", "username", "role")


class TokenConfigError(RuntimeError):
    """Raised when the token service cannot sign tokens safely."""


@dataclass(frozen=True)
class TokenClaims:
    """Verified claim set of a session token."""

    id: str
    email: str
    username: str
    role: str
    iat: int
    exp: int

    def safe_user(self) -> dict[str, str]:
        """Client-safe projection of the authenticated user."""
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
        }


class TokenService:
    """Signs and verifies session tokens."""

    def __init__(
        self,
        secret: Optional[str],
        ttl_seconds: int = 28800,
        clock: Callable[[], float] = time.time,
    ):
        if not secret or not secret.strip():
            raise TokenConfigError("SV_JWT_SECRET is not configured")
        self._secret = secret
        self.ttl_seconds = max(1, int(ttl_seconds))
        self._clock = clock

    @classmethod
    def from_config(cls, config: Optional[AuthConfig] = None) -> TokenService:
        config = config or get_auth_config()
        return cls(config.jwt_secret, ttl_seconds=config.token_ttl_seconds)

    def issue(self, claims: Mapping[str, Any]) -> str:
        """Sign a token for the given user claims.

        Args:
            claims: Mapping with id, email, username and role

        Returns:
            Encoded JWT string
        """
        missing = [name for name in _REQUIRED_CLAIMS if not claims.get(name)]
        if missing:
            raise ValueError(f"Missing token claims: {', '.join(missing)}")

        now = int(self._clock())
        payload: dict[str, Any] = {
            "id": str(claims["id"]),
            "email": str(claims["email"]),
            "username": str(claims["username"]),
            "role": str(claims["role"]),
            "iat": now,
            "exp": now + self.ttl_seconds,
            "iss": TOKEN_ISSUER,
            "aud": TOKEN_AUDIENCE,
        }
        return jwt.encode(payload, self._secret, algorithm=_JWT_ALG)

    def verify(self, token: Optional[str]) -> Optional[TokenClaims]:
        """Verify a token.

        Returns:
            TokenClaims if signature, issuer, audience and expiry all check
            out, None otherwise. Never raises.
        """
        if not token:
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_JWT_ALG],
                audience=TOKEN_AUDIENCE,
                issuer=TOKEN_ISSUER,
                # Expiry is checked below against the injected clock.
                options={
                    "verify_exp": False,
                    "require": ["exp", "iat", "iss", "aud"],
                },
            )
        except jwt.InvalidTokenError as e:
            log.debug("Token rejected: %s", type(e).__name__)
            return None
        except Exception:
            log.warning("Unexpected token decode failure", exc_info=True)
            return None

        try:
            exp = int(payload["exp"])
            iat = int(payload["iat"])
        except (TypeError, ValueError):
            return None

        if self._clock() >= exp:
            log.debug("Token expired")
            return None

        if any(not payload.get(name) for name in _REQUIRED_CLAIMS):
            log.warning("Token missing user claims")
            return None

        return TokenClaims(
            id=str(payload["id"]),
            email=str(payload["email"]),
            username=str(payload["username"]),
            role=str(payload["role"]),
            iat=iat,
            exp=exp,
        )
