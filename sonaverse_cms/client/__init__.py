"""Admin console client: auth bootstrap, login and logout."""

from sonaverse_cms.client.auth import AdminAuthClient, LoginFailed
from sonaverse_cms.client.browser import (
    LEGACY_TOKEN_KEYS,
    SESSION_FLAG_KEY,
    AuthState,
    BrowserContext,
)

__all__ = [
    "AdminAuthClient",
    "AuthState",
    "BrowserContext",
    "LEGACY_TOKEN_KEYS",
    "LoginFailed",
    "SESSION_FLAG_KEY",
]
