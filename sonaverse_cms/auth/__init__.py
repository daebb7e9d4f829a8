"""Authentication package for the Sonaverse CMS.

Provides configuration, session tokens, the session cookie, password hashing
and the admin credential store.
"""

from sonaverse_cms.auth.config import AuthConfig, get_auth_config, reset_auth_config
from sonaverse_cms.auth.dependencies import (
    get_current_user,
    get_optional_user,
    get_token_service,
    require_super_admin,
)
from sonaverse_cms.auth.passwords import hash_password, verify_password
from sonaverse_cms.auth.session import SessionCookie
from sonaverse_cms.auth.tokens import TokenClaims, TokenConfigError, TokenService

__all__ = [
    # Config
    "AuthConfig",
    "get_auth_config",
    "reset_auth_config",
    # Tokens
    "TokenClaims",
    "TokenConfigError",
    "TokenService",
    # Session
    "SessionCookie",
    # Passwords
    "hash_password",
    "verify_password",
    # Dependencies
    "get_current_user",
    "get_optional_user",
    "get_token_service",
    "require_super_admin",
]
