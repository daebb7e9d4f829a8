"""Explicit model of the browser state the admin shell touches.

Everything the console keeps outside the server (storage, service workers,
cache storage, current location) lives on one BrowserContext so it can be
inspected and replaced in tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

log = logging.getLogger("sonaverse-cms.client.browser")

SESSION_FLAG_KEY = "admin_authenticated"
LEGACY_TOKEN_KEYS = ("admin_token", "admin_token_backup", "admin_user_backup")


@dataclass
class BrowserContext:
    """Storage, service workers, caches and navigation for one tab."""

    session_storage: dict[str, str] = field(default_factory=dict)
    local_storage: dict[str, str] = field(default_factory=dict)
    service_workers: list[str] = field(default_factory=list)
    cache_names: set[str] = field(default_factory=set)
    location: str = "/admin"
    history: list[str] = field(default_factory=list)

    async def unregister_service_workers(self) -> int:
        """Unregister every service worker; returns how many were removed."""
        count = len(self.service_workers)
        self.service_workers.clear()
        return count

    async def clear_caches(self) -> int:
        """Delete every cache storage entry; returns how many were removed."""
        count = len(self.cache_names)
        self.cache_names.clear()
        return count

    def navigate(self, url: str) -> None:
        log.debug("navigate", extra={"url": url})
        self.history.append(url)
        self.location = url


@dataclass
class AuthState:
    """In-memory admin identity for the current page load."""

    user: Optional[dict[str, Any]] = None
    checked: bool = False

    @property
    def authenticated(self) -> bool:
        return self.user is not None
