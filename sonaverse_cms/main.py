"""Sonaverse CMS application factory.

Serves the public content API for the bilingual corporate site, the admin
console pages and the admin management API from one FastAPI app.
"""

from __future__ import annotations

import logging
import os
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from sonaverse_cms.auth.accounts import bootstrap_super_admin
from sonaverse_cms.auth.config import AuthConfig, get_auth_config
from sonaverse_cms.auth.tokens import TokenService
from sonaverse_cms.db import close_db, init_db, session_scope
from sonaverse_cms.errors import register_error_handlers
from sonaverse_cms.middleware.error_shield import ErrorShieldMiddleware
from sonaverse_cms.middleware.logging import StructuredLoggingMiddleware
from sonaverse_cms.middleware.request_id import RequestIdMiddleware
from sonaverse_cms.middleware.route_guard import RouteGuardMiddleware
from sonaverse_cms.middleware.session_cookie import SessionCookieMiddleware
from sonaverse_cms.routers import (
    analytics_router,
    auth_router,
    console_router,
    inquiries_router,
    pages_router,
    press_router,
    products_router,
    settings_router,
    slugs_router,
    stories_router,
    users_router,
)

SERVICE_NAME = "sonaverse-cms"
VERSION = "1.0.0"
API_VERSION = "v1"

DEV_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

ROUTERS = (
    auth_router,
    console_router,
    press_router,
    stories_router,
    products_router,
    pages_router,
    inquiries_router,
    slugs_router,
    users_router,
    settings_router,
    analytics_router,
)

log = logging.getLogger(SERVICE_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("%s %s starting", SERVICE_NAME, VERSION, extra={"instance_id": app.state.instance_id})
    await init_db()
    async with session_scope() as session:
        await bootstrap_super_admin(session, app.state.config)
    try:
        yield
    finally:
        await close_db()
        log.info("%s stopped", SERVICE_NAME)


def _checked_config() -> AuthConfig:
    config = get_auth_config()
    problems = config.validate()
    if problems:
        summary = "; ".join(problems)
        log.error("refusing to start: %s", summary)
        raise RuntimeError(f"Configuration validation failed: {summary}")
    return config


def _install_middleware(app: FastAPI, config: AuthConfig) -> None:
    # add_middleware prepends, so ErrorShield ends up outermost
    app.add_middleware(RouteGuardMiddleware)
    app.add_middleware(SessionCookieMiddleware, cookie_name=config.cookie_name)
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    origins = list(config.cors_origins)
    if not origins:
        origins = DEV_CORS_ORIGINS
        log.warning("SV_CORS_ORIGINS unset; allowing %s", ", ".join(origins))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )
    app.add_middleware(ErrorShieldMiddleware)


def _add_meta_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        state = request.app.state
        return {
            "status": "ok",
            "service": state.service,
            "version": state.version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", None),
        }

    @app.get("/version")
    async def version(request: Request) -> dict[str, Any]:
        """Build metadata, taken from SV_BUILD_COMMIT / SV_BUILD_TIME."""
        state = request.app.state
        return {
            "service": state.service,
            "version": state.version,
            "api_version": state.api_version,
            "build_commit": os.getenv("SV_BUILD_COMMIT"),
            "build_time": os.getenv("SV_BUILD_TIME"),
        }


def build_app() -> FastAPI:
    """Create the app. Raises RuntimeError when configuration is invalid."""
    config = _checked_config()

    app = FastAPI(
        title="Sonaverse CMS",
        description="Bilingual site content API and admin console",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.service = SERVICE_NAME
    app.state.version = VERSION
    app.state.api_version = API_VERSION
    app.state.instance_id = str(uuid.uuid4())
    app.state.started_at = datetime.now(timezone.utc)
    app.state.tokens = TokenService.from_config(config)

    register_error_handlers(app)
    _install_middleware(app, config)
    for router in ROUTERS:
        app.include_router(router)
    _add_meta_routes(app)
    return app
