"""Async engine and session handling for the CMS store.

PostgreSQL (psycopg) in production, SQLite (aiosqlite) for local work and
tests. One engine per process, created on first use and dropped by
close_db() so a later call starts fresh.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sonaverse_cms.db.models import Base

log = logging.getLogger("sonaverse-cms.db")

DEFAULT_SQLITE_PATH = "state/sonaverse.db"

_POSTGRES_SCHEMES = ("postgresql://", "postgres://")

_engine: Optional[AsyncEngine] = None
_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _int_setting(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        log.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def get_database_url() -> str:
    """SV_DB_URL when set (plain postgres URLs get the psycopg driver),
    otherwise a SQLite file at SV_SQLITE_PATH.
    """
    url = (os.getenv("SV_DB_URL") or "").strip()
    if url:
        for scheme in _POSTGRES_SCHEMES:
            if url.startswith(scheme):
                return "postgresql+psycopg://" + url[len(scheme):]
        return url
    return f"sqlite+aiosqlite:///{os.getenv('SV_SQLITE_PATH', DEFAULT_SQLITE_PATH)}"


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": os.getenv("SV_DB_ECHO", "").strip().lower() in ("1", "true", "yes"),
    }
    if make_url(url).get_backend_name() != "sqlite":
        options.update(
            pool_size=_int_setting("SV_DB_POOL_SIZE", 5),
            max_overflow=_int_setting("SV_DB_POOL_MAX_OVERFLOW", 10),
            pool_timeout=_int_setting("SV_DB_POOL_TIMEOUT", 30),
            pool_recycle=_int_setting("SV_DB_POOL_RECYCLE", 1800),
            pool_pre_ping=True,
        )
    return options


def _prepare_sqlite(engine: AsyncEngine) -> None:
    database = engine.url.database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    @event.listens_for(engine.sync_engine, "connect")
    def _pragmas(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        try:
            # Status history rows rely on ON DELETE CASCADE
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()


def get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        url = get_database_url()
        _engine = create_async_engine(url, **_engine_options(url))
        if _engine.url.get_backend_name() == "sqlite":
            _prepare_sqlite(_engine)
        log.debug("engine created", extra={"backend": _engine.url.get_backend_name()})
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _factory

    if _factory is None:
        _factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _factory


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session that commits on clean exit and rolls back on error."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    """Create missing tables. Deployed databases are migrated with Alembic."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _factory = None
