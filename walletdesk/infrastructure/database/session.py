"""Engine and session lifecycle for the wallet database.

One engine per process, built on first use from ``DATABASE__URL``. Sessions
keep loaded objects usable after commit; services return ORM rows to response
models once their unit is committed.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from walletdesk.core.config import get_settings
from walletdesk.infrastructure.database.base import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


def engine_options(url: str) -> dict[str, Any]:
    database = get_settings().database
    options: dict[str, Any] = {"echo": database.echo}
    # Pool sizing applies to server databases; SQLite files use the driver default.
    if make_url(url).get_backend_name() != "sqlite":
        options["pool_pre_ping"] = True
        if database.pool_size is not None:
            options["pool_size"] = database.pool_size
        if database.max_overflow is not None:
            options["max_overflow"] = database.max_overflow
    return options


def get_engine() -> AsyncEngine:
    global _engine, _sessions
    if _engine is None:
        url = get_settings().database_url
        _engine = create_async_engine(url, **engine_options(url))
        _sessions = async_sessionmaker(_engine, expire_on_commit=False)
        logger.info("Database engine ready: %s", make_url(url).render_as_string(hide_password=True))
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    get_engine()
    assert _sessions is not None
    return _sessions


async def get_session() -> AsyncIterator[AsyncSession]:
    """Request-scoped session, committed when the handler returns and rolled back if it raises."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def init_db() -> None:
    """Create missing tables. Deployed databases are managed by Alembic."""
    # Deferred: the model module imports Base from this package.
    from walletdesk.db import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _sessions
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessions = None
