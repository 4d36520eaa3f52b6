"""
Gahoi Sathi — Async Database Engine & Session Factory

Builds a single async engine from ``DATABASE_URL``:

* **PostgreSQL** (production / local development) – ``asyncpg`` driver with
  a bounded, recycled connection pool shared across requests.
* **SQLite** (test-suite) – ``aiosqlite`` driver; SQLite takes no pool
  sizing so the pool arguments are skipped.

Column types used by the models are portable (``Uuid`` and ``JSON`` with a
JSONB variant on PostgreSQL) so the same metadata works on both.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import AsyncGenerator, Awaitable, Callable

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ #
# Declarative base for all ORM models
# ------------------------------------------------------------------ #

class Base(DeclarativeBase):
    """Shared declarative base.

    Every SQLAlchemy model in the project should inherit from this class::

        from app.database import Base

        class User(Base):
            __tablename__ = "users"
            ...
    """
    pass


# JSONB on PostgreSQL, plain JSON elsewhere.
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ------------------------------------------------------------------ #
# Pool configuration
# ------------------------------------------------------------------ #

_POOL_KWARGS = {
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}


def _normalise_url(url: str) -> str:
    """Upgrade plain ``postgres://`` / ``postgresql://`` schemes to asyncpg."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _create_engine():
    settings = get_settings()
    url = _normalise_url(settings.DATABASE_URL)
    echo = settings.LOG_LEVEL == "DEBUG"

    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=echo)
        logger.info("Database engine created for SQLite (%s)", url)
        return engine

    engine = create_async_engine(url, echo=echo, **_POOL_KWARGS)
    logger.info("Database engine created from DATABASE_URL")
    return engine


# ------------------------------------------------------------------ #
# Module-level engine & session factory
# ------------------------------------------------------------------ #

engine = _create_engine()

async_session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ------------------------------------------------------------------ #
# Post-commit callbacks
# ------------------------------------------------------------------ #

_AFTER_COMMIT_KEY = "after_commit"


def after_commit(session: AsyncSession, callback: Callable[[], Awaitable[object]]) -> None:
    """Queue ``callback`` to run once ``session`` has committed.

    Used for side effects outside the database (realtime hints) that must
    not announce rows a rollback could still discard.
    """
    session.info.setdefault(_AFTER_COMMIT_KEY, []).append(callback)


def discard_after_commit(session: AsyncSession) -> None:
    session.info.pop(_AFTER_COMMIT_KEY, None)


async def run_after_commit(session: AsyncSession) -> None:
    """Run and clear the queued callbacks.  Failures are logged, not raised."""
    callbacks = session.info.pop(_AFTER_COMMIT_KEY, [])
    for callback in callbacks:
        try:
            await callback()
        except Exception:
            logger.exception("Post-commit callback failed")


# ------------------------------------------------------------------ #
# FastAPI dependency
# ------------------------------------------------------------------ #

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an ``AsyncSession`` and ensure it is closed afterwards.

    The session is committed when the route returns normally and rolled
    back when it raises.  Callbacks queued with ``after_commit`` run only
    after a successful commit::

        from fastapi import Depends
        from app.database import get_db

        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            discard_after_commit(session)
            await session.rollback()
            raise
        else:
            await run_after_commit(session)
        finally:
            await session.close()
