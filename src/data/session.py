"""
Engine and session lifecycle for the PostgreSQL-backed game store.

``init_db`` builds one engine per process; ``SqlGameStore`` and the
maintenance scripts open sessions from the factory it returns.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.data.config import DatabaseSettings, get_settings
from src.data.models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("No database engine; run init_db() at startup.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _async_session_factory is None:
        raise RuntimeError("No session factory; run init_db() at startup.")
    return _async_session_factory


async def init_db(settings: Optional[DatabaseSettings] = None) -> async_sessionmaker[AsyncSession]:
    """Create the engine and return the session factory bound to it."""
    global _engine, _async_session_factory

    settings = settings or get_settings()
    # Log host/database only, never credentials
    logger.info(f"Connecting to game database at {settings.database_url.split('@')[-1]}")

    _engine = create_async_engine(settings.database_url, **settings.get_engine_kwargs())
    # Stores hand out plain dataclasses, so ORM rows are never reused after commit
    _async_session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return _async_session_factory


async def close_db() -> None:
    global _engine, _async_session_factory

    if _engine is None:
        return
    logger.info("Disposing game database engine")
    await _engine.dispose()
    _engine = None
    _async_session_factory = None


async def create_tables() -> None:
    """Create the players, board and bank tables if they are missing."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Game tables created")


async def drop_tables() -> None:
    """Drop every game table. Used by the reset script."""
    logger.warning("Dropping all game tables")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    """Session that commits when the block exits cleanly and rolls back otherwise."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
