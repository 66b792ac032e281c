"""
Notes API — Database Session Management
========================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   `create_engine_from_settings()` builds an engine from a Settings object;
       `create_app()` stores the engine and session factory on `app.state`,
       and `get_db_session()` hands out one session per request.
Who:   Used by route handlers via FastAPI's dependency injection system.

Nothing here is created at import time. Tests build their own engine
(SQLite via aiosqlite) by passing different Settings to `create_app()`.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notes_api.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a single metadata
    object, which `init_models()` uses to create tables at startup.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by `settings.database_url`.

    Pool sizing is only passed for server databases. SQLite's async driver
    manages its own connections and rejects QueuePool arguments.
    """
    url = make_url(settings.database_url)
    options = {"echo": settings.log_level == "DEBUG"}

    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )

    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps attributes readable after commit, which the
    services rely on when they serialize a note they just wrote.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create every table registered on `Base.metadata` if it does not exist."""
    # Import registers the Note mapper on Base.metadata
    from notes_api.models import note  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the factory stored on app.state
        2. Yields it to the route handler (services commit their own writes)
        3. On error: rolls back any pending work and re-raises
        4. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/notes/{note_id}")
        async def get_note(note_id: str, db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """Close every pooled connection. Called during application shutdown."""
    await engine.dispose()
    logger.info("Database engine disposed")
