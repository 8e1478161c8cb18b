"""
Database engine, session factory and the per-request session dependency.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from shortlinks.config import Settings

Base = declarative_base()


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the async engine that owns the connection pool.

    PostgreSQL gets a bounded pool shared by all requests.
    SQLite (development and tests) opens a connection per checkout.
    """
    if settings.is_sqlite:
        return create_async_engine(settings.async_database_url, poolclass=NullPool)

    return create_async_engine(
        settings.async_database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the short_links table and its indexes if missing."""
    # Import models so they're registered with Base
    from shortlinks.models import ShortLink  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Borrow a session for the duration of one request.

    The connection goes back to the pool when the session closes.
    """
    async with request.app.state.session_factory() as session:
        yield session
