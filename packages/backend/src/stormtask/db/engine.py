"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The engine and session factory are built by the app factory and kept on
app.state, so tests (and the CLI) can point the same code at a different
database without monkeypatching a module-level engine.
"""

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from stormtask.db.models import Base


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores FOREIGN KEY clauses unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for `database_url`.

    PostgreSQL gets a pool of min 5 / max 20 connections. SQLite (tests and
    local runs) gets foreign key enforcement, and in-memory databases share
    one connection so every session sees the same schema.
    """
    if not _is_sqlite(database_url):
        return create_async_engine(
            database_url,
            echo=echo,
            pool_size=5,
            max_overflow=15,
        )

    kwargs: dict = {"echo": echo, "connect_args": {"check_same_thread": False}}
    if ":memory:" in database_url or database_url.endswith("://"):
        kwargs["poolclass"] = StaticPool
    engine = create_async_engine(database_url, **kwargs)
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory — each request gets its own session."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_schema(engine: AsyncEngine) -> None:
    """Create all tables that don't exist yet. Safe to call repeatedly."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
