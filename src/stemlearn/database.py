"""Async SQLAlchemy engine and session management for the local store."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool


def sqlite_url(path: str | Path) -> str:
    """Build the aiosqlite URL for a database file."""
    return f"sqlite+aiosqlite:///{Path(path)}"


def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Store client for one file-backed SQLite database.

    Constructed explicitly and handed to every component that needs it.
    A single pooled connection serializes all statements, matching the
    one-writer model of the embedded store.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def url(self) -> str:
        return sqlite_url(self.path)

    def connect(self) -> None:
        """Create the engine and session factory. Safe to call twice."""
        if self._engine is not None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_async_engine(
            self.url,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=1,
            max_overflow=0,
            echo=False,
        )
        event.listen(self._engine.sync_engine, "connect", _enable_foreign_keys)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def dispose(self) -> None:
        """Dispose of the engine and release the file handle."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            msg = "Database not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; uncommitted work is rolled back on exit."""
        if self._session_factory is None:
            msg = "Database not connected. Call connect() first."
            raise RuntimeError(msg)
        async with self._session_factory() as session:
            yield session
