"""Schema manager: table creation and the destructive-reset decision."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from stemlearn.database import sqlite_url
from stemlearn.db import models  # noqa: F401  (registers tables on Base.metadata)
from stemlearn.db.base import Base
from stemlearn.errors import StoreInitializationError

logger = structlog.get_logger()

# Stores recorded below this version predate additive migrations and may
# carry structure that only a reset can repair.
MIN_MIGRATABLE_VERSION = 6

SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


@dataclass(frozen=True)
class StoreProbe:
    """What a read-only look at an existing store file found."""

    exists: bool
    has_tables: bool = False
    version: int = 0
    quoted_order_column: bool = False
    subjects_unreadable: bool = False
    probe_failed: bool = False

    @property
    def needs_reset(self) -> bool:
        if not self.exists:
            return False
        if self.probe_failed:
            return True
        if not self.has_tables or self.version >= MIN_MIGRATABLE_VERSION:
            return False
        return self.quoted_order_column or self.subjects_unreadable


async def ensure_schema(engine: AsyncEngine) -> None:
    """Create every missing table and index. Safe on every start."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    logger.info("schema_ensured", tables=len(Base.metadata.tables))


async def table_names(conn: AsyncConnection) -> set[str]:
    result = await conn.execute(
        text("SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'")
    )
    return {row[0] for row in result}


async def column_names(conn: AsyncConnection, table: str) -> list[str]:
    result = await conn.execute(text(f'PRAGMA table_info("{table}")'))
    return [row[1] for row in result]


async def recorded_version(conn: AsyncConnection) -> int:
    """Return the persisted schema version, 0 when absent or empty."""
    if "database_version" not in await table_names(conn):
        return 0
    value = (await conn.execute(text("SELECT MAX(version) FROM database_version"))).scalar()
    return int(value or 0)


async def probe_store(path: str | Path) -> StoreProbe:
    """Inspect an on-disk store without modifying it."""
    path = Path(path)
    if not path.exists():
        return StoreProbe(exists=False)

    engine = create_async_engine(sqlite_url(path), poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            tables = await table_names(conn)
            if not tables:
                return StoreProbe(exists=True)
            version = await recorded_version(conn)
            quoted_order = False
            unreadable = False
            if "subjects" in tables:
                quoted_order = "`order`" in await column_names(conn, "subjects")
                try:
                    await conn.execute(text("SELECT * FROM subjects LIMIT 1"))
                except SQLAlchemyError:
                    unreadable = True
            return StoreProbe(
                exists=True,
                has_tables=True,
                version=version,
                quoted_order_column=quoted_order,
                subjects_unreadable=unreadable,
            )
    except SQLAlchemyError as exc:
        logger.warning("store_probe_failed", path=str(path), error=str(exc))
        return StoreProbe(exists=True, probe_failed=True)
    finally:
        await engine.dispose()


def reset_store(path: str | Path) -> None:
    """Delete the store file and its journal siblings.

    Raises StoreInitializationError if any file cannot be removed; a half
    deleted store must never be opened.
    """
    path = Path(path)
    targets = [path, *(path.with_name(path.name + suffix) for suffix in SIDECAR_SUFFIXES)]
    for target in targets:
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            msg = f"Could not reset local store at {path}"
            raise StoreInitializationError(msg) from exc
    logger.warning("store_reset", path=str(path))


async def reset_if_incompatible(path: str | Path) -> bool:
    """Probe the store and wipe it when it cannot be migrated. Returns True on reset."""
    probe = await probe_store(path)
    logger.info(
        "store_probed",
        path=str(path),
        exists=probe.exists,
        version=probe.version,
        needs_reset=probe.needs_reset,
    )
    if not probe.needs_reset:
        return False
    reset_store(path)
    return True
