"""Shared building blocks for numbered migration steps."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

logger = logging.getLogger(__name__)


async def has_table(conn: AsyncConnection, table: str) -> bool:
    result = await conn.execute(
        text("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = :name"),
        {"name": table},
    )
    return result.first() is not None


async def has_column(conn: AsyncConnection, table: str, column: str) -> bool:
    result = await conn.execute(text(f'PRAGMA table_info("{table}")'))
    return any(row[1] == column for row in result)


async def add_column_if_missing(conn: AsyncConnection, table: str, column: str, ddl_type: str) -> bool:
    """ALTER TABLE ... ADD COLUMN unless the column is already there.

    Returns True if the column was added.
    """
    if await has_column(conn, table, column):
        logger.debug("Column %s.%s already present", table, column)
        return False
    await conn.execute(text(f'ALTER TABLE "{table}" ADD COLUMN "{column}" {ddl_type}'))
    return True


async def delete_duplicates(conn: AsyncConnection, table: str, key_columns: tuple[str, ...]) -> int:
    """Keep the first row (lowest rowid) of every duplicate key group."""
    keys = ", ".join(f'"{c}"' for c in key_columns)
    result = await conn.execute(
        text(f'DELETE FROM "{table}" WHERE rowid NOT IN (SELECT MIN(rowid) FROM "{table}" GROUP BY {keys})')
    )
    return result.rowcount or 0
