"""Enforce one row per key on streaks, achievements and user_progress.

Older stores relied on read-before-insert checks only, so duplicate rows may
exist. The earliest row of every group wins; the rest are deleted before the
unique index goes on. Index names match the ones new stores get from the
ORM models.

Revision: 11
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from stemlearn.db.migrations.helpers import delete_duplicates, has_table

revision = 11
description = "unique keys on user activity tables"

logger = logging.getLogger(__name__)

UNIQUE_KEYS: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("uq_streaks_user_date", "streaks", ("userId", "date")),
    ("uq_achievements_user_badge", "achievements", ("userId", "badgeId")),
    ("uq_user_progress_user_topic", "user_progress", ("userId", "topicId")),
)


async def upgrade(conn: AsyncConnection) -> None:
    for index_name, table, columns in UNIQUE_KEYS:
        if not await has_table(conn, table):
            continue
        removed = await delete_duplicates(conn, table, columns)
        if removed:
            logger.warning("Removed %d duplicate rows from %s", removed, table)
        cols = ", ".join(f'"{c}"' for c in columns)
        await conn.execute(text(f'CREATE UNIQUE INDEX IF NOT EXISTS {index_name} ON "{table}" ({cols})'))
