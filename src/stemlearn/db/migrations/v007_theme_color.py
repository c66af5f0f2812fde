"""Add users.themeColor and backfill it from gender.

Revision: 7
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from stemlearn.db.migrations.helpers import add_column_if_missing
from stemlearn.store.users import DEFAULT_THEME_COLOR, FEMALE_THEME_COLOR

revision = 7
description = "users.themeColor"


async def upgrade(conn: AsyncConnection) -> None:
    await add_column_if_missing(conn, "users", "themeColor", "TEXT")
    await conn.execute(
        text(
            'UPDATE users SET "themeColor" = CASE WHEN gender = \'female\' THEN :female ELSE :default END '
            'WHERE "themeColor" IS NULL'
        ),
        {"female": FEMALE_THEME_COLOR, "default": DEFAULT_THEME_COLOR},
    )
