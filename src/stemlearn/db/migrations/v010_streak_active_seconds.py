"""Track seconds of app use per streak day.

Revision: 10
"""

from sqlalchemy.ext.asyncio import AsyncConnection

from stemlearn.db.migrations.helpers import add_column_if_missing

revision = 10
description = "streaks.activeSeconds"


async def upgrade(conn: AsyncConnection) -> None:
    await add_column_if_missing(conn, "streaks", "activeSeconds", "INTEGER DEFAULT 0")
