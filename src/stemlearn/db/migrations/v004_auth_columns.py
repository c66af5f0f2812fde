"""Add email, username and password to users.

Revision: 4
"""

from sqlalchemy.ext.asyncio import AsyncConnection

from stemlearn.db.migrations.helpers import add_column_if_missing

revision = 4
description = "users auth columns"


async def upgrade(conn: AsyncConnection) -> None:
    await add_column_if_missing(conn, "users", "email", "TEXT")
    await add_column_if_missing(conn, "users", "username", "TEXT")
    await add_column_if_missing(conn, "users", "password", "TEXT")
