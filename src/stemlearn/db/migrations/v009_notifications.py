"""Create the notifications table.

Revision: 9
"""

from sqlalchemy.ext.asyncio import AsyncConnection

from stemlearn.db.models import Notification

revision = 9
description = "notifications table"


async def upgrade(conn: AsyncConnection) -> None:
    await conn.run_sync(Notification.__table__.create, checkfirst=True)
