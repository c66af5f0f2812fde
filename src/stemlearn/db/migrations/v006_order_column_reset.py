"""Quoted ``order`` column fix.

Stores that shipped a backtick-quoted ``order`` column on subjects are wiped
by the schema manager's destructive reset before migrations run, so there
is nothing left to change here. The step keeps its number so later
revisions never shift.

Revision: 6
"""

from sqlalchemy.ext.asyncio import AsyncConnection

revision = 6
description = "order column (handled by reset)"


async def upgrade(conn: AsyncConnection) -> None:  # noqa: ARG001
    return None
