"""Leaderboard rebuild and reads.

The table is a snapshot: every rebuild deletes it and writes one row per
user in descending XP order. Reads never recompute.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.store import leaderboard
from stemlearn.store.schemas import LeaderboardEntry
from stemlearn.store.users import list_users_by_xp

logger = logging.getLogger(__name__)


async def rebuild_leaderboard(db: AsyncSession) -> int:
    """Regenerate all entries. Returns the number of ranked users."""
    users = await list_users_by_xp(db)
    count = await leaderboard.replace_all(db, users)
    logger.debug("Leaderboard rebuilt with %d entries", count)
    return count


async def get_leaderboard(db: AsyncSession, limit: int) -> list[LeaderboardEntry]:
    return await leaderboard.list_entries(db, limit)


async def get_user_rank(db: AsyncSession, user_id: str) -> int:
    """1-based rank from the last rebuild, 0 if the user is not ranked."""
    return await leaderboard.get_rank(db, user_id)
