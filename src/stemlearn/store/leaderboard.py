"""Leaderboard snapshot rows."""

from __future__ import annotations

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.schemas import LeaderboardEntry, User


def entry_id(user_id: str) -> str:
    return f"leaderboard-{user_id}"


async def replace_all(db: AsyncSession, ranked: list[User]) -> int:
    """Drop every row and write ``ranked`` with 1-based ranks in list order."""
    await db.execute(delete(models.LeaderboardEntry))
    if not ranked:
        return 0
    await db.execute(
        insert(models.LeaderboardEntry),
        [
            {
                "id": entry_id(user.id),
                "user_id": user.id,
                "user_name": user.name,
                "avatar_id": user.avatar_id,
                "total_xp": user.xp,
                "level": user.level,
                "rank": position,
                "weekly_xp": 0,
            }
            for position, user in enumerate(ranked, start=1)
        ],
    )
    return len(ranked)


async def list_entries(db: AsyncSession, limit: int) -> list[LeaderboardEntry]:
    result = await db.execute(
        select(models.LeaderboardEntry)
        .order_by(models.LeaderboardEntry.rank)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    return [LeaderboardEntry.model_validate(row) for row in result.scalars()]


async def get_rank(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(models.LeaderboardEntry.rank).where(models.LeaderboardEntry.user_id == user_id)
    )
    return result.scalar_one_or_none() or 0
