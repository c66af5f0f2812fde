"""Badge catalog and per-user achievements."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.common import new_id, to_iso, utc_now
from stemlearn.store.schemas import Achievement, Badge


async def list_badges(db: AsyncSession) -> list[Badge]:
    result = await db.execute(select(models.Badge))
    return [Badge.model_validate(row) for row in result.scalars()]


async def list_achievements(db: AsyncSession, user_id: str) -> list[Achievement]:
    result = await db.execute(
        select(models.Achievement)
        .where(models.Achievement.user_id == user_id)
        .order_by(models.Achievement.earned_at)
    )
    return [Achievement.model_validate(row) for row in result.scalars()]


async def earned_badge_ids(db: AsyncSession, user_id: str) -> set[str]:
    result = await db.execute(select(models.Achievement.badge_id).where(models.Achievement.user_id == user_id))
    return set(result.scalars())


async def count_achievements(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(models.Achievement).where(models.Achievement.user_id == user_id)
    )
    return result.scalar_one()


async def insert_achievement(
    db: AsyncSession,
    user_id: str,
    badge_id: str,
    progress: int = 100,
    earned_at: datetime | None = None,
) -> bool:
    """Record an unlock. Returns False if the user already had the badge."""
    stmt = (
        sqlite_insert(models.Achievement)
        .values(
            id=new_id("achievement"),
            user_id=user_id,
            badge_id=badge_id,
            earned_at=to_iso(earned_at or utc_now()),
            progress=progress,
        )
        .on_conflict_do_nothing(index_elements=[models.Achievement.user_id, models.Achievement.badge_id])
    )
    result = await db.execute(stmt)
    return (result.rowcount or 0) > 0
