"""Daily streak rows."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.common import new_id, to_day
from stemlearn.store.schemas import Streak


async def get_streak_day(db: AsyncSession, user_id: str, day: date) -> Streak | None:
    result = await db.execute(
        select(models.Streak)
        .where(models.Streak.user_id == user_id, models.Streak.date == to_day(day))
        .execution_options(populate_existing=True)
    )
    row = result.scalars().first()
    return Streak.model_validate(row) if row is not None else None


async def list_streak_days(db: AsyncSession, user_id: str, start: date, end: date) -> list[Streak]:
    """Rows for ``start`` through ``end`` inclusive, oldest first."""
    result = await db.execute(
        select(models.Streak)
        .where(
            models.Streak.user_id == user_id,
            models.Streak.date >= to_day(start),
            models.Streak.date <= to_day(end),
        )
        .order_by(models.Streak.date)
        .execution_options(populate_existing=True)
    )
    return [Streak.model_validate(row) for row in result.scalars()]


async def insert_streak_day(db: AsyncSession, user_id: str, day: date, xp_earned: int) -> bool:
    """Mark ``day`` completed. Returns False if the row already existed."""
    stmt = (
        sqlite_insert(models.Streak)
        .values(
            id=new_id("streak"),
            user_id=user_id,
            date=to_day(day),
            completed=True,
            xp_earned=xp_earned,
            active_seconds=0,
        )
        .on_conflict_do_nothing(index_elements=[models.Streak.user_id, models.Streak.date])
    )
    result = await db.execute(stmt)
    return (result.rowcount or 0) > 0


async def add_active_seconds(db: AsyncSession, user_id: str, day: date, seconds: int) -> bool:
    """Add session time to an existing day row. Returns False if there is no row."""
    result = await db.execute(
        update(models.Streak)
        .where(models.Streak.user_id == user_id, models.Streak.date == to_day(day))
        .values(active_seconds=models.Streak.active_seconds + seconds)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) > 0
