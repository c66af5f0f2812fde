"""Daily streak tracking and the weekly activity view."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.gamification.xp_service import XP_REWARDS, add_xp
from stemlearn.store.schemas import StreakUpdate, WeeklyStreakDay
from stemlearn.store.streaks import (
    add_active_seconds,
    get_streak_day,
    insert_streak_day,
    list_streak_days,
)
from stemlearn.store.users import get_user

logger = logging.getLogger(__name__)

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def get_monday(d: date) -> date:
    """Get the Monday of the ISO week containing d."""
    return d - timedelta(days=d.weekday())


async def update_streak(
    db: AsyncSession,
    user_id: str,
    today: date | None = None,
    daily_xp: int = XP_REWARDS["daily_streak"],
) -> StreakUpdate | None:
    """Record today's activity for a user.

    The first call on a given day inserts the day row, extends or restarts
    the streak and grants the daily stipend. Later calls the same day change
    nothing. The streak continues only if yesterday has a completed row;
    otherwise it restarts at 1.
    """
    if today is None:
        today = date.today()

    user = await get_user(db, user_id)
    if user is None:
        return None

    created = await insert_streak_day(db, user_id, today, daily_xp)
    if not created:
        return StreakUpdate(
            created=False,
            current_streak=user.current_streak,
            longest_streak=user.longest_streak,
        )

    yesterday = await get_streak_day(db, user_id, today - timedelta(days=1))
    if yesterday is not None and yesterday.completed:
        current = user.current_streak + 1
    else:
        current = 1
    longest = max(user.longest_streak, current)

    await db.execute(
        update(models.User)
        .where(models.User.id == user_id)
        .values(current_streak=current, longest_streak=longest)
        .execution_options(synchronize_session=False)
    )
    if daily_xp > 0:
        await add_xp(db, user_id, daily_xp)

    logger.info("Streak for %s on %s: %d (longest %d)", user_id, today, current, longest)
    return StreakUpdate(created=True, current_streak=current, longest_streak=longest, xp_awarded=daily_xp)


async def record_session_duration(db: AsyncSession, user_id: str, day: date, seconds: int) -> bool:
    """Add app-use time to the user's row for ``day``; no row, no effect."""
    if seconds <= 0:
        return False
    return await add_active_seconds(db, user_id, day, int(seconds))


async def weekly_streak(
    db: AsyncSession,
    user_id: str,
    today: date | None = None,
    *,
    active_threshold_seconds: int,
) -> list[WeeklyStreakDay]:
    """Monday through Sunday of the week containing ``today``."""
    if today is None:
        today = date.today()
    monday = get_monday(today)
    sunday = monday + timedelta(days=6)
    by_day = {row.date: row for row in await list_streak_days(db, user_id, monday, sunday)}

    week = []
    for offset, label in enumerate(DAY_LABELS):
        day = monday + timedelta(days=offset)
        row = by_day.get(day)
        week.append(
            WeeklyStreakDay(
                day=label,
                date=day,
                completed=bool(row and row.completed),
                was_active_for_three_minutes=bool(row and row.active_seconds >= active_threshold_seconds),
            )
        )
    return week
