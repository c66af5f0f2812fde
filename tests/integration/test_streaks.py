"""Daily streaks, the weekly view and session time."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import func, select, update

from stemlearn.db import models
from stemlearn.store.streaks import get_streak_day, insert_streak_day

pytestmark = pytest.mark.asyncio

WEDNESDAY = date(2024, 3, 6)
MONDAY = date(2024, 3, 4)


async def set_streak(database, user_id: str, current: int, longest: int) -> None:
    async with database.session() as db:
        await db.execute(
            update(models.User)
            .where(models.User.id == user_id)
            .values(current_streak=current, longest_streak=longest)
        )
        await db.commit()


async def add_day(database, user_id: str, day: date, completed: bool = True) -> None:
    async with database.session() as db:
        await insert_streak_day(db, user_id, day, 25)
        if not completed:
            await db.execute(
                update(models.Streak)
                .where(models.Streak.user_id == user_id, models.Streak.date == day.isoformat())
                .values(completed=False)
            )
        await db.commit()


async def count_days(database, user_id: str, day: date) -> int:
    async with database.session() as db:
        result = await db.execute(
            select(func.count())
            .select_from(models.Streak)
            .where(models.Streak.user_id == user_id, models.Streak.date == day.isoformat())
        )
        return result.scalar_one()


class TestTouchStreak:
    async def test_first_activity(self, app, user):
        result = await app.touch_streak(user.id, today=WEDNESDAY)
        assert result.created
        assert result.current_streak == 1
        assert result.xp_awarded == 25
        assert (await app.get_user(user.id)).xp == 25

    async def test_same_day_is_idempotent(self, app, user):
        await app.touch_streak(user.id, today=WEDNESDAY)
        again = await app.touch_streak(user.id, today=WEDNESDAY)

        assert not again.created
        assert again.current_streak == 1
        assert again.xp_awarded == 0
        assert (await app.get_user(user.id)).xp == 25
        assert await count_days(app.database, user.id, WEDNESDAY) == 1

    async def test_consecutive_days_extend(self, app, user):
        for offset in range(3):
            result = await app.touch_streak(user.id, today=MONDAY + timedelta(days=offset))
        assert result.current_streak == 3
        assert result.longest_streak == 3

    async def test_gap_restarts_but_keeps_longest(self, app, user):
        await app.touch_streak(user.id, today=MONDAY)
        await app.touch_streak(user.id, today=MONDAY + timedelta(days=1))
        result = await app.touch_streak(user.id, today=MONDAY + timedelta(days=3))
        assert result.current_streak == 1
        assert result.longest_streak == 2

    async def test_uncompleted_yesterday_restarts(self, app, database, user):
        await set_streak(database, user.id, current=4, longest=4)
        await add_day(database, user.id, WEDNESDAY - timedelta(days=1), completed=False)

        result = await app.touch_streak(user.id, today=WEDNESDAY)
        assert result.current_streak == 1
        assert result.longest_streak == 4

    async def test_returning_on_streak_day_five(self, app, database, user):
        await set_streak(database, user.id, current=4, longest=4)
        await add_day(database, user.id, WEDNESDAY - timedelta(days=1))

        first = await app.touch_streak(user.id, today=WEDNESDAY)
        second = await app.touch_streak(user.id, today=WEDNESDAY)

        assert first.current_streak == 5
        assert first.longest_streak == 5
        assert not second.created
        assert await count_days(app.database, user.id, WEDNESDAY) == 1
        assert (await app.get_user(user.id)).xp == 25

    async def test_unknown_user(self, app):
        assert await app.touch_streak("user-missing", today=WEDNESDAY) is None

    async def test_first_day_unlocks_zero_xp_badge(self, app, user):
        await app.touch_streak(user.id, today=WEDNESDAY)
        refreshed = await app.get_user(user.id)
        assert refreshed.total_badges == 1


class TestWeeklyStreak:
    async def test_monday_to_sunday(self, app, user):
        await app.touch_streak(user.id, today=MONDAY)
        await app.touch_streak(user.id, today=WEDNESDAY)

        week = await app.weekly_streak(user.id, today=WEDNESDAY)

        assert [d.day for d in week] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert week[0].date == MONDAY
        assert week[6].date == date(2024, 3, 10)
        assert [d.completed for d in week] == [True, False, True, False, False, False, False]

    async def test_sunday_belongs_to_previous_week(self, app, user):
        sunday = date(2024, 3, 10)
        week = await app.weekly_streak(user.id, today=sunday)
        assert week[0].date == MONDAY

    async def test_three_minute_threshold(self, app, user, clock):
        await app.touch_streak(user.id, today=MONDAY)
        await app.touch_streak(user.id, today=WEDNESDAY)

        app.start_session()
        clock.advance(179)
        assert await app.end_session(user.id, today=MONDAY) == 179

        app.start_session()
        clock.advance(200)
        assert await app.end_session(user.id, today=WEDNESDAY) == 200

        week = await app.weekly_streak(user.id, today=WEDNESDAY)
        assert week[0].was_active_for_three_minutes is False
        assert week[2].was_active_for_three_minutes is True

    async def test_threshold_from_settings(self, app, user, clock, settings):
        await app.touch_streak(user.id, today=MONDAY)
        app.start_session()
        clock.advance(90)
        await app.end_session(user.id, today=MONDAY)

        settings.active_day_threshold_seconds = 60
        week = await app.weekly_streak(user.id, today=MONDAY)
        assert week[0].was_active_for_three_minutes is True


class TestSessionTime:
    async def test_sessions_accumulate(self, app, user, clock):
        await app.touch_streak(user.id, today=WEDNESDAY)
        for seconds in (100, 90):
            app.start_session()
            clock.advance(seconds)
            await app.end_session(user.id, today=WEDNESDAY)

        async with app.database.session() as db:
            day = await get_streak_day(db, user.id, WEDNESDAY)
        assert day.active_seconds == 190

    async def test_end_without_start(self, app, user):
        assert await app.end_session(user.id, today=WEDNESDAY) == 0

    async def test_no_day_row_no_credit(self, app, user, clock):
        app.start_session()
        clock.advance(300)
        assert await app.end_session(user.id, today=WEDNESDAY) == 0
