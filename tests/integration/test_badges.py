"""Badge unlocks and the totalBadges mirror."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.asyncio


async def test_zero_threshold_badge_unlocks_immediately(app, user):
    unlocked = await app.check_and_unlock_badges(user.id)
    assert [b.id for b in unlocked] == ["badge-first-steps"]

    achievements = await app.list_achievements(user.id)
    assert [a.badge_id for a in achievements] == ["badge-first-steps"]
    assert achievements[0].progress == 100
    assert achievements[0].earned_at is not None


async def test_repeated_checks_never_double_award(app, user):
    await app.check_and_unlock_badges(user.id)
    assert await app.check_and_unlock_badges(user.id) == []
    assert len(await app.list_achievements(user.id)) == 1
    assert (await app.get_user(user.id)).total_badges == 1


async def test_xp_threshold_badge(app, user):
    await app.add_xp(user.id, 499)
    assert {a.badge_id for a in await app.list_achievements(user.id)} == {"badge-first-steps"}

    await app.add_xp(user.id, 1)
    earned = {a.badge_id for a in await app.list_achievements(user.id)}
    assert earned == {"badge-first-steps", "badge-science-star"}


async def test_total_badges_matches_achievements(app, user):
    await app.add_xp(user.id, 800)
    refreshed = await app.get_user(user.id)
    assert refreshed.total_badges == len(await app.list_achievements(user.id)) == 2


async def test_unlock_notifications(app, user):
    await app.check_and_unlock_badges(user.id)
    notes = await app.list_notifications(user.id)
    assert len(notes) == 1
    assert notes[0].type == "badge"
    assert notes[0].title == "Badge Unlocked!"
    assert "First Steps" in notes[0].message


async def test_unknown_user(app):
    assert await app.check_and_unlock_badges("user-missing") == []
