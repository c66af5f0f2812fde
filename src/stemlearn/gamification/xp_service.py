"""XP grants with level recomputation and level-up notification."""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.gamification.level_thresholds import compute_level, level_for_xp
from stemlearn.store.notifications import create_notification
from stemlearn.store.schemas import XPAward

logger = logging.getLogger(__name__)

# Reward table by event. Quizzes carry their own xpReward, which wins over
# the per-difficulty default.
XP_REWARDS: dict[str, int] = {
    "lesson_complete": 50,
    "quiz_beginner": 75,
    "quiz_intermediate": 100,
    "quiz_advanced": 150,
    "quiz_expert": 200,
    "quiz_perfect_bonus": 50,
    "daily_streak": 25,
}


def quiz_reward(difficulty: str, xp_reward: int | None = None) -> int:
    if xp_reward:
        return xp_reward
    return XP_REWARDS.get(f"quiz_{difficulty}", XP_REWARDS["quiz_beginner"])


async def add_xp(db: AsyncSession, user_id: str, amount: int, *, notify: bool = True) -> XPAward | None:
    """Grant ``amount`` XP to a user. Returns None if the user does not exist.

    The XP write is a single ``xp = xp + :amount`` statement, so concurrent
    grants never lose an increment. Level is then recomputed from the
    stored total and written back.
    """
    if amount <= 0:
        msg = f"XP amount must be positive, got {amount}"
        raise ValueError(msg)

    old_level = (
        await db.execute(select(models.User.level).where(models.User.id == user_id))
    ).scalar_one_or_none()
    if old_level is None:
        logger.warning("XP grant for unknown user %s ignored", user_id)
        return None

    await db.execute(
        update(models.User)
        .where(models.User.id == user_id)
        .values(xp=models.User.xp + amount)
        .execution_options(synchronize_session=False)
    )
    total_xp = (
        await db.execute(select(models.User.xp).where(models.User.id == user_id))
    ).scalar_one()

    new_level = level_for_xp(total_xp)
    await db.execute(
        update(models.User)
        .where(models.User.id == user_id)
        .values(level=new_level)
        .execution_options(synchronize_session=False)
    )

    award = XPAward(
        user_id=user_id,
        amount=amount,
        total_xp=total_xp,
        old_level=old_level,
        new_level=new_level,
    )
    if award.leveled_up:
        info = compute_level(total_xp)
        logger.info("User %s leveled up %d -> %d", user_id, old_level, new_level)
        if notify:
            await create_notification(
                db,
                user_id,
                title="Level Up!",
                message=f"You reached level {new_level}: {info['title']}",
                type_="general",
            )
    return award
