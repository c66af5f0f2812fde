"""Badge unlock evaluation."""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.badges import count_achievements, earned_badge_ids, insert_achievement, list_badges
from stemlearn.store.notifications import create_notification
from stemlearn.store.schemas import Badge, User
from stemlearn.store.users import get_user

logger = logging.getLogger(__name__)


def qualifies(user: User, badge: Badge) -> bool:
    """XP threshold rule; a missing threshold means 0."""
    return user.xp >= (badge.xp_required or 0)


async def check_and_unlock_badges(db: AsyncSession, user_id: str, *, notify: bool = True) -> list[Badge]:
    """Unlock every badge the user now qualifies for. Returns the new ones.

    Already-earned badges are skipped, and the insert itself ignores a
    duplicate (user, badge) pair, so repeated calls never double-award.
    ``totalBadges`` is then set to the user's achievement count.
    """
    user = await get_user(db, user_id)
    if user is None:
        return []

    earned = await earned_badge_ids(db, user_id)
    unlocked: list[Badge] = []
    for badge in await list_badges(db):
        if badge.id in earned or not qualifies(user, badge):
            continue
        if not await insert_achievement(db, user_id, badge.id, progress=100):
            continue
        unlocked.append(badge)
        logger.info("Badge %s unlocked for user %s", badge.id, user_id)
        if notify:
            await create_notification(
                db,
                user_id,
                title="Badge Unlocked!",
                message=f"You earned the {badge.name} badge",
                type_="badge",
            )

    if unlocked:
        total = await count_achievements(db, user_id)
        await db.execute(
            update(models.User)
            .where(models.User.id == user_id)
            .values(total_badges=total)
            .execution_options(synchronize_session=False)
        )
    return unlocked
