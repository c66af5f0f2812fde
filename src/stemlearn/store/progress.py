"""Per-topic completion tracking."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.common import new_id, to_iso, utc_now
from stemlearn.store.schemas import UserProgress


async def list_progress(db: AsyncSession, user_id: str) -> list[UserProgress]:
    result = await db.execute(select(models.UserProgress).where(models.UserProgress.user_id == user_id))
    return [UserProgress.model_validate(row) for row in result.scalars()]


async def get_topic_progress(db: AsyncSession, user_id: str, topic_id: str) -> UserProgress | None:
    result = await db.execute(
        select(models.UserProgress)
        .where(models.UserProgress.user_id == user_id, models.UserProgress.topic_id == topic_id)
        .execution_options(populate_existing=True)
    )
    row = result.scalars().first()
    return UserProgress.model_validate(row) if row is not None else None


async def upsert_progress(
    db: AsyncSession,
    user_id: str,
    subject_id: str,
    topic_id: str,
    percentage: int,
    now: datetime | None = None,
) -> UserProgress:
    """Set completion for (user, topic), creating the row on first touch."""
    percentage = max(0, min(100, int(percentage)))
    stamp = to_iso(now or utc_now())

    stmt = sqlite_insert(models.UserProgress).values(
        id=new_id("progress"),
        user_id=user_id,
        subject_id=subject_id,
        topic_id=topic_id,
        completion_percentage=percentage,
        last_accessed_at=stamp,
        time_spent_minutes=0,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[models.UserProgress.user_id, models.UserProgress.topic_id],
        set_={
            "completionPercentage": stmt.excluded.completionPercentage,
            "lastAccessedAt": stmt.excluded.lastAccessedAt,
        },
    )
    await db.execute(stmt)
    progress = await get_topic_progress(db, user_id, topic_id)
    if progress is None:
        msg = f"Progress row for {user_id}/{topic_id} missing after upsert"
        raise RuntimeError(msg)
    return progress
