"""Per-user notifications."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, literal_column, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.common import new_id, to_iso, utc_now
from stemlearn.store.schemas import Notification, NotificationType


async def create_notification(
    db: AsyncSession,
    user_id: str,
    title: str,
    message: str,
    type_: NotificationType = "general",
    now: datetime | None = None,
) -> Notification:
    row = models.Notification(
        id=new_id("notification"),
        user_id=user_id,
        title=title,
        message=message,
        type=type_,
        read=False,
        created_at=to_iso(now or utc_now()),
    )
    db.add(row)
    await db.flush()
    return Notification.model_validate(row)


async def list_notifications(db: AsyncSession, user_id: str) -> list[Notification]:
    """Newest first."""
    result = await db.execute(
        select(models.Notification)
        .where(models.Notification.user_id == user_id)
        .order_by(models.Notification.created_at.desc(), literal_column("notifications.rowid").desc())
        .execution_options(populate_existing=True)
    )
    return [Notification.model_validate(row) for row in result.scalars()]


async def unread_count(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(models.Notification)
        .where(models.Notification.user_id == user_id, models.Notification.read.is_(False))
    )
    return result.scalar_one()


async def mark_read(db: AsyncSession, notification_id: str) -> bool:
    result = await db.execute(
        update(models.Notification)
        .where(models.Notification.id == notification_id)
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) > 0


async def mark_all_read(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        update(models.Notification)
        .where(models.Notification.user_id == user_id, models.Notification.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def delete_notification(db: AsyncSession, notification_id: str) -> bool:
    result = await db.execute(
        delete(models.Notification)
        .where(models.Notification.id == notification_id)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) > 0


async def clear_all(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        delete(models.Notification)
        .where(models.Notification.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
