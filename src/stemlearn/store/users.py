"""User record access."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import literal_column, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.errors import EmptyPatchError
from stemlearn.store.common import new_id, to_iso, utc_now
from stemlearn.store.schemas import User, UserPatch

FEMALE_THEME_COLOR = "#FF48E3"
DEFAULT_THEME_COLOR = "#13a4ec"


def theme_color_for_gender(gender: str | None) -> str:
    return FEMALE_THEME_COLOR if gender == "female" else DEFAULT_THEME_COLOR


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    row = await db.get(models.User, user_id, populate_existing=True)
    return User.model_validate(row) if row is not None else None


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(models.User).where(models.User.email == email.strip().lower()))
    row = result.scalars().first()
    return User.model_validate(row) if row is not None else None


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(models.User).where(models.User.username == username))
    row = result.scalars().first()
    return User.model_validate(row) if row is not None else None


async def get_password_hash(db: AsyncSession, user_id: str) -> str | None:
    result = await db.execute(select(models.User.password).where(models.User.id == user_id))
    return result.scalar_one_or_none()


async def set_password_hash(db: AsyncSession, user_id: str, password_hash: str) -> None:
    await db.execute(update(models.User).where(models.User.id == user_id).values(password=password_hash))


async def insert_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    username: str,
    password_hash: str,
    age: int,
    gender: str,
    education_level: str,
    avatar_id: str,
    theme: str,
    theme_color: str,
    now: datetime | None = None,
) -> User:
    """Insert a fresh user at xp 0 / level 1. Unique violations propagate."""
    stamp = to_iso(now or utc_now())
    row = models.User(
        id=new_id("user"),
        name=name,
        email=email,
        username=username,
        password=password_hash,
        age=age,
        gender=gender,
        education_level=education_level,
        avatar_id=avatar_id,
        xp=0,
        level=1,
        current_streak=0,
        longest_streak=0,
        total_badges=0,
        created_at=stamp,
        last_active=stamp,
        theme=theme,
        theme_color=theme_color,
    )
    db.add(row)
    await db.flush()
    return User.model_validate(row)


async def update_user(db: AsyncSession, user_id: str, patch: UserPatch) -> User | None:
    """Apply the fields set on ``patch``. Returns the updated user or None."""
    fields = patch.model_dump(exclude_unset=True)
    if not fields:
        raise EmptyPatchError("user")
    if isinstance(fields.get("last_active"), datetime):
        fields["last_active"] = to_iso(fields["last_active"])
    await db.execute(update(models.User).where(models.User.id == user_id).values(**fields))
    return await get_user(db, user_id)


async def list_users_by_xp(db: AsyncSession) -> list[User]:
    """All users, highest XP first; equal XP keeps insertion order."""
    result = await db.execute(
        select(models.User)
        .order_by(models.User.xp.desc(), literal_column("users.rowid"))
        .execution_options(populate_existing=True)
    )
    return [User.model_validate(row) for row in result.scalars()]
