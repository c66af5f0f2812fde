"""Remap coarse education levels to the grade/form format.

Revision: 8
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

revision = 8
description = "education level format"

LEGACY_EDUCATION_LEVELS: dict[str, str] = {
    "primary": "1",
    "secondary": "form1",
    "undergraduate": "none",
    "masters": "none",
    "phd": "none",
}


def remap_education_level(value: str | None) -> str:
    if value is None:
        return "none"
    return LEGACY_EDUCATION_LEVELS.get(value, value)


async def upgrade(conn: AsyncConnection) -> None:
    for legacy, current in LEGACY_EDUCATION_LEVELS.items():
        await conn.execute(
            text('UPDATE users SET "educationLevel" = :current WHERE "educationLevel" = :legacy'),
            {"current": current, "legacy": legacy},
        )
    await conn.execute(text('UPDATE users SET "educationLevel" = \'none\' WHERE "educationLevel" IS NULL'))
