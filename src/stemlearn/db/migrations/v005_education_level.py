"""Add users.educationLevel and backfill it from the legacy gradeLevel.

Grades "1" through "7" carry over as-is, "Form 1".."Form 5" style values
collapse to ``form1``..``form5``, anything else becomes ``none``.

Revision: 5
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from stemlearn.db.migrations.helpers import add_column_if_missing, has_column

revision = 5
description = "users.educationLevel from gradeLevel"

_GRADES = {str(n) for n in range(1, 8)}
_FORMS = {f"form{n}" for n in range(1, 6)}


def education_level_from_grade(grade: str | None) -> str:
    if grade is None:
        return "none"
    value = str(grade).strip()
    if value in _GRADES:
        return value
    compact = value.lower().replace(" ", "")
    if compact in _FORMS:
        return compact
    return "none"


async def upgrade(conn: AsyncConnection) -> None:
    await add_column_if_missing(conn, "users", "educationLevel", "TEXT")

    if not await has_column(conn, "users", "gradeLevel"):
        await conn.execute(text('UPDATE users SET "educationLevel" = \'none\' WHERE "educationLevel" IS NULL'))
        return

    rows = await conn.execute(text('SELECT id, "gradeLevel" FROM users WHERE "educationLevel" IS NULL'))
    for user_id, grade in rows.all():
        await conn.execute(
            text('UPDATE users SET "educationLevel" = :level WHERE id = :id'),
            {"level": education_level_from_grade(grade), "id": user_id},
        )
