"""Quiz attempts. Written once, never updated."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.common import new_id, to_iso, utc_now
from stemlearn.store.schemas import QuizAnswer, QuizAttempt


async def insert_attempt(
    db: AsyncSession,
    *,
    user_id: str,
    quiz_id: str,
    score: int,
    total_questions: int,
    correct_answers: int,
    time_spent_seconds: int,
    answers: list[QuizAnswer],
    completed_at: datetime | None = None,
) -> QuizAttempt:
    row = models.QuizAttempt(
        id=new_id("attempt"),
        user_id=user_id,
        quiz_id=quiz_id,
        score=score,
        total_questions=total_questions,
        correct_answers=correct_answers,
        time_spent_seconds=time_spent_seconds,
        completed_at=to_iso(completed_at or utc_now()),
        answers=[answer.model_dump(by_alias=True) for answer in answers],
    )
    db.add(row)
    await db.flush()
    return QuizAttempt.model_validate(row)


async def get_attempt(db: AsyncSession, attempt_id: str) -> QuizAttempt | None:
    row = await db.get(models.QuizAttempt, attempt_id)
    return QuizAttempt.model_validate(row) if row is not None else None


async def list_attempts(db: AsyncSession, user_id: str, quiz_id: str | None = None) -> list[QuizAttempt]:
    """A user's attempts, newest first."""
    stmt = select(models.QuizAttempt).where(models.QuizAttempt.user_id == user_id)
    if quiz_id is not None:
        stmt = stmt.where(models.QuizAttempt.quiz_id == quiz_id)
    result = await db.execute(stmt.order_by(models.QuizAttempt.completed_at.desc()))
    return [QuizAttempt.model_validate(row) for row in result.scalars()]
