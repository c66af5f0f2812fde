"""Read-only access to seeded learning content."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.schemas import Lesson, Question, Quiz, Subject, Topic


async def list_subjects(db: AsyncSession) -> list[Subject]:
    result = await db.execute(select(models.Subject).order_by(models.Subject.order))
    return [Subject.model_validate(row) for row in result.scalars()]


async def get_subject(db: AsyncSession, subject_id: str) -> Subject | None:
    row = await db.get(models.Subject, subject_id)
    return Subject.model_validate(row) if row is not None else None


async def count_subjects(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(models.Subject))).scalar_one()


async def list_topics(db: AsyncSession, subject_id: str) -> list[Topic]:
    result = await db.execute(
        select(models.Topic).where(models.Topic.subject_id == subject_id).order_by(models.Topic.order)
    )
    return [Topic.model_validate(row) for row in result.scalars()]


async def get_topic(db: AsyncSession, topic_id: str) -> Topic | None:
    row = await db.get(models.Topic, topic_id)
    return Topic.model_validate(row) if row is not None else None


async def list_lessons(db: AsyncSession, topic_id: str) -> list[Lesson]:
    result = await db.execute(
        select(models.Lesson).where(models.Lesson.topic_id == topic_id).order_by(models.Lesson.order)
    )
    return [Lesson.model_validate(row) for row in result.scalars()]


async def get_lesson(db: AsyncSession, lesson_id: str) -> Lesson | None:
    row = await db.get(models.Lesson, lesson_id)
    return Lesson.model_validate(row) if row is not None else None


async def list_quizzes(db: AsyncSession, topic_id: str) -> list[Quiz]:
    result = await db.execute(select(models.Quiz).where(models.Quiz.topic_id == topic_id))
    return [Quiz.model_validate(row) for row in result.scalars()]


async def get_quiz(db: AsyncSession, quiz_id: str) -> Quiz | None:
    row = await db.get(models.Quiz, quiz_id)
    return Quiz.model_validate(row) if row is not None else None


async def list_questions(db: AsyncSession, quiz_id: str) -> list[Question]:
    result = await db.execute(
        select(models.Question).where(models.Question.quiz_id == quiz_id).order_by(models.Question.order)
    )
    return [Question.model_validate(row) for row in result.scalars()]
