"""Reference catalog: subjects, topics, lessons, quizzes, questions and badges.

Seeding runs once per store. If any subject exists the whole graph is
assumed present; otherwise every row goes in with INSERT OR IGNORE so an
interrupted seed can simply be repeated.
"""

from __future__ import annotations

import logging

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.db import models
from stemlearn.store.content import count_subjects

logger = logging.getLogger(__name__)

SUBJECT_SEED_DATA: list[dict] = [
    {
        "id": "sci",
        "name": "Science",
        "category": "science",
        "description": "Explore biology, chemistry, physics, and earth science",
        "icon": "science",
        "color": "#3b82f6",
        "total_topics": 5,
        "order": 1,
    },
    {
        "id": "tech",
        "name": "Technology",
        "category": "technology",
        "description": "Learn programming, web development, and digital literacy",
        "icon": "computer",
        "color": "#22c55e",
        "total_topics": 5,
        "order": 2,
    },
    {
        "id": "eng",
        "name": "Engineering",
        "category": "engineering",
        "description": "Discover mechanical, electrical, and civil engineering",
        "icon": "build",
        "color": "#a855f7",
        "total_topics": 5,
        "order": 3,
    },
    {
        "id": "math",
        "name": "Mathematics",
        "category": "mathematics",
        "description": "Master algebra, geometry, calculus, and statistics",
        "icon": "calculate",
        "color": "#ef4444",
        "total_topics": 5,
        "order": 4,
    },
]

TOPIC_SEED_DATA: list[dict] = [
    # Science
    {"id": "sci-topic-001", "subject_id": "sci", "title": "The Cell",
     "description": "Cell structure and function", "difficulty": "beginner", "estimated_minutes": 30, "order": 1},
    {"id": "sci-topic-002", "subject_id": "sci", "title": "Photosynthesis",
     "description": "How plants make food", "difficulty": "beginner", "estimated_minutes": 25, "order": 2},
    # Technology
    {"id": "tech-topic-001", "subject_id": "tech", "title": "Intro to Programming",
     "description": "Learn coding basics", "difficulty": "beginner", "estimated_minutes": 40, "order": 1},
    {"id": "tech-topic-002", "subject_id": "tech", "title": "HTML & CSS",
     "description": "Build web pages", "difficulty": "beginner", "estimated_minutes": 50, "order": 2},
    # Engineering
    {"id": "eng-topic-001", "subject_id": "eng", "title": "Simple Machines",
     "description": "Levers, pulleys, planes", "difficulty": "beginner", "estimated_minutes": 35, "order": 1},
    # Mathematics
    {"id": "math-topic-001", "subject_id": "math", "title": "Fractions",
     "description": "Parts of numbers", "difficulty": "beginner", "estimated_minutes": 30, "order": 1},
]

LESSON_SEED_DATA: list[dict] = [
    {
        "id": "sci-topic-001-lesson-001",
        "topic_id": "sci-topic-001",
        "title": "Cell Structure",
        "content": "Cells are the basic building blocks of all living things...",
        "xp_reward": 50,
        "order": 1,
    },
    {
        "id": "tech-topic-001-lesson-001",
        "topic_id": "tech-topic-001",
        "title": "What is Programming?",
        "content": "Programming is creating instructions for computers...",
        "xp_reward": 50,
        "order": 1,
    },
]

QUIZ_SEED_DATA: list[dict] = [
    {
        "id": "sci-topic-001-quiz-001",
        "topic_id": "sci-topic-001",
        "title": "Cell Structure Quiz",
        "description": "Test your knowledge",
        "difficulty": "beginner",
        "total_questions": 5,
        "passing_score": 70,
        "xp_reward": 75,
    },
]

QUESTION_SEED_DATA: list[dict] = [
    {
        "id": "q1",
        "quiz_id": "sci-topic-001-quiz-001",
        "question_text": "What is the basic unit of life?",
        "question_type": "multiple_choice",
        "options": [
            {"id": "a", "text": "Cell", "isCorrect": True},
            {"id": "b", "text": "Atom", "isCorrect": False},
        ],
        "correct_answer_id": "a",
        "difficulty": "beginner",
        "order": 1,
    },
]

BADGE_SEED_DATA: list[dict] = [
    {
        "id": "badge-first-steps",
        "name": "First Steps",
        "description": "Complete first lesson",
        "icon": "emoji-events",
        "category": "general",
        "requirement": "Complete 1 lesson",
        "xp_required": 0,
    },
    {
        "id": "badge-science-star",
        "name": "Science Star",
        "description": "Earn 500 XP in Science",
        "icon": "science",
        "category": "science",
        "requirement": "Earn 500 XP",
        "xp_required": 500,
    },
]

# Parents before children so foreign keys resolve.
SEED_PLAN: tuple[tuple[type[models.Base], list[dict]], ...] = (
    (models.Subject, SUBJECT_SEED_DATA),
    (models.Topic, TOPIC_SEED_DATA),
    (models.Lesson, LESSON_SEED_DATA),
    (models.Quiz, QUIZ_SEED_DATA),
    (models.Question, QUESTION_SEED_DATA),
    (models.Badge, BADGE_SEED_DATA),
)


async def seed_catalog(db: AsyncSession) -> int:
    """Insert every catalog row, ignoring ones already present. Returns rows written."""
    written = 0
    for model, rows in SEED_PLAN:
        for data in rows:
            stmt = sqlite_insert(model).values(**data).on_conflict_do_nothing()
            result = await db.execute(stmt)
            written += result.rowcount or 0
    return written


async def seed_if_empty(db: AsyncSession) -> bool:
    """Seed the catalog unless subjects already exist. Returns True if seeding ran."""
    if await count_subjects(db) > 0:
        logger.info("Catalog already seeded, skipping")
        return False
    written = await seed_catalog(db)
    await db.commit()
    logger.info("Seeded %d catalog rows", written)
    return True
