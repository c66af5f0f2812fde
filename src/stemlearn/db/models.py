"""ORM models for the local store.

Storage column names keep the camelCase names that shipped in every
historical schema version, so databases written by older releases load
without renames. Python attributes are snake_case; the first argument to
``mapped_column`` is the on-disk name.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from stemlearn.db.base import Base


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Identity plus mutable gamification state."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(Text, unique=True, nullable=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(Text, nullable=False)
    education_level: Mapped[str] = mapped_column("educationLevel", Text, nullable=False)
    avatar_id: Mapped[str] = mapped_column("avatarId", Text, nullable=False)
    xp: Mapped[int] = mapped_column(Integer, server_default="0", default=0)
    level: Mapped[int] = mapped_column(Integer, server_default="1", default=1)
    current_streak: Mapped[int] = mapped_column("currentStreak", Integer, server_default="0", default=0)
    longest_streak: Mapped[int] = mapped_column("longestStreak", Integer, server_default="0", default=0)
    total_badges: Mapped[int] = mapped_column("totalBadges", Integer, server_default="0", default=0)
    created_at: Mapped[str] = mapped_column("createdAt", Text, nullable=False)
    last_active: Mapped[str] = mapped_column("lastActive", Text, nullable=False)
    theme: Mapped[str | None] = mapped_column(Text, server_default="light", default="light")
    theme_color: Mapped[str | None] = mapped_column("themeColor", Text, nullable=True)


# ---------------------------------------------------------------------------
# Content (immutable after seeding)
# ---------------------------------------------------------------------------


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[str] = mapped_column(Text, nullable=False)
    total_topics: Mapped[int] = mapped_column("totalTopics", Integer, server_default="0", default=0)
    order: Mapped[int] = mapped_column("order", Integer, server_default="0", default=0)


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    subject_id: Mapped[str] = mapped_column("subjectId", Text, ForeignKey("subjects.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(Text, nullable=False)
    estimated_minutes: Mapped[int] = mapped_column("estimatedMinutes", Integer, server_default="30", default=30)
    order: Mapped[int] = mapped_column("order", Integer, server_default="0", default=0)
    prerequisite_topic_ids: Mapped[list[str] | None] = mapped_column("prerequisiteTopicIds", JSON, nullable=True)


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    topic_id: Mapped[str] = mapped_column("topicId", Text, ForeignKey("topics.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    media_type: Mapped[str | None] = mapped_column("mediaType", Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column("mediaUrl", Text, nullable=True)
    xp_reward: Mapped[int] = mapped_column("xpReward", Integer, server_default="50", default=50)
    order: Mapped[int] = mapped_column("order", Integer, server_default="0", default=0)


class Quiz(Base):
    __tablename__ = "quizzes"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    topic_id: Mapped[str] = mapped_column("topicId", Text, ForeignKey("topics.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(Text, nullable=False)
    total_questions: Mapped[int] = mapped_column("totalQuestions", Integer, server_default="0", default=0)
    passing_score: Mapped[int] = mapped_column("passingScore", Integer, server_default="70", default=70)
    xp_reward: Mapped[int] = mapped_column("xpReward", Integer, server_default="100", default=100)
    time_limit: Mapped[int | None] = mapped_column("timeLimit", Integer, nullable=True)


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    quiz_id: Mapped[str] = mapped_column("quizId", Text, ForeignKey("quizzes.id"), nullable=False)
    question_text: Mapped[str] = mapped_column("questionText", Text, nullable=False)
    question_type: Mapped[str] = mapped_column("questionType", Text, nullable=False)
    options: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    correct_answer_id: Mapped[str] = mapped_column("correctAnswerId", Text, nullable=False)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    difficulty: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, server_default="0", default=0)


class Badge(Base):
    """Badge catalog entry. Seeded, never edited at runtime."""

    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    requirement: Mapped[str] = mapped_column(Text, nullable=False)
    xp_required: Mapped[int | None] = mapped_column("xpRequired", Integer, server_default="0", default=0)


# ---------------------------------------------------------------------------
# User activity
# ---------------------------------------------------------------------------


class QuizAttempt(Base):
    """Immutable record of one completed quiz session."""

    __tablename__ = "quiz_attempts"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[str] = mapped_column("userId", Text, ForeignKey("users.id"), nullable=False)
    quiz_id: Mapped[str] = mapped_column("quizId", Text, ForeignKey("quizzes.id"), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    total_questions: Mapped[int] = mapped_column("totalQuestions", Integer, nullable=False)
    correct_answers: Mapped[int] = mapped_column("correctAnswers", Integer, nullable=False)
    time_spent_seconds: Mapped[int] = mapped_column("timeSpentSeconds", Integer, server_default="0", default=0)
    completed_at: Mapped[str] = mapped_column("completedAt", Text, nullable=False)
    answers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)


class Achievement(Base):
    """One user has unlocked one badge. Unique per (user, badge)."""

    __tablename__ = "achievements"
    __table_args__ = (
        Index("uq_achievements_user_badge", "userId", "badgeId", unique=True),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[str] = mapped_column("userId", Text, ForeignKey("users.id"), nullable=False)
    badge_id: Mapped[str] = mapped_column("badgeId", Text, ForeignKey("badges.id"), nullable=False)
    earned_at: Mapped[str | None] = mapped_column("earnedAt", Text, nullable=True)
    progress: Mapped[int] = mapped_column(Integer, server_default="0", default=0)


class UserProgress(Base):
    """Per-(user, topic) completion tracker, upserted."""

    __tablename__ = "user_progress"
    __table_args__ = (
        Index("uq_user_progress_user_topic", "userId", "topicId", unique=True),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[str] = mapped_column("userId", Text, ForeignKey("users.id"), nullable=False)
    subject_id: Mapped[str] = mapped_column("subjectId", Text, ForeignKey("subjects.id"), nullable=False)
    topic_id: Mapped[str] = mapped_column("topicId", Text, ForeignKey("topics.id"), nullable=False)
    completion_percentage: Mapped[int] = mapped_column(
        "completionPercentage", Integer, server_default="0", default=0
    )
    last_accessed_at: Mapped[str] = mapped_column("lastAccessedAt", Text, nullable=False)
    time_spent_minutes: Mapped[int] = mapped_column("timeSpentMinutes", Integer, server_default="0", default=0)


class Streak(Base):
    """Daily activity marker, one row per (user, calendar date)."""

    __tablename__ = "streaks"
    __table_args__ = (
        Index("uq_streaks_user_date", "userId", "date", unique=True),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[str] = mapped_column("userId", Text, ForeignKey("users.id"), nullable=False)
    date: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, server_default="0", default=False)
    xp_earned: Mapped[int] = mapped_column("xpEarned", Integer, server_default="0", default=0)
    active_seconds: Mapped[int] = mapped_column("activeSeconds", Integer, server_default="0", default=0)


class LeaderboardEntry(Base):
    """Derived ranking snapshot, regenerated on every rebuild."""

    __tablename__ = "leaderboard"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[str] = mapped_column("userId", Text, ForeignKey("users.id"), nullable=False)
    user_name: Mapped[str] = mapped_column("userName", Text, nullable=False)
    avatar_id: Mapped[str] = mapped_column("avatarId", Text, nullable=False)
    total_xp: Mapped[int] = mapped_column("totalXp", Integer, server_default="0", default=0)
    level: Mapped[int] = mapped_column(Integer, server_default="1", default=1)
    rank: Mapped[int] = mapped_column(Integer, server_default="0", default=0)
    weekly_xp: Mapped[int] = mapped_column("weeklyXp", Integer, server_default="0", default=0)


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[str] = mapped_column("userId", Text, ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, server_default="0", default=False)
    created_at: Mapped[str] = mapped_column("createdAt", Text, nullable=False)


# ---------------------------------------------------------------------------
# Schema version
# ---------------------------------------------------------------------------


class DatabaseVersion(Base):
    """Single-row table holding the applied schema version."""

    __tablename__ = "database_version"

    version: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

