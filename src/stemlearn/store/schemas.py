"""Entity, patch and input models for the record store.

Every row leaves the store through one of the entity models below, so the
camelCase storage columns never reach callers. Patch models list only the
fields a caller may change and reject anything else.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Gender = Literal["male", "female"]
EducationLevel = Literal[
    "1", "2", "3", "4", "5", "6", "7",
    "form1", "form2", "form3", "form4", "form5",
    "none",
]
Theme = Literal["light", "dark", "auto"]
SubjectCategory = Literal["science", "technology", "engineering", "mathematics"]
Difficulty = Literal["beginner", "intermediate", "advanced", "expert"]
QuestionType = Literal["multiple_choice", "true_false", "fill_blank"]
MediaType = Literal["image", "video", "animation"]
NotificationType = Literal["badge", "quiz", "streak", "lesson", "leaderboard", "general"]


class Entity(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)


# --- Users ---


class User(Entity):
    id: str
    name: str
    email: str | None = None
    username: str | None = None
    age: int
    gender: str
    education_level: str = "none"
    avatar_id: str
    xp: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    total_badges: int = 0
    created_at: dt.datetime
    last_active: dt.datetime
    theme: str | None = "light"
    theme_color: str | None = None


class Registration(BaseModel):
    """Sign-up form as submitted by the UI.

    Identity fields are trimmed; the password is kept byte-for-byte so that
    the value hashed here is the value ``login`` later verifies.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str
    age: int = Field(ge=10, le=20)
    gender: Gender
    education_level: EducationLevel
    avatar_id: str = Field(min_length=1)
    theme: Theme = "light"

    @field_validator("name", "email", "avatar_id", mode="before")
    @classmethod
    def strip_identity_fields(cls, v: object) -> object:
        """Trim identity fields; the password is left alone."""
        return v.strip() if isinstance(v, str) else v


class UserPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    age: int | None = Field(default=None, ge=10, le=20)
    gender: Gender | None = None
    education_level: EducationLevel | None = None
    avatar_id: str | None = None
    theme: Theme | None = None
    theme_color: str | None = None
    last_active: dt.datetime | None = None

    @model_validator(mode="after")
    def reject_cleared_required_fields(self) -> UserPatch:
        # theme and theme_color may be reset to null; the rest are NOT NULL columns
        cleared = [
            name
            for name in ("name", "age", "gender", "education_level", "avatar_id", "last_active")
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"cannot clear required field(s): {', '.join(cleared)}")
        return self


# --- Content ---


class Subject(Entity):
    id: str
    name: str
    category: SubjectCategory
    description: str
    icon: str
    color: str
    total_topics: int
    order: int


class Topic(Entity):
    id: str
    subject_id: str
    title: str
    description: str
    difficulty: Difficulty
    estimated_minutes: int
    order: int
    prerequisite_topic_ids: list[str] = Field(default_factory=list)

    @field_validator("prerequisite_topic_ids", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return [] if value is None else value


class Lesson(Entity):
    id: str
    topic_id: str
    title: str
    content: str
    media_type: MediaType | None = None
    media_url: str | None = None
    xp_reward: int
    order: int


class Quiz(Entity):
    id: str
    topic_id: str
    title: str
    description: str
    difficulty: Difficulty
    total_questions: int
    passing_score: int
    xp_reward: int
    time_limit: int | None = None


class QuestionOption(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    text: str
    is_correct: bool = Field(alias="isCorrect")


class Question(Entity):
    id: str
    quiz_id: str
    question_text: str
    question_type: QuestionType
    options: list[QuestionOption]
    correct_answer_id: str
    explanation: str | None = None
    difficulty: Difficulty
    order: int


class Badge(Entity):
    id: str
    name: str
    description: str
    icon: str
    category: str
    requirement: str
    xp_required: int | None = None


# --- Activity ---


class QuizAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question_id: str = Field(alias="questionId")
    selected_option_id: str = Field(alias="selectedOptionId")
    is_correct: bool = Field(default=False, alias="isCorrect")
    time_spent_seconds: int = Field(default=0, ge=0, alias="timeSpentSeconds")


class QuizAttempt(Entity):
    id: str
    user_id: str
    quiz_id: str
    score: int
    total_questions: int
    correct_answers: int
    time_spent_seconds: int
    completed_at: dt.datetime
    answers: list[QuizAnswer]


class Achievement(Entity):
    id: str
    user_id: str
    badge_id: str
    earned_at: dt.datetime | None = None
    progress: int = 0


class UserProgress(Entity):
    id: str
    user_id: str
    subject_id: str
    topic_id: str
    completion_percentage: int
    last_accessed_at: dt.datetime
    time_spent_minutes: int = 0


class Streak(Entity):
    id: str
    user_id: str
    date: dt.date
    completed: bool
    xp_earned: int
    active_seconds: int = 0


class LeaderboardEntry(Entity):
    id: str
    user_id: str
    user_name: str
    avatar_id: str
    total_xp: int
    level: int
    rank: int
    weekly_xp: int = 0


class Notification(Entity):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    read: bool
    created_at: dt.datetime


# --- Derived views ---


class LevelInfo(BaseModel):
    level: int
    title: str
    xp_into_level: int
    xp_for_level: int
    next_level: int
    next_title: str
    progress: float


class XPAward(BaseModel):
    """Outcome of one XP grant."""

    user_id: str
    amount: int
    total_xp: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


class StreakUpdate(BaseModel):
    created: bool
    current_streak: int
    longest_streak: int
    xp_awarded: int = 0


class WeeklyStreakDay(BaseModel):
    day: str
    date: dt.date
    completed: bool
    was_active_for_three_minutes: bool


class QuizResult(BaseModel):
    attempt: QuizAttempt
    passed: bool
    xp_awarded: int
    perfect: bool
    new_badges: list[Badge] = Field(default_factory=list)
    rank: int = 0


class LessonResult(BaseModel):
    lesson_id: str
    xp_awarded: int
    award: XPAward
    new_badges: list[Badge] = Field(default_factory=list)
    rank: int = 0
