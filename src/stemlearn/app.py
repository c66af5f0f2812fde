"""Command/query surface consumed by the UI.

``LearningApp`` owns the store client, the credential-backed session and
the per-user write locks. Every call opens its own session and commits
once, so multi-step flows (quiz submission, lesson completion) either
land completely or not at all.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from contextlib import asynccontextmanager
from datetime import date, datetime

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stemlearn.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from stemlearn.auth.session import CredentialStore, KeyringCredentialStore, SessionProvider
from stemlearn.config import Settings, get_settings
from stemlearn.content.seed import seed_if_empty
from stemlearn.database import Database
from stemlearn.db.migrate import run_migrations
from stemlearn.db.schema import ensure_schema, reset_if_incompatible
from stemlearn.errors import (
    DuplicateAccountError,
    InvalidRegistrationError,
    StoreInitializationError,
    StoreNotInitializedError,
)
from stemlearn.gamification import badge_service, leaderboard_service, streak_service, xp_service
from stemlearn.gamification.level_thresholds import compute_level
from stemlearn.gamification.locks import UserLocks
from stemlearn.log_setup import setup_logging
from stemlearn.store import attempts, badges, content, notifications, progress, users
from stemlearn.store.common import utc_now
from stemlearn.store.schemas import (
    Achievement,
    Badge,
    LeaderboardEntry,
    Lesson,
    LessonResult,
    LevelInfo,
    Notification,
    NotificationType,
    Question,
    Quiz,
    QuizAnswer,
    QuizAttempt,
    QuizResult,
    Registration,
    StreakUpdate,
    Subject,
    Topic,
    User,
    UserPatch,
    UserProgress,
    WeeklyStreakDay,
    XPAward,
)
from stemlearn.store.users import theme_color_for_gender

logger = structlog.get_logger()


def username_for_email(email: str) -> str:
    return email.split("@", 1)[0].lower()


class LearningApp:
    """Initialized once per process; every other call is gated on that."""

    def __init__(
        self,
        settings: Settings | None = None,
        credentials: CredentialStore | None = None,
        database: Database | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or get_settings()
        self.database = database or Database(self.settings.database_path)
        self.session = SessionProvider(credentials or KeyringCredentialStore(self.settings.keyring_service))
        self.locks = UserLocks()
        self._clock = clock
        self._session_started: float | None = None
        self._initialized = False

    # --- Lifecycle ---

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Reset-if-incompatible, ensure schema, migrate, seed. Idempotent."""
        if self._initialized:
            return
        path = self.database.path
        try:
            was_reset = await reset_if_incompatible(path)
            self.database.connect()
            await ensure_schema(self.database.engine)
            report = await run_migrations(self.database.engine)
            async with self.database.session() as db:
                seeded = await seed_if_empty(db)
        except StoreInitializationError:
            await self.database.dispose()
            raise
        except Exception as exc:
            await self.database.dispose()
            logger.exception("store_initialization_failed", path=str(path))
            msg = f"Could not initialize local store at {path}"
            raise StoreInitializationError(msg) from exc

        self._initialized = True
        logger.info(
            "store_initialized",
            path=str(path),
            reset=was_reset,
            version=report.to_version,
            seeded=seeded,
        )

    async def close(self) -> None:
        await self.database.dispose()
        self._initialized = False

    @asynccontextmanager
    async def _db(self) -> AsyncIterator[AsyncSession]:
        if not self._initialized:
            raise StoreNotInitializedError
        async with self.database.session() as db:
            yield db

    # --- Users ---

    async def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        age: int,
        gender: str,
        education_level: str,
        avatar_id: str,
        theme: str = "light",
        today: date | None = None,
    ) -> User:
        """Create an account, sign it in and record today's streak.

        Raises InvalidRegistrationError for bad input and
        DuplicateAccountError when the email or username is taken.
        """
        try:
            form = Registration(
                name=name,
                email=email,
                password=password,
                age=age,
                gender=gender,
                education_level=education_level,
                avatar_id=avatar_id,
                theme=theme,
            )
            validate_password_strength(form.password, self.settings.password_min_length)
        except ValidationError as exc:
            raise InvalidRegistrationError(_first_error(exc)) from exc
        except PasswordStrengthError as exc:
            raise InvalidRegistrationError(str(exc)) from exc

        normalized_email = form.email.lower()
        username = username_for_email(normalized_email)

        async with self._db() as db:
            if await users.get_user_by_email(db, normalized_email) is not None:
                raise DuplicateAccountError("email")
            if await users.get_user_by_username(db, username) is not None:
                raise DuplicateAccountError("username")
            try:
                user = await users.insert_user(
                    db,
                    name=form.name,
                    email=normalized_email,
                    username=username,
                    password_hash=hash_password(form.password),
                    age=form.age,
                    gender=form.gender,
                    education_level=form.education_level,
                    avatar_id=form.avatar_id,
                    theme=form.theme,
                    theme_color=theme_color_for_gender(form.gender),
                )
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                field = "email" if "email" in str(exc.orig) else "username"
                raise DuplicateAccountError(field) from exc

        logger.info("user_registered", user_id=user.id)
        await self.session.sign_in(user.id, normalized_email)
        await self.touch_streak(user.id, today=today)
        self.start_session()
        return await self.get_user(user.id) or user

    async def login(self, email: str, password: str, today: date | None = None) -> User | None:
        """Sign in by email and password. A mismatch on either returns None."""
        normalized_email = email.strip().lower()
        async with self._db() as db:
            user = await users.get_user_by_email(db, normalized_email)
            if user is None:
                return None
            stored = await users.get_password_hash(db, user.id)
            if not verify_password(password, stored):
                return None
            if check_needs_rehash(stored):
                await users.set_password_hash(db, user.id, hash_password(password))
            await users.update_user(db, user.id, UserPatch(last_active=utc_now()))
            await db.commit()

        await self.session.sign_in(user.id, normalized_email)
        await self.touch_streak(user.id, today=today)
        self.start_session()
        logger.info("user_logged_in", user_id=user.id)
        return await self.get_user(user.id)

    async def resume(self, today: date | None = None) -> User | None:
        """Restore the signed-in user on app start, if any."""
        user = await self.current_user()
        if user is None:
            return None
        async with self._db() as db:
            await users.update_user(db, user.id, UserPatch(last_active=utc_now()))
            await db.commit()
        await self.touch_streak(user.id, today=today)
        self.start_session()
        return await self.get_user(user.id)

    async def logout(self, today: date | None = None) -> None:
        user_id = await self.session.current_user_id()
        if user_id is not None:
            await self.end_session(user_id, today=today)
        await self.session.sign_out()

    async def current_user(self) -> User | None:
        user_id = await self.session.current_user_id()
        if user_id is None:
            return None
        return await self.get_user(user_id)

    async def get_user(self, user_id: str) -> User | None:
        async with self._db() as db:
            return await users.get_user(db, user_id)

    async def update_user(self, user_id: str, patch: UserPatch | None = None, **fields: object) -> User | None:
        """Apply a partial update. Unknown fields fail validation; an empty patch raises EmptyPatchError."""
        if patch is None:
            patch = UserPatch(**fields)
        async with self._db() as db:
            user = await users.update_user(db, user_id, patch)
            await db.commit()
        return user

    async def add_xp(self, user_id: str, amount: int) -> XPAward | None:
        """Grant XP and unlock any badges it qualifies for, in one transaction."""
        async with self.locks.for_user(user_id), self._db() as db:
            award = await xp_service.add_xp(db, user_id, amount)
            if award is not None:
                await badge_service.check_and_unlock_badges(db, user_id)
            await db.commit()
        return award

    async def level_info(self, user_id: str) -> LevelInfo | None:
        user = await self.get_user(user_id)
        if user is None:
            return None
        return LevelInfo(**compute_level(user.xp))

    # --- Sessions ---

    def start_session(self) -> None:
        self._session_started = self._clock()

    async def end_session(self, user_id: str, today: date | None = None) -> int:
        """Close the running session and credit its seconds to today. Returns seconds credited."""
        if self._session_started is None:
            return 0
        seconds = int(self._clock() - self._session_started)
        self._session_started = None
        async with self._db() as db:
            credited = await streak_service.record_session_duration(db, user_id, today or date.today(), seconds)
            await db.commit()
        return seconds if credited else 0

    # --- Content ---

    async def list_subjects(self) -> list[Subject]:
        async with self._db() as db:
            return await content.list_subjects(db)

    async def get_subject(self, subject_id: str) -> Subject | None:
        async with self._db() as db:
            return await content.get_subject(db, subject_id)

    async def list_topics(self, subject_id: str) -> list[Topic]:
        async with self._db() as db:
            return await content.list_topics(db, subject_id)

    async def get_topic(self, topic_id: str) -> Topic | None:
        async with self._db() as db:
            return await content.get_topic(db, topic_id)

    async def list_lessons(self, topic_id: str) -> list[Lesson]:
        async with self._db() as db:
            return await content.list_lessons(db, topic_id)

    async def get_lesson(self, lesson_id: str) -> Lesson | None:
        async with self._db() as db:
            return await content.get_lesson(db, lesson_id)

    async def list_quizzes(self, topic_id: str) -> list[Quiz]:
        async with self._db() as db:
            return await content.list_quizzes(db, topic_id)

    async def get_quiz(self, quiz_id: str) -> Quiz | None:
        async with self._db() as db:
            return await content.get_quiz(db, quiz_id)

    async def list_questions(self, quiz_id: str) -> list[Question]:
        async with self._db() as db:
            return await content.list_questions(db, quiz_id)

    # --- Progress ---

    async def update_progress(self, user_id: str, subject_id: str, topic_id: str, percentage: int) -> UserProgress:
        async with self._db() as db:
            row = await progress.upsert_progress(db, user_id, subject_id, topic_id, percentage)
            await db.commit()
        return row

    async def list_progress(self, user_id: str) -> list[UserProgress]:
        async with self._db() as db:
            return await progress.list_progress(db, user_id)

    # --- Streaks ---

    async def touch_streak(self, user_id: str, today: date | None = None) -> StreakUpdate | None:
        async with self.locks.for_user(user_id), self._db() as db:
            result = await streak_service.update_streak(
                db, user_id, today=today, daily_xp=self.settings.daily_streak_xp
            )
            if result is not None and result.created:
                await badge_service.check_and_unlock_badges(db, user_id)
            await db.commit()
        return result

    async def weekly_streak(self, user_id: str, today: date | None = None) -> list[WeeklyStreakDay]:
        async with self._db() as db:
            return await streak_service.weekly_streak(
                db, user_id, today=today, active_threshold_seconds=self.settings.active_day_threshold_seconds
            )

    # --- Badges ---

    async def list_badges(self) -> list[Badge]:
        async with self._db() as db:
            return await badges.list_badges(db)

    async def list_achievements(self, user_id: str) -> list[Achievement]:
        async with self._db() as db:
            return await badges.list_achievements(db, user_id)

    async def check_and_unlock_badges(self, user_id: str) -> list[Badge]:
        async with self.locks.for_user(user_id), self._db() as db:
            unlocked = await badge_service.check_and_unlock_badges(db, user_id)
            await db.commit()
        return unlocked

    # --- Leaderboard ---

    async def rebuild_leaderboard(self) -> int:
        async with self._db() as db:
            count = await leaderboard_service.rebuild_leaderboard(db)
            await db.commit()
        return count

    async def get_leaderboard(self, limit: int | None = None) -> list[LeaderboardEntry]:
        async with self._db() as db:
            if limit is None:
                limit = self.settings.leaderboard_default_limit
            return await leaderboard_service.get_leaderboard(db, limit)

    async def get_user_rank(self, user_id: str) -> int:
        async with self._db() as db:
            return await leaderboard_service.get_user_rank(db, user_id)

    # --- Quiz and lesson flows ---

    async def submit_quiz(
        self,
        user_id: str,
        quiz_id: str,
        answers: Iterable[QuizAnswer | Mapping[str, object]],
        time_spent_seconds: int = 0,
        completed_at: datetime | None = None,
    ) -> QuizResult | None:
        """Grade, record and reward one quiz session. Returns None for an unknown quiz or user.

        Scoring is ``round(correct / total * 100)`` over the quiz's stored
        questions; unanswered questions count as wrong.
        """
        submitted = [a if isinstance(a, QuizAnswer) else QuizAnswer.model_validate(a) for a in answers]

        async with self.locks.for_user(user_id), self._db() as db:
            quiz = await content.get_quiz(db, quiz_id)
            if quiz is None or await users.get_user(db, user_id) is None:
                return None
            questions = await content.list_questions(db, quiz_id)
            by_question = {a.question_id: a for a in submitted}

            graded: list[QuizAnswer] = []
            for question in questions:
                answer = by_question.get(question.id)
                if answer is None:
                    continue
                graded.append(
                    answer.model_copy(update={"is_correct": answer.selected_option_id == question.correct_answer_id})
                )
            correct = sum(1 for a in graded if a.is_correct)
            total = len(questions)
            score = round(correct / total * 100) if total else 0

            attempt = await attempts.insert_attempt(
                db,
                user_id=user_id,
                quiz_id=quiz_id,
                score=score,
                total_questions=total,
                correct_answers=correct,
                time_spent_seconds=time_spent_seconds,
                answers=graded,
                completed_at=completed_at,
            )

            passed = score >= quiz.passing_score
            perfect = total > 0 and score == 100
            xp_awarded = 0
            if passed:
                reward = xp_service.quiz_reward(quiz.difficulty, quiz.xp_reward)
                await xp_service.add_xp(db, user_id, reward)
                xp_awarded += reward
                if perfect and self.settings.perfect_quiz_bonus_xp > 0:
                    await xp_service.add_xp(db, user_id, self.settings.perfect_quiz_bonus_xp)
                    xp_awarded += self.settings.perfect_quiz_bonus_xp
                await notifications.create_notification(
                    db,
                    user_id,
                    title="Quiz Passed!",
                    message=f"You scored {score}% on {quiz.title} and earned {xp_awarded} XP",
                    type_="quiz",
                )

            new_badges = await badge_service.check_and_unlock_badges(db, user_id)
            await leaderboard_service.rebuild_leaderboard(db)
            rank = await leaderboard_service.get_user_rank(db, user_id)
            await db.commit()

        logger.info("quiz_submitted", user_id=user_id, quiz_id=quiz_id, score=score, passed=passed)
        return QuizResult(
            attempt=attempt,
            passed=passed,
            xp_awarded=xp_awarded,
            perfect=perfect,
            new_badges=new_badges,
            rank=rank,
        )

    async def complete_lesson(self, user_id: str, lesson_id: str) -> LessonResult | None:
        """Award lesson XP, mark its topic complete and refresh rankings, in one transaction."""
        async with self.locks.for_user(user_id), self._db() as db:
            lesson = await content.get_lesson(db, lesson_id)
            if lesson is None:
                return None
            reward = lesson.xp_reward or self.settings.lesson_complete_xp
            award = await xp_service.add_xp(db, user_id, reward)
            if award is None:
                return None
            topic = await content.get_topic(db, lesson.topic_id)
            if topic is not None:
                await progress.upsert_progress(db, user_id, topic.subject_id, topic.id, 100)
            new_badges = await badge_service.check_and_unlock_badges(db, user_id)
            await leaderboard_service.rebuild_leaderboard(db)
            rank = await leaderboard_service.get_user_rank(db, user_id)
            await db.commit()

        return LessonResult(lesson_id=lesson_id, xp_awarded=reward, award=award, new_badges=new_badges, rank=rank)

    async def list_quiz_attempts(self, user_id: str, quiz_id: str | None = None) -> list[QuizAttempt]:
        async with self._db() as db:
            return await attempts.list_attempts(db, user_id, quiz_id)

    async def get_quiz_attempt(self, attempt_id: str) -> QuizAttempt | None:
        async with self._db() as db:
            return await attempts.get_attempt(db, attempt_id)

    # --- Notifications ---

    async def create_notification(
        self, user_id: str, title: str, message: str, type_: NotificationType = "general"
    ) -> Notification:
        async with self._db() as db:
            created = await notifications.create_notification(db, user_id, title, message, type_)
            await db.commit()
        return created

    async def list_notifications(self, user_id: str) -> list[Notification]:
        async with self._db() as db:
            return await notifications.list_notifications(db, user_id)

    async def unread_notification_count(self, user_id: str) -> int:
        async with self._db() as db:
            return await notifications.unread_count(db, user_id)

    async def mark_notification_read(self, notification_id: str) -> bool:
        async with self._db() as db:
            changed = await notifications.mark_read(db, notification_id)
            await db.commit()
        return changed

    async def mark_all_notifications_read(self, user_id: str) -> int:
        async with self._db() as db:
            changed = await notifications.mark_all_read(db, user_id)
            await db.commit()
        return changed

    async def delete_notification(self, notification_id: str) -> bool:
        async with self._db() as db:
            deleted = await notifications.delete_notification(db, notification_id)
            await db.commit()
        return deleted

    async def clear_notifications(self, user_id: str) -> int:
        async with self._db() as db:
            cleared = await notifications.clear_all(db, user_id)
            await db.commit()
        return cleared


def create_app(settings: Settings | None = None, credentials: CredentialStore | None = None) -> LearningApp:
    """Create and configure the application. Call ``initialize()`` before use."""
    settings = settings or get_settings()
    setup_logging(settings)
    return LearningApp(settings=settings, credentials=credentials)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "invalid value")

