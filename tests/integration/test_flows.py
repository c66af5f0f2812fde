"""Quiz submission, lesson completion and progress tracking."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from stemlearn.store.schemas import QuizAnswer

pytestmark = pytest.mark.asyncio

QUIZ_ID = "sci-topic-001-quiz-001"
LESSON_ID = "sci-topic-001-lesson-001"


class TestSubmitQuiz:
    async def test_perfect_score(self, app, user):
        result = await app.submit_quiz(
            user.id, QUIZ_ID, [QuizAnswer(question_id="q1", selected_option_id="a")], time_spent_seconds=42
        )

        assert result.passed
        assert result.perfect
        assert result.attempt.score == 100
        assert result.attempt.correct_answers == 1
        assert result.attempt.total_questions == 1
        assert result.attempt.time_spent_seconds == 42
        assert result.xp_awarded == 125
        assert result.rank == 1
        assert "badge-first-steps" in {b.id for b in result.new_badges}

        refreshed = await app.get_user(user.id)
        assert refreshed.xp == 125
        assert refreshed.level == 2

        board = await app.get_leaderboard()
        assert board[0].total_xp == 125

    async def test_quiz_notification(self, app, user):
        await app.submit_quiz(user.id, QUIZ_ID, [QuizAnswer(question_id="q1", selected_option_id="a")])
        quiz_notes = [n for n in await app.list_notifications(user.id) if n.type == "quiz"]
        assert len(quiz_notes) == 1
        assert "100%" in quiz_notes[0].message

    async def test_failed_attempt_recorded_without_xp(self, app, user):
        result = await app.submit_quiz(user.id, QUIZ_ID, [QuizAnswer(question_id="q1", selected_option_id="b")])

        assert not result.passed
        assert not result.perfect
        assert result.attempt.score == 0
        assert result.xp_awarded == 0
        assert (await app.get_user(user.id)).xp == 0
        assert len(await app.list_quiz_attempts(user.id)) == 1
        assert [n for n in await app.list_notifications(user.id) if n.type == "quiz"] == []

    async def test_client_correctness_flag_ignored(self, app, user):
        result = await app.submit_quiz(
            user.id,
            QUIZ_ID,
            [{"questionId": "q1", "selectedOptionId": "b", "isCorrect": True, "timeSpentSeconds": 5}],
        )
        assert result.attempt.score == 0
        answer = result.attempt.answers[0]
        assert answer.is_correct is False
        assert answer.selected_option_id == "b"
        assert answer.time_spent_seconds == 5

    async def test_unanswered_counts_as_wrong(self, app, user):
        result = await app.submit_quiz(user.id, QUIZ_ID, [])
        assert result.attempt.score == 0
        assert result.attempt.answers == []

    async def test_answers_for_other_questions_dropped(self, app, user):
        result = await app.submit_quiz(
            user.id,
            QUIZ_ID,
            [
                QuizAnswer(question_id="q1", selected_option_id="a"),
                QuizAnswer(question_id="q-foreign", selected_option_id="a"),
            ],
        )
        assert [a.question_id for a in result.attempt.answers] == ["q1"]

    async def test_unknown_quiz_or_user(self, app, user):
        assert await app.submit_quiz(user.id, "quiz-missing", []) is None
        assert await app.submit_quiz("user-missing", QUIZ_ID, []) is None
        assert await app.list_quiz_attempts(user.id) == []

    async def test_attempts_newest_first(self, app, user):
        earlier = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
        older = await app.submit_quiz(user.id, QUIZ_ID, [], completed_at=earlier)
        newer = await app.submit_quiz(user.id, QUIZ_ID, [], completed_at=earlier + timedelta(hours=2))

        listed = await app.list_quiz_attempts(user.id, QUIZ_ID)
        assert [a.id for a in listed] == [newer.attempt.id, older.attempt.id]

        fetched = await app.get_quiz_attempt(older.attempt.id)
        assert fetched.completed_at == earlier
        assert await app.get_quiz_attempt("attempt-missing") is None


class TestCompleteLesson:
    async def test_awards_xp_and_marks_topic(self, app, user):
        result = await app.complete_lesson(user.id, LESSON_ID)

        assert result.xp_awarded == 50
        assert result.award.total_xp == 50
        assert result.rank == 1

        progress = await app.list_progress(user.id)
        assert len(progress) == 1
        assert progress[0].topic_id == "sci-topic-001"
        assert progress[0].subject_id == "sci"
        assert progress[0].completion_percentage == 100

    async def test_repeat_keeps_single_progress_row(self, app, user):
        await app.complete_lesson(user.id, LESSON_ID)
        await app.complete_lesson(user.id, LESSON_ID)
        assert len(await app.list_progress(user.id)) == 1
        assert (await app.get_user(user.id)).xp == 100

    async def test_unknown_lesson_or_user(self, app, user):
        assert await app.complete_lesson(user.id, "lesson-missing") is None
        assert await app.complete_lesson("user-missing", LESSON_ID) is None


class TestProgress:
    async def test_percentage_clamped(self, app, user):
        high = await app.update_progress(user.id, "sci", "sci-topic-002", 140)
        assert high.completion_percentage == 100

        low = await app.update_progress(user.id, "sci", "sci-topic-002", -5)
        assert low.completion_percentage == 0
        assert low.id == high.id
        assert len(await app.list_progress(user.id)) == 1


class TestSessionLifecycle:
    async def test_logout_credits_session_time(self, app, clock):
        day = date(2024, 3, 6)
        await app.register(
            name="Grace",
            email="grace@example.com",
            password="cobol59",
            age=15,
            gender="female",
            education_level="form3",
            avatar_id="avatar-2",
            today=day,
        )
        clock.advance(200)
        await app.logout(today=day)

        week = await app.weekly_streak((await app.login("grace@example.com", "cobol59", today=day)).id, today=day)
        wednesday = week[2]
        assert wednesday.completed
        assert wednesday.was_active_for_three_minutes
