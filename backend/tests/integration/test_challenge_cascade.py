"""
Integration tests for the challenge cascade.

Drives a full challenge through the session recorder and checks the end state
of every counter it touches.
"""

from datetime import datetime, timedelta, timezone

from app.domain.workouts import SessionSubmission
from app.models.challenge import Challenge, UserChallengeProgress
from app.models.user import User
from app.services.leaderboard_service import LeaderboardService
from app.services.session_service import SessionRecorder


def submit(recorder, user_id, program, task, total_reps):
    start = datetime.now(timezone.utc) - timedelta(minutes=5)
    return recorder.record_session(
        user_id,
        SessionSubmission(
            program_id=program.program_id,
            start_time=start,
            end_time=start + timedelta(minutes=3),
            total_reps=total_reps,
            total_duration=180,
            challenge_id=task.challenge_id,
            challenge_task_id=task.task_id,
        ),
    )


class TestChallengeCascade:
    """End-to-end challenge progression through recorded sessions."""

    def test_three_day_challenge(self, test_db, make_user, make_program, make_challenge):
        user = make_user()
        program = make_program(type="TARGET_REPS", target_reps=20, difficulty="INTERMEDIATE")
        challenge, tasks = make_challenge(task_scores=(10, 20, 30), points=100)
        recorder = SessionRecorder(test_db)

        # Failed attempt: recorded, counts usage, no progression
        failed = submit(recorder, user.user_id, program, tasks[0], total_reps=5)
        assert failed.completed is False
        assert failed.task_completion is None

        results = [submit(recorder, user.user_id, program, task, 25) for task in tasks]
        assert [r.points_awarded for r in results] == [10, 20, 30 + 100]
        assert results[-1].task_completion.challenge_completed is True

        # Repeating the final day changes nothing but attempts
        repeat = submit(recorder, user.user_id, program, tasks[2], 25)
        assert repeat.points_awarded == 0
        assert repeat.task_completion.attempts == 2

        test_db.expire_all()
        stored = test_db.query(Challenge).filter(Challenge.challenge_id == challenge.challenge_id).one()
        assert stored.participants == 1
        assert stored.completions == 1

        progress = test_db.query(UserChallengeProgress).one()
        assert progress.progress == 100
        assert progress.completed_at is not None

        assert test_db.query(User).filter(User.user_id == user.user_id).one().score == 160

        test_db.refresh(program)
        assert program.usage_count == 5

        rank = LeaderboardService(test_db).get_user_rank(user.user_id, "weekly")
        assert rank.rank == 1
        assert rank.score == 5 + 25 * 4
