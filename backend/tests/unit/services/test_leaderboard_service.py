"""
Unit tests for LeaderboardService.

Tests ranking order, tie-breaks, period windows, unranked users, nearby
bands, podium badges and challenge boards.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from uuid import uuid4

import pytest

from app.domain.errors import NotFoundError
from app.services.leaderboard_service import (
    LeaderboardService,
    get_period_start,
    percentile_for,
)
from app.services.progression_service import ChallengeProgressionTracker

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def board(test_db, make_user, make_program, make_session):
    """Five users with all-time scores 50, 40, 30, 20, 10."""
    program = make_program()
    users = []
    for i, score in enumerate((50, 40, 30, 20, 10)):
        user = make_user(name=f"User {i}")
        make_session(user.user_id, program, start_time=NOW - timedelta(hours=1), total_reps=score)
        users.append(user)
    return users, program


class TestPeriodWindows:
    """Tests for get_period_start."""

    def test_daily_starts_at_midnight(self):
        assert get_period_start("daily", NOW) == datetime(2024, 6, 15, tzinfo=timezone.utc)

    def test_rolling_windows(self):
        assert get_period_start("weekly", NOW) == NOW - timedelta(days=7)
        assert get_period_start("monthly", NOW) == NOW - timedelta(days=30)

    def test_all_time_unbounded(self):
        assert get_period_start("all-time", NOW) is None

    def test_unknown_period_raises(self):
        with pytest.raises(ValueError):
            get_period_start("yearly", NOW)


class TestGetLeaderboard:
    """Tests for ranking order."""

    def test_sorted_descending_by_score(self, test_db, board):
        entries = LeaderboardService(test_db).get_leaderboard("all-time", now=NOW)

        assert [e.score for e in entries] == [50, 40, 30, 20, 10]
        assert [e.rank for e in entries] == [1, 2, 3, 4, 5]

    def test_scores_summed_per_user(self, test_db, make_user, make_program, make_session):
        program = make_program()
        user = make_user()
        make_session(user.user_id, program, start_time=NOW, total_reps=15)
        make_session(user.user_id, program, start_time=NOW, total_reps=25)

        entries = LeaderboardService(test_db).get_leaderboard("all-time", now=NOW)
        assert entries[0].score == 40

    def test_ties_broken_by_user_id(self, test_db, make_user, make_program, make_session):
        program = make_program()
        ids = sorted([uuid4() for _ in range(3)])
        for user_id in reversed(ids):
            make_user(user_id=user_id)
            make_session(user_id, program, start_time=NOW, total_reps=10)

        entries = LeaderboardService(test_db).get_leaderboard("all-time", now=NOW)

        assert [e.user_id for e in entries] == ids
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_limit(self, test_db, board):
        entries = LeaderboardService(test_db).get_leaderboard("all-time", limit=2, now=NOW)
        assert len(entries) == 2

    def test_window_excludes_old_sessions(self, test_db, make_user, make_program, make_session):
        program = make_program()
        recent = make_user(name="Recent")
        old = make_user(name="Old")
        make_session(recent.user_id, program, start_time=NOW - timedelta(days=2), total_reps=5)
        make_session(old.user_id, program, start_time=NOW - timedelta(days=10), total_reps=500)

        service = LeaderboardService(test_db)
        weekly = service.get_leaderboard("weekly", now=NOW)
        all_time = service.get_leaderboard("all-time", now=NOW)

        assert [e.user_id for e in weekly] == [recent.user_id]
        assert [e.user_id for e in all_time] == [old.user_id, recent.user_id]

    def test_deleted_users_leave_no_gap(self, test_db, board):
        users, _ = board
        users[0].deleted_at = NOW
        test_db.commit()

        entries = LeaderboardService(test_db).get_leaderboard("all-time", now=NOW)

        assert [e.score for e in entries] == [40, 30, 20, 10]
        assert [e.rank for e in entries] == [1, 2, 3, 4]


class TestGetUserRank:
    """Tests for get_user_rank."""

    def test_rank_matches_board_position(self, test_db, board):
        users, _ = board
        service = LeaderboardService(test_db)
        entries = service.get_leaderboard("all-time", now=NOW)

        for entry in entries:
            rank = service.get_user_rank(entry.user_id, "all-time", now=NOW)
            assert rank.rank == entry.rank
            assert rank.score == entry.score
            assert rank.total_users == 5

    def test_unranked_user(self, test_db, board, make_user):
        newcomer = make_user(name="Newcomer")

        rank = LeaderboardService(test_db).get_user_rank(newcomer.user_id, "all-time", now=NOW)

        assert rank.rank == 6
        assert rank.score == 0
        assert rank.percentile == 100.0

    def test_percentile(self, test_db, board):
        users, _ = board
        rank = LeaderboardService(test_db).get_user_rank(users[0].user_id, "all-time", now=NOW)
        assert rank.percentile == 20.0

    def test_empty_board(self, test_db):
        rank = LeaderboardService(test_db).get_user_rank(uuid4(), "daily", now=NOW)
        assert rank.rank == 1
        assert rank.total_users == 0
        assert percentile_for(1, 0) == 100.0


class TestGetNearbyUsers:
    """Tests for get_nearby_users."""

    def test_band_around_user(self, test_db, board):
        users, _ = board
        entries = LeaderboardService(test_db).get_nearby_users(
            users[2].user_id, "all-time", radius=1, now=NOW
        )
        assert [e.rank for e in entries] == [2, 3, 4]

    def test_band_clipped_at_top(self, test_db, board):
        users, _ = board
        entries = LeaderboardService(test_db).get_nearby_users(
            users[0].user_id, "all-time", radius=2, now=NOW
        )
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_unranked_user_sees_bottom(self, test_db, board, make_user):
        newcomer = make_user()
        entries = LeaderboardService(test_db).get_nearby_users(
            newcomer.user_id, "all-time", radius=2, now=NOW
        )
        assert [e.rank for e in entries] == [4, 5]

    def test_negative_radius_rejected(self, test_db, board):
        users, _ = board
        with pytest.raises(ValueError):
            LeaderboardService(test_db).get_nearby_users(users[0].user_id, radius=-1)

    def test_rank_and_band_share_reference_time(self, test_db, board):
        users, _ = board
        with patch(
            "app.services.leaderboard_service.get_period_start", wraps=get_period_start
        ) as period_start:
            LeaderboardService(test_db).get_nearby_users(users[2].user_id, "daily", radius=1)

        nows = [c.args[1] for c in period_start.call_args_list]
        assert len(nows) >= 2
        assert nows[0] is not None
        assert all(n == nows[0] for n in nows)


class TestTopPerformers:
    """Tests for the podium."""

    def test_badges_by_rank(self, test_db, board):
        entries = LeaderboardService(test_db).get_top_performers("all-time", now=NOW)

        assert len(entries) == 3
        assert entries[0].badges == ["👑", "🔥", "💎"]
        assert entries[1].badges == ["🔥", "💪"]
        assert entries[2].badges == ["💎", "⚡"]


class TestChallengeLeaderboard:
    """Tests for get_challenge_leaderboard."""

    def test_ranked_by_progress(self, test_db, make_user, make_challenge):
        finisher = make_user(name="Finisher")
        starter = make_user(name="Starter")
        challenge, (task,) = make_challenge()
        tracker = ChallengeProgressionTracker(test_db)
        tracker.start_challenge(starter.user_id, challenge.challenge_id)
        tracker.complete_task(finisher.user_id, task.task_id)

        entries = LeaderboardService(test_db).get_challenge_leaderboard(challenge.challenge_id)

        assert [e.user_id for e in entries] == [finisher.user_id, starter.user_id]
        assert [e.score for e in entries] == [100, 0]

    def test_unknown_challenge_raises(self, test_db):
        with pytest.raises(NotFoundError):
            LeaderboardService(test_db).get_challenge_leaderboard(uuid4())
