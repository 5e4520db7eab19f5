"""
Unit tests for StatsService.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.models.program import SetResult
from app.services.stats_service import StatsService, get_stats_start

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestGetStatsStart:
    """Tests for stats windows."""

    def test_windows(self):
        assert get_stats_start("today", NOW) == datetime(2024, 6, 15, tzinfo=timezone.utc)
        assert get_stats_start("week", NOW) == NOW - timedelta(days=7)
        assert get_stats_start("month", NOW) == NOW - timedelta(days=30)
        assert get_stats_start("year", NOW) == NOW - timedelta(days=365)

    def test_unknown_period_raises(self):
        with pytest.raises(ValueError):
            get_stats_start("decade", NOW)

    def test_today_uses_utc_midnight(self):
        """A reference time with an offset still opens the window at UTC midnight."""
        eastern_evening = datetime(2024, 6, 15, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert get_stats_start("today", eastern_evening) == datetime(
            2024, 6, 16, tzinfo=timezone.utc
        )


class TestGetStats:
    """Tests for period aggregates."""

    def test_week_totals(self, test_db, make_user, make_program, make_session):
        user = make_user()
        program = make_program()
        make_session(user.user_id, program, start_time=NOW - timedelta(days=1), total_reps=30, total_duration=300)
        make_session(user.user_id, program, start_time=NOW - timedelta(days=2), total_reps=70, total_duration=600)
        make_session(user.user_id, program, start_time=NOW - timedelta(days=20), total_reps=500, total_duration=900)

        stats = StatsService(test_db).get_stats(user.user_id, "week", now=NOW)

        assert stats.total_workouts == 2
        assert stats.total_reps == 100
        assert stats.total_time == 900
        assert stats.best_session == 70
        assert stats.average_reps == 50.0
        assert stats.total_calories == pytest.approx(29.0)

    def test_no_sessions(self, test_db, make_user):
        user = make_user()
        stats = StatsService(test_db).get_stats(user.user_id, "today", now=NOW)

        assert stats.total_workouts == 0
        assert stats.average_reps == 0.0
        assert stats.total_calories == 0.0


class TestPersonalRecords:
    """Tests for lifetime records."""

    def test_records(self, test_db, make_user, make_program, make_session):
        user = make_user()
        program = make_program()
        first = make_session(user.user_id, program, start_time=NOW, total_reps=40, total_duration=1200)
        make_session(user.user_id, program, start_time=NOW, total_reps=60, total_duration=600)
        test_db.add_all(
            [
                SetResult(session_id=first.session_id, set_number=1, completed_reps=25, timestamp=NOW),
                SetResult(session_id=first.session_id, set_number=2, completed_reps=15, timestamp=NOW),
            ]
        )
        test_db.commit()

        records = StatsService(test_db).get_personal_records(user.user_id)

        assert records.max_reps_in_session == 60
        assert records.max_reps_in_set == 25
        assert records.longest_session == 1200
        assert records.total_lifetime_reps == 100


class TestGetStreak:
    """Tests for streaks from stored sessions."""

    def test_streak_from_sessions(self, test_db, make_user, make_program, make_session):
        user = make_user()
        program = make_program()
        today = date(2024, 6, 15)
        for days_ago in (0, 0, 1, 2, 5):
            start = datetime(2024, 6, 15, 9, 0, tzinfo=timezone.utc) - timedelta(days=days_ago)
            make_session(user.user_id, program, start_time=start, total_reps=10)

        streak = StatsService(test_db).get_streak(user.user_id, today=today)

        assert streak.current == 3
        assert streak.longest == 3
