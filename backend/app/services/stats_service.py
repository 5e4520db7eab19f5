"""
Workout statistics service.

Aggregates a user's sessions into period stats, personal records and
consecutive-day streaks.
"""

import logging
from uuid import UUID
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.stats import (
    PersonalRecords,
    StatsPeriod,
    StreakResult,
    WorkoutStats,
)
from app.domain.workouts import as_utc
from app.models.program import SetResult, WorkoutSession
from app.services.streak_calculator import StreakCalculator

logger = logging.getLogger(__name__)

CALORIES_PER_REP = 0.29


def get_stats_start(
    period: Union[StatsPeriod, str], now: Optional[datetime] = None
) -> datetime:
    """Get the lower bound of a stats window."""
    period = StatsPeriod(period)
    if now is None:
        now = datetime.now(timezone.utc)
    now = as_utc(now)

    if period == StatsPeriod.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == StatsPeriod.MONTH:
        return now - timedelta(days=30)
    if period == StatsPeriod.YEAR:
        return now - timedelta(days=365)
    return now - timedelta(days=7)


def _as_date(value) -> date:
    # SQLite returns DATE() as text, PostgreSQL as a date
    if isinstance(value, str):
        return date.fromisoformat(value)
    if isinstance(value, datetime):
        return value.date()
    return value


class StatsService:
    """Service for reading workout statistics."""

    def __init__(self, db: Session):
        self.db = db

    def get_stats(
        self,
        user_id: UUID,
        period: Union[StatsPeriod, str] = StatsPeriod.WEEK,
        now: Optional[datetime] = None,
    ) -> WorkoutStats:
        """
        Aggregate a user's sessions in the period window.

        Args:
            user_id: User ID
            period: today, week, month or year
            now: Reference time (defaults to current UTC time)

        Returns:
            WorkoutStats with totals, best session, average and calories
        """
        period = StatsPeriod(period)
        start = get_stats_start(period, now)

        total_reps, total_workouts, total_time, best_session = (
            self.db.query(
                func.coalesce(func.sum(WorkoutSession.total_reps), 0),
                func.count(WorkoutSession.session_id),
                func.coalesce(func.sum(WorkoutSession.total_duration), 0),
                func.coalesce(func.max(WorkoutSession.total_reps), 0),
            )
            .filter(
                WorkoutSession.user_id == user_id,
                WorkoutSession.start_time >= start,
            )
            .one()
        )

        average_reps = total_reps / total_workouts if total_workouts else 0.0

        return WorkoutStats(
            user_id=user_id,
            period=period,
            total_reps=total_reps,
            total_workouts=total_workouts,
            total_time=total_time,
            best_session=best_session,
            average_reps=average_reps,
            total_calories=total_reps * CALORIES_PER_REP,
        )

    def get_personal_records(self, user_id: UUID) -> PersonalRecords:
        """Lifetime bests across all of a user's sessions and sets."""
        max_reps_in_session, longest_session, total_lifetime_reps = (
            self.db.query(
                func.coalesce(func.max(WorkoutSession.total_reps), 0),
                func.coalesce(func.max(WorkoutSession.total_duration), 0),
                func.coalesce(func.sum(WorkoutSession.total_reps), 0),
            )
            .filter(WorkoutSession.user_id == user_id)
            .one()
        )

        max_reps_in_set = (
            self.db.query(func.coalesce(func.max(SetResult.completed_reps), 0))
            .join(WorkoutSession, SetResult.session_id == WorkoutSession.session_id)
            .filter(WorkoutSession.user_id == user_id)
            .scalar()
        )

        return PersonalRecords(
            user_id=user_id,
            max_reps_in_session=max_reps_in_session,
            max_reps_in_set=max_reps_in_set or 0,
            longest_session=longest_session,
            total_lifetime_reps=total_lifetime_reps,
        )

    def get_workout_dates(self, user_id: UUID) -> List[date]:
        """Distinct calendar dates with at least one session, newest first."""
        workout_day = func.date(WorkoutSession.start_time)
        if self.db.get_bind().dialect.name == "postgresql":
            # DATE() of a timestamptz follows the connection TimeZone
            workout_day = func.date(func.timezone("UTC", WorkoutSession.start_time))
        rows = (
            self.db.query(workout_day)
            .filter(WorkoutSession.user_id == user_id)
            .distinct()
            .order_by(workout_day.desc())
            .all()
        )
        return [_as_date(day) for (day,) in rows]

    def get_streak(self, user_id: UUID, today: Optional[date] = None) -> StreakResult:
        """Current and longest consecutive-day streak for a user."""
        dates = self.get_workout_dates(user_id)
        streak = StreakCalculator.calculate(dates, today)
        logger.info(
            f"[STATS] Streak for user {user_id}: current={streak.current}, "
            f"longest={streak.longest}"
        )
        return streak
