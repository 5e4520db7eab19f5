"""
Workout statistics models.
"""

from enum import Enum
from uuid import UUID
from pydantic import BaseModel


class StatsPeriod(str, Enum):
    """Window for workout statistics."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class StreakResult(BaseModel):
    """Consecutive-day workout streaks."""

    current: int = 0
    longest: int = 0


class WorkoutStats(BaseModel):
    """Aggregates over a user's sessions in a period."""

    user_id: UUID
    period: StatsPeriod
    total_reps: int = 0
    total_workouts: int = 0
    total_time: int = 0
    best_session: int = 0
    average_reps: float = 0.0
    total_calories: float = 0.0


class PersonalRecords(BaseModel):
    """Lifetime bests of a user."""

    user_id: UUID
    max_reps_in_session: int = 0
    max_reps_in_set: int = 0
    longest_session: int = 0
    total_lifetime_reps: int = 0
