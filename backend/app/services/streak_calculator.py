"""
Workout streak calculator.

Works on a list of calendar dates (one per day with at least one session),
most recent first.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

from app.domain.stats import StreakResult

ONE_DAY = timedelta(days=1)


class StreakCalculator:
    """Current and longest consecutive-day streaks."""

    @staticmethod
    def validate_dates(dates_desc: Sequence[date]) -> None:
        """
        Check the input is deduplicated and sorted newest first.

        Raises:
            ValueError: If any date repeats or the order is not descending
        """
        for newer, older in zip(dates_desc, dates_desc[1:]):
            if newer == older:
                raise ValueError(f"Duplicate workout date: {newer}")
            if newer < older:
                raise ValueError("Workout dates must be sorted in descending order")

    @staticmethod
    def current_streak(dates_desc: Sequence[date], today: date) -> int:
        """
        Consecutive days ending at the most recent workout.

        The streak is only alive when that workout was today or yesterday.
        """
        if not dates_desc:
            return 0
        if (today - dates_desc[0]).days > 1:
            return 0

        streak = 1
        for newer, older in zip(dates_desc, dates_desc[1:]):
            if newer - older != ONE_DAY:
                break
            streak += 1
        return streak

    @staticmethod
    def longest_streak(dates_desc: Sequence[date]) -> int:
        """Longest run of consecutive days anywhere in the history."""
        if not dates_desc:
            return 0

        longest = run = 1
        for newer, older in zip(dates_desc, dates_desc[1:]):
            if newer - older == ONE_DAY:
                run += 1
                longest = max(longest, run)
            else:
                run = 1
        return longest

    @staticmethod
    def calculate(
        dates_desc: Sequence[date], today: Optional[date] = None
    ) -> StreakResult:
        """
        Calculate both streaks.

        Args:
            dates_desc: Distinct workout dates, newest first
            today: Reference day (defaults to the current UTC date)

        Returns:
            StreakResult with current and longest streak

        Raises:
            ValueError: If the dates are not distinct and descending
        """
        StreakCalculator.validate_dates(dates_desc)
        if today is None:
            today = datetime.now(timezone.utc).date()

        return StreakResult(
            current=StreakCalculator.current_streak(dates_desc, today),
            longest=StreakCalculator.longest_streak(dates_desc),
        )
