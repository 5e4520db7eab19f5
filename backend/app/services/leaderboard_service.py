"""
Leaderboard ranking service.

Scores are the summed ``total_reps`` of a user's sessions inside the period
window. Ranks come from ``ROW_NUMBER() OVER (ORDER BY score DESC, user_id)``:
every user gets a distinct rank and equal scores are ordered by user id.
Soft-deleted users are left out before ranking, so ranks have no gaps.

Windows:
- daily: from the start of the current UTC day
- weekly: rolling, now - 7 days
- monthly: rolling, now - 30 days
- all-time: unbounded
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union
from uuid import UUID
from pydantic_settings import BaseSettings
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.errors import NotFoundError
from app.domain.workouts import as_utc
from app.domain.leaderboard import (
    TOP_PERFORMER_BADGES,
    LeaderboardEntry,
    LeaderboardPeriod,
    UserRank,
)
from app.models.challenge import Challenge, UserChallengeProgress
from app.models.program import WorkoutSession
from app.models.user import User

logger = logging.getLogger(__name__)


class LeaderboardSettings(BaseSettings):
    """Leaderboard configuration settings."""

    leaderboard_default_limit: int = 50
    leaderboard_max_limit: int = 100
    leaderboard_nearby_range: int = 5
    leaderboard_top_performers: int = 3

    class Config:
        env_file = ".env"
        extra = "ignore"


leaderboard_settings = LeaderboardSettings()


def get_period_start(
    period: Union[LeaderboardPeriod, str], now: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Get the lower bound of a leaderboard window.

    Args:
        period: daily, weekly, monthly or all-time
        now: Reference time (defaults to current UTC time)

    Returns:
        Window start, or None for all-time

    Raises:
        ValueError: If the period is unknown
    """
    period = LeaderboardPeriod(period)
    if now is None:
        now = datetime.now(timezone.utc)
    now = as_utc(now)

    if period == LeaderboardPeriod.DAILY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == LeaderboardPeriod.WEEKLY:
        return now - timedelta(days=7)
    if period == LeaderboardPeriod.MONTHLY:
        return now - timedelta(days=30)
    return None


def percentile_for(rank: int, total_users: int) -> float:
    """Top-X% position; 100 when nobody is ranked or the user is unranked."""
    if total_users <= 0:
        return 100.0
    return min(rank / total_users * 100, 100.0)


class LeaderboardService:
    """Service computing leaderboard rankings on read."""

    def __init__(self, db: Session):
        self.db = db

    def get_leaderboard(
        self,
        period: Union[LeaderboardPeriod, str] = LeaderboardPeriod.ALL_TIME,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[LeaderboardEntry]:
        """Top ``limit`` users for the period, best first."""
        if limit is None:
            limit = leaderboard_settings.leaderboard_default_limit

        ranked = self._ranked_users(period, now)
        rows = (
            self.db.query(
                ranked.c.user_id,
                User.name,
                User.avatar,
                ranked.c.rank,
                ranked.c.score,
            )
            .join(User, User.user_id == ranked.c.user_id)
            .order_by(ranked.c.rank)
            .limit(limit)
            .all()
        )
        return [self._to_entry(row) for row in rows]

    def get_user_rank(
        self,
        user_id: UUID,
        period: Union[LeaderboardPeriod, str] = LeaderboardPeriod.ALL_TIME,
        now: Optional[datetime] = None,
    ) -> UserRank:
        """
        Rank of one user.

        A user with no sessions in the window is placed just after the last
        ranked user (``total_users + 1``) with a score of 0.
        """
        ranked = self._ranked_users(period, now)

        total_users = self.db.query(func.count()).select_from(ranked).scalar() or 0
        row = (
            self.db.query(ranked.c.rank, ranked.c.score)
            .filter(ranked.c.user_id == user_id)
            .first()
        )

        if row is None:
            rank, score = total_users + 1, 0
        else:
            rank, score = int(row.rank), int(row.score or 0)

        return UserRank(
            user_id=user_id,
            rank=rank,
            score=score,
            total_users=total_users,
            percentile=percentile_for(rank, total_users),
        )

    def get_nearby_users(
        self,
        user_id: UUID,
        period: Union[LeaderboardPeriod, str] = LeaderboardPeriod.ALL_TIME,
        radius: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[LeaderboardEntry]:
        """
        Users ranked within ``radius`` places of the given user, inclusive.

        Unranked users are treated as sitting at ``total_users + 1``, so they
        see the bottom of the board.
        """
        if radius is None:
            radius = leaderboard_settings.leaderboard_nearby_range
        if radius < 0:
            raise ValueError("radius must not be negative")
        # Rank and band must share one window
        if now is None:
            now = datetime.now(timezone.utc)

        target_rank = self.get_user_rank(user_id, period, now).rank

        ranked = self._ranked_users(period, now)
        rows = (
            self.db.query(
                ranked.c.user_id,
                User.name,
                User.avatar,
                ranked.c.rank,
                ranked.c.score,
            )
            .join(User, User.user_id == ranked.c.user_id)
            .filter(ranked.c.rank.between(target_rank - radius, target_rank + radius))
            .order_by(ranked.c.rank)
            .all()
        )
        return [self._to_entry(row) for row in rows]

    def get_top_performers(
        self,
        period: Union[LeaderboardPeriod, str] = LeaderboardPeriod.ALL_TIME,
        now: Optional[datetime] = None,
    ) -> List[LeaderboardEntry]:
        """Podium for the period, decorated with the rank badges."""
        entries = self.get_leaderboard(
            period, limit=leaderboard_settings.leaderboard_top_performers, now=now
        )
        for entry in entries:
            entry.badges = list(TOP_PERFORMER_BADGES.get(entry.rank, []))
        return entries

    def get_challenge_leaderboard(
        self, challenge_id: UUID, limit: Optional[int] = None
    ) -> List[LeaderboardEntry]:
        """
        Ranking of a challenge's users by their challenge progress.

        Raises:
            NotFoundError: If the challenge does not exist
        """
        if limit is None:
            limit = leaderboard_settings.leaderboard_default_limit

        challenge = (
            self.db.query(Challenge)
            .filter(
                Challenge.challenge_id == challenge_id,
                Challenge.deleted_at.is_(None),
            )
            .first()
        )
        if not challenge:
            raise NotFoundError(f"Challenge {challenge_id} not found")

        user_progress = (
            self.db.query(
                UserChallengeProgress.user_id.label("user_id"),
                UserChallengeProgress.progress.label("score"),
            )
            .join(User, User.user_id == UserChallengeProgress.user_id)
            .filter(
                UserChallengeProgress.challenge_id == challenge_id,
                User.deleted_at.is_(None),
            )
            .subquery("user_progress")
        )
        ranked = self._rank(user_progress)

        rows = (
            self.db.query(
                ranked.c.user_id,
                User.name,
                User.avatar,
                ranked.c.rank,
                ranked.c.score,
            )
            .join(User, User.user_id == ranked.c.user_id)
            .order_by(ranked.c.rank)
            .limit(limit)
            .all()
        )
        return [self._to_entry(row) for row in rows]

    def _ranked_users(
        self, period: Union[LeaderboardPeriod, str], now: Optional[datetime]
    ):
        """Subquery of (user_id, score, rank) for the period window."""
        start = get_period_start(period, now)

        query = (
            self.db.query(
                WorkoutSession.user_id.label("user_id"),
                func.sum(WorkoutSession.total_reps).label("score"),
            )
            .join(User, User.user_id == WorkoutSession.user_id)
            .filter(User.deleted_at.is_(None))
        )
        if start is not None:
            query = query.filter(WorkoutSession.start_time >= start)

        user_scores = query.group_by(WorkoutSession.user_id).subquery("user_scores")
        return self._rank(user_scores)

    def _rank(self, scores):
        """Attach a row-number rank to a (user_id, score) subquery."""
        rank = (
            func.row_number()
            .over(order_by=(scores.c.score.desc(), scores.c.user_id.asc()))
            .label("rank")
        )
        return self.db.query(scores.c.user_id, scores.c.score, rank).subquery(
            "ranked_users"
        )

    @staticmethod
    def _to_entry(row) -> LeaderboardEntry:
        return LeaderboardEntry(
            user_id=row.user_id,
            user_name=row.name,
            avatar=row.avatar,
            rank=int(row.rank),
            score=int(row.score or 0),
        )
