"""
Leaderboard domain models.

Entries are read-only projections computed from workout sessions (or, for a
challenge board, from challenge progress). Nothing here is persisted.
"""

from enum import Enum
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field


class LeaderboardPeriod(str, Enum):
    """Time window a leaderboard is computed over."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL_TIME = "all-time"


# Podium decoration, keyed by rank
TOP_PERFORMER_BADGES = {
    1: ["👑", "🔥", "💎"],
    2: ["🔥", "💪"],
    3: ["💎", "⚡"],
}


class LeaderboardEntry(BaseModel):
    """One ranked user."""

    user_id: UUID
    user_name: str
    avatar: Optional[str] = None
    rank: int
    score: int
    change: int = 0
    badges: List[str] = Field(default_factory=list)


class UserRank(BaseModel):
    """Position of a single user within a period."""

    user_id: UUID
    rank: int
    score: int = 0
    total_users: int = 0
    percentile: float = Field(..., description="Top X% (lower is better)")
