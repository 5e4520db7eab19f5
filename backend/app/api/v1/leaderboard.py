"""
Leaderboard endpoints.

Public: rankings are computed on read and expose only name, avatar and score.
"""

from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.domain.errors import NotFoundError
from app.domain.leaderboard import LeaderboardEntry, LeaderboardPeriod, UserRank
from app.services.leaderboard_service import LeaderboardService, leaderboard_settings

router = APIRouter()


@router.get(
    "/leaderboard",
    response_model=List[LeaderboardEntry],
    status_code=status.HTTP_200_OK,
)
async def get_leaderboard(
    period: LeaderboardPeriod = Query(LeaderboardPeriod.ALL_TIME),
    limit: int = Query(
        leaderboard_settings.leaderboard_default_limit,
        ge=1,
        le=leaderboard_settings.leaderboard_max_limit,
    ),
    db: Session = Depends(get_db),
):
    """Top users for a period, best first."""
    return LeaderboardService(db).get_leaderboard(period, limit)


@router.get(
    "/leaderboard/top",
    response_model=List[LeaderboardEntry],
    status_code=status.HTTP_200_OK,
)
async def get_top_performers(
    period: LeaderboardPeriod = Query(LeaderboardPeriod.ALL_TIME),
    db: Session = Depends(get_db),
):
    """Podium with rank badges."""
    return LeaderboardService(db).get_top_performers(period)


@router.get(
    "/leaderboard/rank/{user_id}",
    response_model=UserRank,
    status_code=status.HTTP_200_OK,
)
async def get_user_rank(
    user_id: UUID,
    period: LeaderboardPeriod = Query(LeaderboardPeriod.ALL_TIME),
    db: Session = Depends(get_db),
):
    """Rank, score and percentile of one user."""
    return LeaderboardService(db).get_user_rank(user_id, period)


@router.get(
    "/leaderboard/nearby/{user_id}",
    response_model=List[LeaderboardEntry],
    status_code=status.HTTP_200_OK,
)
async def get_nearby_users(
    user_id: UUID,
    period: LeaderboardPeriod = Query(LeaderboardPeriod.ALL_TIME),
    range: Optional[int] = Query(None, ge=0, description="Ranks above and below"),
    db: Session = Depends(get_db),
):
    """Users ranked around the given user."""
    try:
        return LeaderboardService(db).get_nearby_users(user_id, period, radius=range)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/leaderboard/challenges/{challenge_id}",
    response_model=List[LeaderboardEntry],
    status_code=status.HTTP_200_OK,
)
async def get_challenge_leaderboard(
    challenge_id: UUID,
    limit: int = Query(
        leaderboard_settings.leaderboard_default_limit,
        ge=1,
        le=leaderboard_settings.leaderboard_max_limit,
    ),
    db: Session = Depends(get_db),
):
    """Ranking of a challenge's users by progress."""
    try:
        return LeaderboardService(db).get_challenge_leaderboard(challenge_id, limit)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
