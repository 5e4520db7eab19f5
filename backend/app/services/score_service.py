"""
Score policy and user score mutation.

Points for a completed session come from the program difficulty, unless the
session completes a challenge task, in which case the task's own score wins.
Deciding *whether* to grant (first completion only) is the caller's job.
"""

import logging
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session

from app.domain.errors import NotFoundError
from app.domain.programs import Difficulty
from app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY_POINTS = 5
DIFFICULTY_POINTS = {
    Difficulty.BEGINNER: 5,
    Difficulty.INTERMEDIATE: 10,
    Difficulty.ADVANCED: 15,
}


def points_for_difficulty(difficulty: Optional[str]) -> int:
    """Points for completing a program of the given difficulty (5 if unknown)."""
    try:
        return DIFFICULTY_POINTS[Difficulty(difficulty)]
    except ValueError:
        return DEFAULT_DIFFICULTY_POINTS


def points_for_session(
    difficulty: Optional[str], task_score: Optional[int] = None
) -> int:
    """
    Points for a completed session.

    Args:
        difficulty: Program difficulty
        task_score: Score of the linked challenge task, if any

    Returns:
        The task score when the session is tied to a task, otherwise the
        difficulty-based points
    """
    if task_score is not None:
        return task_score
    return points_for_difficulty(difficulty)


class ScoreService:
    """Applies score increments to users."""

    def __init__(self, db: Session):
        self.db = db

    def increment_user_score(self, user_id: UUID, points: int) -> None:
        """
        Add ``points`` to a user's score. Does not commit.

        Raises:
            NotFoundError: If the user does not exist or is soft-deleted
        """
        if points <= 0:
            return

        logger.info(f"[SCORE] Adding {points} points to user {user_id}")
        updated = (
            self.db.query(User)
            .filter(User.user_id == user_id, User.deleted_at.is_(None))
            .update({User.score: User.score + points}, synchronize_session="fetch")
        )
        if updated == 0:
            raise NotFoundError(f"User {user_id} not found")
