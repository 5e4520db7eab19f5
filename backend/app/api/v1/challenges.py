"""
Challenge participation endpoints.
"""

from uuid import UUID
from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.domain.errors import ChallengeAlreadyStartedError, NotFoundError
from app.services.progression_service import ChallengeProgressionTracker
from app.utils.auth import get_current_user_id

router = APIRouter()


class ChallengeStartResponse(BaseModel):
    """Challenge progress row created on start."""

    challenge_id: UUID
    user_id: UUID
    progress: int
    current_reps: int
    target_reps: int


class TaskCompleteResponse(BaseModel):
    """Outcome of completing a challenge task."""

    task_id: UUID
    challenge_id: UUID
    first_completion: bool
    attempts: int
    participant_added: bool
    challenge_completed: bool
    bonus_points: int


class TaskProgressResponse(BaseModel):
    """A challenge task with the user's completion state."""

    task_id: UUID
    day: int
    title: str
    score: Optional[int]
    completed: bool
    completed_at: Optional[datetime]
    attempts: int


class UserChallengeResponse(BaseModel):
    """A started challenge with the user's progress."""

    challenge_id: UUID
    title: str
    difficulty: str
    target_reps: Optional[int]
    points: int
    participants: int
    completions: int
    progress: int
    completed_at: Optional[datetime]
    updated_at: Optional[datetime]


class ChallengeProgressResponse(BaseModel):
    """User progress across a challenge."""

    challenge_id: UUID
    user_id: UUID
    progress: int
    overall_progress: Optional[int]
    completed_at: Optional[datetime]
    tasks: List[TaskProgressResponse] = []


@router.post(
    "/challenges/{challenge_id}/start",
    response_model=ChallengeStartResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_challenge(
    challenge_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Start a challenge for the authenticated user.

    Returns 409 if the user already started it.
    """
    tracker = ChallengeProgressionTracker(db)

    try:
        progress = tracker.start_challenge(current_user_id, challenge_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ChallengeAlreadyStartedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ChallengeStartResponse(
        challenge_id=progress.challenge_id,
        user_id=progress.user_id,
        progress=progress.progress,
        current_reps=progress.current_reps,
        target_reps=progress.target_reps,
    )


@router.post(
    "/challenges/tasks/{task_id}/complete",
    response_model=TaskCompleteResponse,
    status_code=status.HTTP_200_OK,
)
async def complete_task(
    task_id: UUID,
    challenge_id: Optional[UUID] = None,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Mark a challenge task completed without a workout session.

    Repeating the call only bumps the attempt counter.
    """
    tracker = ChallengeProgressionTracker(db)

    try:
        result = tracker.complete_task(current_user_id, task_id, challenge_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to complete task: {str(e)}",
        )

    return TaskCompleteResponse(
        task_id=result.task_id,
        challenge_id=result.challenge_id,
        first_completion=result.first_completion,
        attempts=result.attempts,
        participant_added=result.participant_added,
        challenge_completed=result.challenge_completed,
        bonus_points=result.bonus_points,
    )


@router.get(
    "/challenges/{challenge_id}/progress",
    response_model=ChallengeProgressResponse,
    status_code=status.HTTP_200_OK,
)
async def get_challenge_progress(
    challenge_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Per-task completion of the authenticated user for a challenge."""
    tracker = ChallengeProgressionTracker(db)

    try:
        summary = tracker.get_challenge_progress(current_user_id, challenge_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ChallengeProgressResponse(
        challenge_id=summary.challenge_id,
        user_id=summary.user_id,
        progress=summary.progress,
        overall_progress=summary.overall_progress,
        completed_at=summary.completed_at,
        tasks=[
            TaskProgressResponse(
                task_id=t.task_id,
                day=t.day,
                title=t.title,
                score=t.score,
                completed=t.completed,
                completed_at=t.completed_at,
                attempts=t.attempts,
            )
            for t in summary.tasks
        ],
    )


def _user_challenge_response(view) -> UserChallengeResponse:
    return UserChallengeResponse(
        challenge_id=view.challenge_id,
        title=view.title,
        difficulty=view.difficulty,
        target_reps=view.target_reps,
        points=view.points,
        participants=view.participants,
        completions=view.completions,
        progress=view.progress,
        completed_at=view.completed_at,
        updated_at=view.updated_at,
    )


@router.get(
    "/challenges/active",
    response_model=List[UserChallengeResponse],
    status_code=status.HTTP_200_OK,
)
async def get_active_challenges(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Challenges the authenticated user started and has not finished."""
    views = ChallengeProgressionTracker(db).get_active_challenges(current_user_id)
    return [_user_challenge_response(v) for v in views]


@router.get(
    "/challenges/completed",
    response_model=List[UserChallengeResponse],
    status_code=status.HTTP_200_OK,
)
async def get_completed_challenges(
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Challenges the authenticated user finished."""
    views = ChallengeProgressionTracker(db).get_completed_challenges(current_user_id)
    return [_user_challenge_response(v) for v in views]
