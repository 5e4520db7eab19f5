"""
Workout session and statistics endpoints.
"""

import logging
from uuid import UUID
from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.domain.errors import NotFoundError
from app.domain.stats import PersonalRecords, StatsPeriod, StreakResult, WorkoutStats
from app.domain.workouts import SessionSubmission
from app.services.session_service import SessionRecorder
from app.services.stats_service import StatsService
from app.utils.auth import get_current_user_id, get_optional_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


class SetResultResponse(BaseModel):
    """Set result response model."""

    set_id: UUID
    set_number: int
    target_reps: Optional[int]
    completed_reps: int
    duration: int
    timestamp: datetime


class SessionResponse(BaseModel):
    """Recorded session response model."""

    session_id: UUID
    program_id: UUID
    user_id: UUID
    challenge_id: Optional[UUID]
    challenge_task_id: Optional[UUID]
    start_time: datetime
    end_time: Optional[datetime]
    total_reps: int
    total_duration: int
    completed: bool
    notes: Optional[str]
    sets: List[SetResultResponse] = []


class TaskCompletionResponse(BaseModel):
    """Challenge task progression triggered by a session."""

    task_id: UUID
    challenge_id: UUID
    first_completion: bool
    attempts: int
    participant_added: bool
    challenge_completed: bool
    bonus_points: int


class RecordSessionResponse(BaseModel):
    """Result of submitting a session."""

    session: SessionResponse
    completed: bool
    points_awarded: int
    task_completion: Optional[TaskCompletionResponse] = None
    failed_steps: List[str] = []


def _session_response(session) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        program_id=session.program_id,
        user_id=session.user_id,
        challenge_id=session.challenge_id,
        challenge_task_id=session.challenge_task_id,
        start_time=session.start_time,
        end_time=session.end_time,
        total_reps=session.total_reps,
        total_duration=session.total_duration,
        completed=session.completed,
        notes=session.notes,
        sets=[
            SetResultResponse(
                set_id=s.set_id,
                set_number=s.set_number,
                target_reps=s.target_reps,
                completed_reps=s.completed_reps,
                duration=s.duration,
                timestamp=s.timestamp,
            )
            for s in session.sets
        ],
    )


def _check_ownership(user_id: UUID, authenticated_user_id: Optional[UUID]) -> None:
    # Anonymous reads are allowed; authenticated reads must target the caller
    if authenticated_user_id is not None and user_id != authenticated_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="user_id does not match authenticated user",
        )


@router.post(
    "/workouts/sessions",
    response_model=RecordSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_session(
    request: SessionSubmission,
    current_user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Record a completed or abandoned workout session.

    Completion is decided on the server from the program rules. A completed
    session linked to a challenge task advances the challenge and grants
    points once per task.

    Requires authentication.
    """
    recorder = SessionRecorder(db)

    try:
        result = recorder.record_session(current_user_id, request)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"[SESSION] Failed to record session for user {current_user_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to record session: {str(e)}",
        )

    task_completion = None
    if result.task_completion is not None:
        tc = result.task_completion
        task_completion = TaskCompletionResponse(
            task_id=tc.task_id,
            challenge_id=tc.challenge_id,
            first_completion=tc.first_completion,
            attempts=tc.attempts,
            participant_added=tc.participant_added,
            challenge_completed=tc.challenge_completed,
            bonus_points=tc.bonus_points,
        )

    return RecordSessionResponse(
        session=_session_response(result.session),
        completed=result.completed,
        points_awarded=result.points_awarded,
        task_completion=task_completion,
        failed_steps=result.failed_steps,
    )


@router.get(
    "/workouts/stats/{user_id}",
    response_model=WorkoutStats,
    status_code=status.HTTP_200_OK,
)
async def get_workout_stats(
    user_id: UUID,
    period: StatsPeriod = Query(StatsPeriod.WEEK, description="today, week, month or year"),
    authenticated_user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    """Workout totals for a user over a period."""
    _check_ownership(user_id, authenticated_user_id)
    return StatsService(db).get_stats(user_id, period)


@router.get(
    "/workouts/records/{user_id}",
    response_model=PersonalRecords,
    status_code=status.HTTP_200_OK,
)
async def get_personal_records(
    user_id: UUID,
    authenticated_user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    """Lifetime personal records for a user."""
    _check_ownership(user_id, authenticated_user_id)
    return StatsService(db).get_personal_records(user_id)


@router.get(
    "/workouts/streak/{user_id}",
    response_model=StreakResult,
    status_code=status.HTTP_200_OK,
)
async def get_streak(
    user_id: UUID,
    authenticated_user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    """Current and longest consecutive-day workout streak."""
    _check_ownership(user_id, authenticated_user_id)
    try:
        return StatsService(db).get_streak(user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
