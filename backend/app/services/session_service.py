"""
Workout session recorder.

Records a submitted session and drives everything that follows from it:
- completion verdict from the program rule evaluator (never from the client)
- session header and set results
- program usage counter (every attempt, completed or not)
- challenge task progression and score grant

The session and its sets are written first and must succeed. Each later step
runs in its own transaction; a failing step is rolled back, logged and
reported in ``failed_steps`` while the recorded session is still returned.
Challenge progression and its score grant share one transaction so a task is
never marked "first completed" without the points being granted.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import NotFoundError
from app.domain.programs import build_program_spec
from app.domain.workouts import SessionSubmission
from app.models.program import SetResult, WorkoutProgram, WorkoutSession
from app.services.program_rules import ProgramRuleEvaluator
from app.services.program_service import ProgramService
from app.services.progression_service import (
    ChallengeProgressionTracker,
    TaskCompletionResult,
)
from app.services.score_service import (
    ScoreService,
    points_for_difficulty,
    points_for_session,
)

logger = logging.getLogger(__name__)

STEP_USAGE_COUNT = "usage_count"
STEP_PROGRESSION_AND_SCORE = "progression_and_score"


class SessionRecordResult:
    """Result of recording a session."""

    def __init__(
        self,
        session: WorkoutSession,
        completed: bool,
        points_awarded: int = 0,
        task_completion: Optional[TaskCompletionResult] = None,
        failed_steps: Optional[List[str]] = None,
    ):
        self.session = session
        self.completed = completed
        self.points_awarded = points_awarded
        self.task_completion = task_completion
        self.failed_steps = failed_steps or []


class SessionRecorder:
    """Service that records workout sessions and applies their side effects."""

    def __init__(self, db: Session):
        self.db = db
        self.programs = ProgramService(db)
        self.progression = ChallengeProgressionTracker(db)
        self.scores = ScoreService(db)

    def record_session(
        self, user_id: UUID, submission: SessionSubmission
    ) -> SessionRecordResult:
        """
        Record a workout session for the acting user.

        Args:
            user_id: Acting user
            submission: Client-submitted session (without completion flag)

        Returns:
            SessionRecordResult with the persisted session and cascade outcome

        Raises:
            NotFoundError: If the program, or the linked task/challenge, is missing
            SQLAlchemyError: If the session or its sets cannot be written
        """
        program = self.programs.get_program(submission.program_id)

        challenge_id = submission.challenge_id
        task_id = submission.challenge_task_id
        if task_id is not None:
            task = self.progression.get_task(task_id)
            if challenge_id is not None and task.challenge_id != challenge_id:
                raise NotFoundError(
                    f"Task {task_id} not found in challenge {challenge_id}"
                )
            # A live task inside a soft-deleted challenge is not found either
            challenge_id = self.progression.get_challenge(task.challenge_id).challenge_id

        completed = ProgramRuleEvaluator.evaluate(build_program_spec(program), submission)

        session = self._save_session(user_id, submission, completed, challenge_id)
        result = SessionRecordResult(session=session, completed=completed)

        try:
            self.programs.increment_usage(program.program_id)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                f"[SESSION] Failed to update usage count for program {program.program_id}"
            )
            result.failed_steps.append(STEP_USAGE_COUNT)

        if completed:
            try:
                self._apply_completion(user_id, program, task_id, challenge_id, result)
                self.db.commit()
            except (SQLAlchemyError, NotFoundError):
                self.db.rollback()
                logger.exception(
                    f"[SESSION] Failed to apply completion of session {session.session_id}"
                )
                result.task_completion = None
                result.points_awarded = 0
                result.failed_steps.append(STEP_PROGRESSION_AND_SCORE)

        self.db.refresh(session)
        return result

    def _save_session(
        self,
        user_id: UUID,
        submission: SessionSubmission,
        completed: bool,
        challenge_id: Optional[UUID],
    ) -> WorkoutSession:
        """Write the session header and its sets in one transaction."""
        try:
            session = WorkoutSession(
                program_id=submission.program_id,
                user_id=user_id,
                challenge_id=challenge_id,
                challenge_task_id=submission.challenge_task_id,
                start_time=submission.start_time,
                end_time=submission.end_time or datetime.now(timezone.utc),
                total_reps=submission.total_reps,
                total_duration=submission.total_duration,
                completed=completed,
                notes=submission.notes,
            )
            self.db.add(session)
            # Header first so the sets' foreign key is satisfied
            self.db.flush()

            for set_data in sorted(submission.sets, key=lambda s: s.set_number):
                self.db.add(
                    SetResult(
                        session_id=session.session_id,
                        set_number=set_data.set_number,
                        target_reps=set_data.target_reps,
                        completed_reps=set_data.completed_reps,
                        duration=set_data.duration,
                        timestamp=set_data.timestamp,
                    )
                )

            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"[SESSION] Failed to save session for user {user_id}")
            raise

        logger.info(
            f"[SESSION] Recorded session {session.session_id} for user {user_id} "
            f"(program={submission.program_id}, completed={completed})"
        )
        return session

    def _apply_completion(
        self,
        user_id: UUID,
        program: WorkoutProgram,
        task_id: Optional[UUID],
        challenge_id: Optional[UUID],
        result: SessionRecordResult,
    ) -> None:
        """Progress the linked task (if any) and grant points. Does not commit."""
        points = 0
        if task_id is not None:
            completion = self.progression.complete_task(
                user_id, task_id, challenge_id, commit=False
            )
            result.task_completion = completion
            # Repeat completions of a task earn nothing
            if completion.first_completion:
                points = points_for_session(program.difficulty, completion.task_score)
        else:
            points = points_for_difficulty(program.difficulty)

        if points > 0:
            self.scores.increment_user_score(user_id, points)

        result.points_awarded = points
        if result.task_completion is not None:
            result.points_awarded += result.task_completion.bonus_points
