"""
Challenge progression tracker.

Turns task completions into challenge-level state:
- per (user, task) progress rows (upsert, ``attempts`` bumped every time)
- ``Challenge.participants`` on the user's first completed task
- ``Challenge.completions`` and a 100% ``UserChallengeProgress`` row once
  every non-deleted task is complete

Every "exactly once" transition is a conditional UPDATE whose row count
decides whether this call made the transition, so invoking the tracker twice
for the same task (or racing two submissions) never double counts.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID
from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from app.domain.errors import ChallengeAlreadyStartedError, NotFoundError
from app.models.challenge import (
    Challenge,
    ChallengeTask,
    UserChallengeProgress,
    UserChallengeTaskProgress,
)
from app.services.score_service import ScoreService

logger = logging.getLogger(__name__)

COMPLETE = 100


class TaskCompletionResult:
    """Outcome of one task completion event."""

    def __init__(
        self,
        task_id: UUID,
        challenge_id: UUID,
        first_completion: bool,
        attempts: int,
        task_score: Optional[int],
        participant_added: bool = False,
        challenge_completed: bool = False,
        bonus_points: int = 0,
    ):
        self.task_id = task_id
        self.challenge_id = challenge_id
        self.first_completion = first_completion
        self.attempts = attempts
        self.task_score = task_score
        self.participant_added = participant_added
        self.challenge_completed = challenge_completed
        self.bonus_points = bonus_points


class TaskProgressView:
    """A task with the user's completion state."""

    def __init__(
        self,
        task_id: UUID,
        day: int,
        title: str,
        score: Optional[int],
        completed: bool,
        completed_at: Optional[datetime],
        attempts: int,
    ):
        self.task_id = task_id
        self.day = day
        self.title = title
        self.score = score
        self.completed = completed
        self.completed_at = completed_at
        self.attempts = attempts


class ChallengeProgressSummary:
    """User progress across all tasks of a challenge."""

    def __init__(
        self,
        challenge_id: UUID,
        user_id: UUID,
        progress: int,
        overall_progress: Optional[int],
        completed_at: Optional[datetime],
        tasks: List[TaskProgressView],
    ):
        self.challenge_id = challenge_id
        self.user_id = user_id
        self.progress = progress
        self.overall_progress = overall_progress
        self.completed_at = completed_at
        self.tasks = tasks


class UserChallengeView:
    """A challenge the user has started, with their stored progress."""

    def __init__(self, challenge: Challenge, progress: UserChallengeProgress):
        self.challenge_id = challenge.challenge_id
        self.title = challenge.title
        self.difficulty = challenge.difficulty
        self.target_reps = challenge.target_reps
        self.points = challenge.points
        self.participants = challenge.participants
        self.completions = challenge.completions
        self.progress = progress.progress
        self.completed_at = progress.completed_at
        self.updated_at = progress.updated_at


def overall_progress(completed_tasks: int, total_tasks: int) -> Optional[int]:
    """Integer percentage of completed tasks, None for a challenge with no tasks."""
    if total_tasks == 0:
        return None
    return (completed_tasks * 100) // total_tasks


class ChallengeProgressionTracker:
    """Maintains per-user challenge progress and challenge counters."""

    def __init__(self, db: Session):
        self.db = db
        self.scores = ScoreService(db)

    def get_task(self, task_id: UUID) -> ChallengeTask:
        task = (
            self.db.query(ChallengeTask)
            .filter(ChallengeTask.task_id == task_id, ChallengeTask.deleted_at.is_(None))
            .first()
        )
        if not task:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def get_challenge(self, challenge_id: UUID) -> Challenge:
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
        return challenge

    def start_challenge(self, user_id: UUID, challenge_id: UUID) -> UserChallengeProgress:
        """
        Create the user's progress row at 0%.

        Starting does not count the user as a participant; that happens on
        their first completed task.

        Raises:
            NotFoundError: If the challenge does not exist
            ChallengeAlreadyStartedError: If a progress row already exists
        """
        challenge = self.get_challenge(challenge_id)

        existing = self._find_challenge_progress(user_id, challenge_id)
        if existing:
            raise ChallengeAlreadyStartedError(
                f"Challenge {challenge_id} already started"
            )

        progress = self._create_challenge_progress(user_id, challenge)
        self.db.commit()
        self.db.refresh(progress)
        return progress

    def complete_task(
        self,
        user_id: UUID,
        task_id: UUID,
        challenge_id: Optional[UUID] = None,
        commit: bool = True,
    ) -> TaskCompletionResult:
        """
        Record a task completion and cascade it to the challenge.

        Safe to call repeatedly: a repeat only bumps ``attempts`` and
        refreshes ``completed_at``.

        Args:
            user_id: Acting user
            task_id: Completed task
            challenge_id: Challenge the caller believes the task belongs to
            commit: Commit at the end; pass False to let the caller add more
                writes (e.g. a score grant) to the same transaction

        Returns:
            TaskCompletionResult describing which transitions this call made

        Raises:
            NotFoundError: If the task or challenge is missing, or the task
                belongs to a different challenge
        """
        task = self.get_task(task_id)
        if challenge_id is not None and task.challenge_id != challenge_id:
            raise NotFoundError(f"Task {task_id} not found in challenge {challenge_id}")
        challenge = self.get_challenge(task.challenge_id)

        now = datetime.now(timezone.utc)
        try:
            first_completion, attempts = self._upsert_task_progress(user_id, task, now)
            result = TaskCompletionResult(
                task_id=task.task_id,
                challenge_id=challenge.challenge_id,
                first_completion=first_completion,
                attempts=attempts,
                task_score=task.score,
            )

            if first_completion:
                result.participant_added = self._count_participant(user_id, challenge)
            else:
                logger.info(
                    f"[PROGRESSION] Task {task_id} already completed by user {user_id} "
                    f"(attempt {attempts})"
                )

            total_tasks, completed_tasks = self.count_tasks(user_id, challenge.challenge_id)
            if total_tasks > 0 and completed_tasks == total_tasks:
                result.challenge_completed = self._complete_challenge(
                    user_id, challenge, now
                )
                if result.challenge_completed and challenge.points > 0:
                    self.scores.increment_user_score(user_id, challenge.points)
                    result.bonus_points = challenge.points

            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return result

    def count_tasks(self, user_id: UUID, challenge_id: UUID) -> tuple[int, int]:
        """Return (non-deleted tasks, of which completed by the user)."""
        total_tasks, completed_tasks = (
            self.db.query(
                func.count(ChallengeTask.task_id),
                func.coalesce(
                    func.sum(
                        case((UserChallengeTaskProgress.completed.is_(True), 1), else_=0)
                    ),
                    0,
                ),
            )
            .select_from(ChallengeTask)
            .outerjoin(
                UserChallengeTaskProgress,
                and_(
                    UserChallengeTaskProgress.task_id == ChallengeTask.task_id,
                    UserChallengeTaskProgress.user_id == user_id,
                ),
            )
            .filter(
                ChallengeTask.challenge_id == challenge_id,
                ChallengeTask.deleted_at.is_(None),
            )
            .one()
        )
        return int(total_tasks), int(completed_tasks)

    def get_challenge_progress(
        self, user_id: UUID, challenge_id: UUID
    ) -> ChallengeProgressSummary:
        """
        Per-task completion for a user plus the overall percentage.

        Raises:
            NotFoundError: If the challenge does not exist
        """
        challenge = self.get_challenge(challenge_id)

        rows = (
            self.db.query(ChallengeTask, UserChallengeTaskProgress)
            .outerjoin(
                UserChallengeTaskProgress,
                and_(
                    UserChallengeTaskProgress.task_id == ChallengeTask.task_id,
                    UserChallengeTaskProgress.user_id == user_id,
                ),
            )
            .filter(
                ChallengeTask.challenge_id == challenge.challenge_id,
                ChallengeTask.deleted_at.is_(None),
            )
            .order_by(ChallengeTask.day)
            .all()
        )

        tasks = [
            TaskProgressView(
                task_id=task.task_id,
                day=task.day,
                title=task.title,
                score=task.score,
                completed=bool(progress and progress.completed),
                completed_at=progress.completed_at if progress else None,
                attempts=progress.attempts if progress else 0,
            )
            for task, progress in rows
        ]
        completed_tasks = sum(1 for t in tasks if t.completed)

        stored = self._find_challenge_progress(user_id, challenge.challenge_id)
        return ChallengeProgressSummary(
            challenge_id=challenge.challenge_id,
            user_id=user_id,
            progress=stored.progress if stored else 0,
            overall_progress=overall_progress(completed_tasks, len(tasks)),
            completed_at=stored.completed_at if stored else None,
            tasks=tasks,
        )

    def get_active_challenges(self, user_id: UUID) -> List[UserChallengeView]:
        """Started but unfinished challenges, most recently updated first."""
        rows = (
            self._user_challenges(user_id)
            .filter(UserChallengeProgress.progress < COMPLETE)
            .order_by(UserChallengeProgress.updated_at.desc())
            .all()
        )
        return [UserChallengeView(challenge, progress) for challenge, progress in rows]

    def get_completed_challenges(self, user_id: UUID) -> List[UserChallengeView]:
        """Finished challenges, most recently completed first."""
        rows = (
            self._user_challenges(user_id)
            .filter(UserChallengeProgress.progress == COMPLETE)
            .order_by(UserChallengeProgress.completed_at.desc())
            .all()
        )
        return [UserChallengeView(challenge, progress) for challenge, progress in rows]

    def _user_challenges(self, user_id: UUID):
        return (
            self.db.query(Challenge, UserChallengeProgress)
            .join(
                UserChallengeProgress,
                UserChallengeProgress.challenge_id == Challenge.challenge_id,
            )
            .filter(
                UserChallengeProgress.user_id == user_id,
                Challenge.deleted_at.is_(None),
            )
        )

    def _upsert_task_progress(
        self, user_id: UUID, task: ChallengeTask, now: datetime
    ) -> tuple[bool, int]:
        """
        Mark the task completed for the user.

        Returns:
            (first_completion, attempts) where first_completion is True only
            for the call that flipped ``completed`` from absent/False to True
        """
        progress = (
            self.db.query(UserChallengeTaskProgress)
            .filter(
                UserChallengeTaskProgress.user_id == user_id,
                UserChallengeTaskProgress.task_id == task.task_id,
            )
            .first()
        )

        if progress is None:
            # A concurrent insert for the same (user, task) fails on the
            # unique constraint and rolls back the losing transaction
            progress = UserChallengeTaskProgress(
                user_id=user_id,
                task_id=task.task_id,
                challenge_id=task.challenge_id,
                completed=True,
                completed_at=now,
                score=task.score,
                attempts=1,
                updated_at=now,
            )
            self.db.add(progress)
            self.db.flush()
            return True, 1

        flipped = (
            self.db.query(UserChallengeTaskProgress)
            .filter(
                UserChallengeTaskProgress.id == progress.id,
                UserChallengeTaskProgress.completed.is_(False),
            )
            .update(
                {
                    UserChallengeTaskProgress.completed: True,
                    UserChallengeTaskProgress.completed_at: now,
                    UserChallengeTaskProgress.attempts: UserChallengeTaskProgress.attempts + 1,
                    UserChallengeTaskProgress.updated_at: now,
                },
                synchronize_session="fetch",
            )
        )
        if not flipped:
            self.db.query(UserChallengeTaskProgress).filter(
                UserChallengeTaskProgress.id == progress.id
            ).update(
                {
                    UserChallengeTaskProgress.completed_at: now,
                    UserChallengeTaskProgress.attempts: UserChallengeTaskProgress.attempts + 1,
                    UserChallengeTaskProgress.updated_at: now,
                },
                synchronize_session="fetch",
            )

        self.db.refresh(progress)
        return bool(flipped), progress.attempts

    def _count_participant(self, user_id: UUID, challenge: Challenge) -> bool:
        """Increment ``participants`` unless this user was already counted."""
        progress = self._find_challenge_progress(user_id, challenge.challenge_id)
        if progress is None:
            progress = self._create_challenge_progress(user_id, challenge)

        counted = (
            self.db.query(UserChallengeProgress)
            .filter(
                UserChallengeProgress.id == progress.id,
                UserChallengeProgress.participant_counted.is_(False),
            )
            .update(
                {UserChallengeProgress.participant_counted: True},
                synchronize_session="fetch",
            )
        )
        if not counted:
            return False

        self.db.query(Challenge).filter(
            Challenge.challenge_id == challenge.challenge_id
        ).update(
            {Challenge.participants: Challenge.participants + 1},
            synchronize_session="fetch",
        )
        logger.info(
            f"[PROGRESSION] User {user_id} joined challenge {challenge.challenge_id}"
        )
        return True

    def _complete_challenge(
        self, user_id: UUID, challenge: Challenge, now: datetime
    ) -> bool:
        """Move the user's challenge progress to 100% and count the completion once."""
        progress = self._find_challenge_progress(user_id, challenge.challenge_id)
        if progress is None:
            progress = self._create_challenge_progress(user_id, challenge)

        completed = (
            self.db.query(UserChallengeProgress)
            .filter(
                UserChallengeProgress.id == progress.id,
                UserChallengeProgress.progress < COMPLETE,
            )
            .update(
                {
                    UserChallengeProgress.progress: COMPLETE,
                    UserChallengeProgress.completed_at: now,
                    UserChallengeProgress.updated_at: now,
                },
                synchronize_session="fetch",
            )
        )
        if not completed:
            logger.info(
                f"[PROGRESSION] Challenge {challenge.challenge_id} already counted "
                f"as completed for user {user_id}"
            )
            return False

        self.db.query(Challenge).filter(
            Challenge.challenge_id == challenge.challenge_id
        ).update(
            {Challenge.completions: Challenge.completions + 1},
            synchronize_session="fetch",
        )
        logger.info(
            f"[PROGRESSION] User {user_id} completed challenge {challenge.challenge_id}"
        )
        return True

    def _find_challenge_progress(
        self, user_id: UUID, challenge_id: UUID
    ) -> Optional[UserChallengeProgress]:
        return (
            self.db.query(UserChallengeProgress)
            .filter(
                UserChallengeProgress.challenge_id == challenge_id,
                UserChallengeProgress.user_id == user_id,
            )
            .first()
        )

    def _create_challenge_progress(
        self, user_id: UUID, challenge: Challenge
    ) -> UserChallengeProgress:
        progress = UserChallengeProgress(
            challenge_id=challenge.challenge_id,
            user_id=user_id,
            progress=0,
            current_reps=0,
            target_reps=challenge.target_reps or 0,
            participant_counted=False,
            updated_at=datetime.now(timezone.utc),
        )
        self.db.add(progress)
        self.db.flush()
        return progress
