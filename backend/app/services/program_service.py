"""
Workout program lookup and usage counter.
"""

from uuid import UUID
from sqlalchemy.orm import Session

from app.domain.errors import NotFoundError
from app.models.program import WorkoutProgram


class ProgramService:
    """Service for reading programs and bumping their usage."""

    def __init__(self, db: Session):
        self.db = db

    def get_program(self, program_id: UUID) -> WorkoutProgram:
        """
        Get a non-deleted program.

        Raises:
            NotFoundError: If the program does not exist or is soft-deleted
        """
        program = (
            self.db.query(WorkoutProgram)
            .filter(
                WorkoutProgram.program_id == program_id,
                WorkoutProgram.deleted_at.is_(None),
            )
            .first()
        )
        if not program:
            raise NotFoundError(f"Program {program_id} not found")
        return program

    def increment_usage(self, program_id: UUID) -> None:
        """Count one more attempted use of the program. Does not commit."""
        self.db.query(WorkoutProgram).filter(
            WorkoutProgram.program_id == program_id
        ).update(
            {WorkoutProgram.usage_count: WorkoutProgram.usage_count + 1},
            synchronize_session="fetch",
        )
