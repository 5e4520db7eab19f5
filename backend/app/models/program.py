from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.db.database import Base
from app.db.types import GUID, RepsSequence


class WorkoutProgram(Base):
    __tablename__ = "workout_programs"

    program_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, index=True)  # see ProgramType
    difficulty = Column(String, nullable=False)  # BEGINNER, INTERMEDIATE, ADVANCED

    # Type-specific parameters
    target_reps = Column(Integer, nullable=True)  # TARGET_REPS
    time_limit = Column(Integer, nullable=True)  # TARGET_REPS (optional), seconds
    duration = Column(Integer, nullable=True)  # MAX_TIME, AMRAP, seconds
    sets = Column(Integer, nullable=True)  # SETS_REPS
    reps_per_set = Column(Integer, nullable=True)  # SETS_REPS
    reps_sequence = Column(RepsSequence(), nullable=True)  # PYRAMID
    reps_per_minute = Column(Integer, nullable=True)  # EMOM
    total_minutes = Column(Integer, nullable=True)  # EMOM

    is_custom = Column(Boolean, default=False, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    created_by = Column(GUID(), nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class WorkoutSession(Base):
    __tablename__ = "workout_sessions"

    session_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    program_id = Column(
        GUID(), ForeignKey("workout_programs.program_id"), nullable=False, index=True
    )
    user_id = Column(GUID(), nullable=False, index=True)
    challenge_id = Column(GUID(), nullable=True)
    challenge_task_id = Column(GUID(), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    total_reps = Column(Integer, default=0, nullable=False)
    total_duration = Column(Integer, default=0, nullable=False)  # seconds
    completed = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    sets = relationship(
        "SetResult",
        order_by="SetResult.set_number",
        lazy="selectin",
    )

    # Leaderboard windows scan by start_time
    __table_args__ = (
        Index("idx_workout_sessions_user_start", "user_id", "start_time"),
    )


class SetResult(Base):
    __tablename__ = "set_results"

    set_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        GUID(),
        ForeignKey("workout_sessions.session_id"),
        nullable=False,
        index=True,
    )
    set_number = Column(Integer, nullable=False)
    target_reps = Column(Integer, nullable=True)
    completed_reps = Column(Integer, default=0, nullable=False)
    duration = Column(Integer, default=0, nullable=False)  # seconds
    timestamp = Column(DateTime(timezone=True), nullable=False)
