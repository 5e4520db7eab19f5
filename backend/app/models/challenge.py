from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.sql import func
import uuid
from app.db.database import Base
from app.db.types import GUID


class Challenge(Base):
    __tablename__ = "challenges"

    challenge_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    difficulty = Column(String, nullable=False, default="BEGINNER")
    target_reps = Column(Integer, nullable=True)
    points = Column(Integer, default=0, nullable=False)  # bonus on full completion
    # Monotonic counters, guarded per (user, challenge)
    participants = Column(Integer, default=0, nullable=False)
    completions = Column(Integer, default=0, nullable=False)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class ChallengeTask(Base):
    __tablename__ = "challenge_tasks"

    task_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    challenge_id = Column(
        GUID(), ForeignKey("challenges.challenge_id"), nullable=False, index=True
    )
    day = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    target_reps = Column(Integer, nullable=True)
    duration = Column(Integer, nullable=True)
    sets = Column(Integer, nullable=True)
    reps_per_set = Column(Integer, nullable=True)
    score = Column(Integer, nullable=True)  # points awarded on first completion
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class UserChallengeTaskProgress(Base):
    __tablename__ = "user_challenge_task_progress"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), nullable=False, index=True)
    task_id = Column(
        GUID(), ForeignKey("challenge_tasks.task_id"), nullable=False, index=True
    )
    challenge_id = Column(GUID(), nullable=False, index=True)
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    score = Column(Integer, nullable=True)
    attempts = Column(Integer, default=0, nullable=False)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "task_id", name="uq_user_task_progress"),
    )


class UserChallengeProgress(Base):
    __tablename__ = "user_challenge_progress"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    challenge_id = Column(
        GUID(), ForeignKey("challenges.challenge_id"), nullable=False, index=True
    )
    user_id = Column(GUID(), nullable=False, index=True)
    progress = Column(Integer, default=0, nullable=False)  # 0 or 100
    current_reps = Column(Integer, default=0, nullable=False)
    target_reps = Column(Integer, default=0, nullable=False)
    # Set once when the user is added to Challenge.participants
    participant_counted = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_user_challenge_progress"),
    )
