"""
Workout session payload schemas.

There is no ``completed`` field: completion is decided server-side by
the program rule evaluator.

Timestamps are normalised to UTC on the way in; a value without an offset is
taken to be UTC already. Day windows and streak dates rely on this.
"""

from typing import List, Optional
from uuid import UUID
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator, model_validator


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to UTC, or tag a naive one as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SetResultPayload(BaseModel):
    """One set inside a submitted session."""

    set_number: int = Field(..., ge=1, description="1-based set position")
    target_reps: Optional[int] = Field(None, ge=0, description="Planned reps")
    completed_reps: int = Field(0, ge=0, description="Reps actually done")
    duration: int = Field(0, ge=0, description="Set duration in seconds")
    timestamp: datetime = Field(..., description="Set completion timestamp")

    @field_validator("timestamp")
    @classmethod
    def timestamp_to_utc(cls, value):
        return as_utc(value)


class SessionSubmission(BaseModel):
    """A workout session submitted by a client."""

    program_id: UUID = Field(..., description="Program the session was run against")
    start_time: datetime = Field(..., description="Session start timestamp")
    end_time: Optional[datetime] = Field(None, description="Session end timestamp")
    total_reps: int = Field(0, ge=0, description="Total reps in the session")
    total_duration: int = Field(0, ge=0, description="Total duration in seconds")
    notes: Optional[str] = None
    challenge_id: Optional[UUID] = Field(None, description="Linked challenge")
    challenge_task_id: Optional[UUID] = Field(None, description="Linked challenge task")
    sets: List[SetResultPayload] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def times_to_utc(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_challenge_link(self):
        if self.challenge_id is not None and self.challenge_task_id is None:
            raise ValueError("challenge_task_id is required when challenge_id is set")
        return self
