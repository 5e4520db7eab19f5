"""
Program domain models.

Each program type carries only the parameters its completion policy needs.
A stored ``WorkoutProgram`` row is turned into one of these specs with
``build_program_spec``; the rule evaluator dispatches on the spec class.

Parameters are optional on every spec: a program saved without the value its
type needs still loads, and the evaluator treats it as "not completed".
"""

from enum import Enum
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field, ValidationError


class ProgramType(str, Enum):
    """Completion policy of a workout program."""

    FREE_MODE = "FREE_MODE"
    TARGET_REPS = "TARGET_REPS"
    MAX_TIME = "MAX_TIME"
    SETS_REPS = "SETS_REPS"
    PYRAMID = "PYRAMID"
    EMOM = "EMOM"
    AMRAP = "AMRAP"


class Difficulty(str, Enum):
    """Program difficulty level."""

    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class FreeModeProgram(BaseModel):
    type: Literal[ProgramType.FREE_MODE] = ProgramType.FREE_MODE


class TargetRepsProgram(BaseModel):
    type: Literal[ProgramType.TARGET_REPS] = ProgramType.TARGET_REPS
    target_reps: Optional[int] = Field(None, description="Reps to reach")
    time_limit: Optional[int] = Field(None, description="Optional limit in seconds")


class MaxTimeProgram(BaseModel):
    type: Literal[ProgramType.MAX_TIME] = ProgramType.MAX_TIME
    duration: Optional[int] = Field(None, description="Assigned window in seconds")


class SetsRepsProgram(BaseModel):
    type: Literal[ProgramType.SETS_REPS] = ProgramType.SETS_REPS
    sets: Optional[int] = None
    reps_per_set: Optional[int] = None


class PyramidProgram(BaseModel):
    type: Literal[ProgramType.PYRAMID] = ProgramType.PYRAMID
    reps_sequence: Optional[List[int]] = None


class EmomProgram(BaseModel):
    type: Literal[ProgramType.EMOM] = ProgramType.EMOM
    reps_per_minute: Optional[int] = None
    total_minutes: Optional[int] = None


class AmrapProgram(BaseModel):
    type: Literal[ProgramType.AMRAP] = ProgramType.AMRAP
    duration: Optional[int] = Field(None, description="Round length in seconds")


ProgramSpec = Union[
    FreeModeProgram,
    TargetRepsProgram,
    MaxTimeProgram,
    SetsRepsProgram,
    PyramidProgram,
    EmomProgram,
    AmrapProgram,
]

PROGRAM_SPECS = {
    ProgramType.FREE_MODE: FreeModeProgram,
    ProgramType.TARGET_REPS: TargetRepsProgram,
    ProgramType.MAX_TIME: MaxTimeProgram,
    ProgramType.SETS_REPS: SetsRepsProgram,
    ProgramType.PYRAMID: PyramidProgram,
    ProgramType.EMOM: EmomProgram,
    ProgramType.AMRAP: AmrapProgram,
}


def build_program_spec(program) -> Optional[ProgramSpec]:
    """
    Build the typed spec for a stored program.

    Args:
        program: ``WorkoutProgram`` row (or any object with the same attributes)

    Returns:
        The matching spec, or None when the program type is unknown or its
        parameters are malformed
    """
    try:
        program_type = ProgramType(program.type)
    except ValueError:
        return None

    spec_class = PROGRAM_SPECS[program_type]
    params = {
        name: getattr(program, name, None)
        for name in spec_class.model_fields
        if name != "type"
    }
    try:
        return spec_class(**params)
    except ValidationError:
        return None
