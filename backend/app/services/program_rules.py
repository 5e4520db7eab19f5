"""
Program rule evaluator.

Decides whether a submitted session counts as completed for its program.
Pure: no database access, never raises on bad program parameters (a program
missing the values its type needs simply yields "not completed").

Tolerances are compared in integer percent arithmetic so boundaries such as
"exactly 5% over" are not lost to float rounding.
"""

from typing import Optional

from app.domain.programs import (
    AmrapProgram,
    EmomProgram,
    FreeModeProgram,
    MaxTimeProgram,
    ProgramSpec,
    PyramidProgram,
    SetsRepsProgram,
    TargetRepsProgram,
)

TIMED_TOLERANCE_PERCENT = 5  # MAX_TIME, AMRAP
EMOM_DURATION_TOLERANCE_PERCENT = 10
REPS_THRESHOLD_PERCENT = 90  # SETS_REPS, PYRAMID, EMOM


def _positive(value: Optional[int]) -> bool:
    return value is not None and value > 0


def within_tolerance(actual: int, target: int, percent: int) -> bool:
    """True when ``actual`` is within ``percent``% of ``target`` either way."""
    return abs(actual - target) * 100 <= target * percent


def reaches_threshold(actual: int, expected: int, percent: int) -> bool:
    """True when ``actual`` is at least ``percent``% of ``expected``."""
    return actual * 100 >= expected * percent


class ProgramRuleEvaluator:
    """Completion policies for every program type."""

    @staticmethod
    def evaluate(program: Optional[ProgramSpec], session) -> bool:
        """
        Decide whether a session completes its program.

        Args:
            program: Typed program spec (None for an unknown program type)
            session: Anything exposing ``total_reps`` and ``total_duration``

        Returns:
            True if the session meets the program's completion policy
        """
        if program is None:
            return False

        evaluator = _EVALUATORS.get(type(program))
        if evaluator is None:
            return False

        total_reps = session.total_reps or 0
        total_duration = session.total_duration or 0
        return evaluator(program, total_reps, total_duration)

    @staticmethod
    def free_mode(program: FreeModeProgram, total_reps: int, total_duration: int) -> bool:
        return True

    @staticmethod
    def target_reps(
        program: TargetRepsProgram, total_reps: int, total_duration: int
    ) -> bool:
        if not _positive(program.target_reps):
            return False
        if total_reps < program.target_reps:
            return False
        # Time limit is optional; when set the reps must fit inside it
        if program.time_limit is not None:
            return total_duration <= program.time_limit
        return True

    @staticmethod
    def max_time(program: MaxTimeProgram, total_reps: int, total_duration: int) -> bool:
        if not _positive(program.duration):
            return False
        return within_tolerance(
            total_duration, program.duration, TIMED_TOLERANCE_PERCENT
        )

    @staticmethod
    def sets_reps(
        program: SetsRepsProgram, total_reps: int, total_duration: int
    ) -> bool:
        if not (_positive(program.sets) and _positive(program.reps_per_set)):
            return False
        expected = program.sets * program.reps_per_set
        return reaches_threshold(total_reps, expected, REPS_THRESHOLD_PERCENT)

    @staticmethod
    def pyramid(program: PyramidProgram, total_reps: int, total_duration: int) -> bool:
        if not program.reps_sequence:
            return False
        expected = sum(program.reps_sequence)
        if expected <= 0:
            return False
        return reaches_threshold(total_reps, expected, REPS_THRESHOLD_PERCENT)

    @staticmethod
    def emom(program: EmomProgram, total_reps: int, total_duration: int) -> bool:
        if not (_positive(program.total_minutes) and _positive(program.reps_per_minute)):
            return False
        expected_duration = program.total_minutes * 60
        expected_reps = program.total_minutes * program.reps_per_minute
        return within_tolerance(
            total_duration, expected_duration, EMOM_DURATION_TOLERANCE_PERCENT
        ) and reaches_threshold(total_reps, expected_reps, REPS_THRESHOLD_PERCENT)

    @staticmethod
    def amrap(program: AmrapProgram, total_reps: int, total_duration: int) -> bool:
        # Reps are uncapped, only the clock matters
        if not _positive(program.duration):
            return False
        return within_tolerance(
            total_duration, program.duration, TIMED_TOLERANCE_PERCENT
        )


_EVALUATORS = {
    FreeModeProgram: ProgramRuleEvaluator.free_mode,
    TargetRepsProgram: ProgramRuleEvaluator.target_reps,
    MaxTimeProgram: ProgramRuleEvaluator.max_time,
    SetsRepsProgram: ProgramRuleEvaluator.sets_reps,
    PyramidProgram: ProgramRuleEvaluator.pyramid,
    EmomProgram: ProgramRuleEvaluator.emom,
    AmrapProgram: ProgramRuleEvaluator.amrap,
}
