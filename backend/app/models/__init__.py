from .user import User
from .program import WorkoutProgram, WorkoutSession, SetResult
from .challenge import (
    Challenge,
    ChallengeTask,
    UserChallengeTaskProgress,
    UserChallengeProgress,
)

__all__ = [
    "User",
    "WorkoutProgram",
    "WorkoutSession",
    "SetResult",
    "Challenge",
    "ChallengeTask",
    "UserChallengeTaskProgress",
    "UserChallengeProgress",
]
