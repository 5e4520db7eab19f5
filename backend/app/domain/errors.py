"""
Domain errors raised by the services and translated to HTTP status codes by
the routers.
"""


class NotFoundError(ValueError):
    """A referenced program, task, challenge or user is missing or soft-deleted."""


class ChallengeAlreadyStartedError(ValueError):
    """The user already has a progress row for this challenge."""
