"""
errors.py — Failure taxonomy for the tracker engine.
Every error is raised or returned before mutation, or recovered by a reload.
"""


class TrackerError(Exception):
    """Base class for engine failures surfaced to callers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    """Bad input: non-positive amount, future date, malformed value."""

    status_code = 400


class NotFoundError(TrackerError):
    """The habit, goal or log entry does not exist for this user."""

    status_code = 404


class ConsistencyError(TrackerError):
    """Illegal state transition, e.g. reversing an already reversed entry."""

    status_code = 409


class TransientStoreError(TrackerError):
    """The store rejected a write; local state was discarded and reloaded."""

    status_code = 503


class StoreError(Exception):
    """Raised by the repository when a write cannot be committed."""


class ForbiddenError(TrackerError):
    """The caller may not act on this resource, e.g. inviting to someone else's event."""

    status_code = 403
