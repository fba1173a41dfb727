"""
result.py — Outcome of a state transition.
A successful result carries the next state plus the persistence effects
that confirm it; a failed one carries the error and leaves state untouched.
"""

from typing import Any, NamedTuple, Optional

from services.errors import TrackerError


class Effect(NamedTuple):
    """A single repository call, e.g. Effect("upsert_habit_entry", {...})."""

    op: str
    args: dict


class Result:
    __slots__ = ("state", "effects", "warnings", "error", "value")

    def __init__(self, state=None, effects=None, warnings=None, error: Optional[TrackerError] = None, value: Any = None):
        self.state = state
        self.effects = list(effects or [])
        self.warnings = list(warnings or [])
        self.error = error
        self.value = value

    @classmethod
    def ok(cls, state, effects=None, warnings=None, value=None) -> "Result":
        return cls(state=state, effects=effects, warnings=warnings, value=value)

    @classmethod
    def err(cls, error: TrackerError, state=None) -> "Result":
        return cls(state=state, error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def __repr__(self):
        if self.is_ok:
            return f"<Result ok effects={len(self.effects)} warnings={len(self.warnings)}>"
        return f"<Result err {type(self.error).__name__}: {self.error.message}>"
