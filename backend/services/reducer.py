"""
reducer.py — Single entry point for state transitions.
reduce(state, action, now) -> Result, where the result carries the next state
plus the repository effects that confirm it.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel

from schemas import TrackerState
from services import activity_log, goal_ledger, habit_state
from services.result import Result


class ToggleHabit(BaseModel):
    habit_id: str
    day: date


class CreateHabit(BaseModel):
    title: str
    category: str = "Health"
    is_negative: bool = False
    description: Optional[str] = None
    habit_id: Optional[str] = None


class RenameHabit(BaseModel):
    habit_id: str
    title: str


class DeleteHabit(BaseModel):
    habit_id: str


class AddGoalProgress(BaseModel):
    goal_id: str
    amount: Any  # validated by the ledger so bad input becomes a typed error


class CreateGoal(BaseModel):
    title: str
    target: Any
    unit: str = "units"
    category: str = "Custom"
    deadline: Optional[date] = None
    goal_id: Optional[str] = None


class EditGoal(BaseModel):
    goal_id: str
    title: Optional[str] = None
    target: Any = None
    deadline: Optional[date] = None


class DeleteGoal(BaseModel):
    goal_id: str


class EditProgressEntry(BaseModel):
    log_id: str
    new_amount: Any


class ReverseLogEntry(BaseModel):
    log_id: str


HANDLERS = {
    ToggleHabit: lambda s, a, now: habit_state.toggle_habit(s, a.habit_id, a.day, now),
    CreateHabit: lambda s, a, now: habit_state.create_habit(
        s, a.title, a.category, a.is_negative, a.description, a.habit_id, now
    ),
    RenameHabit: lambda s, a, now: habit_state.rename_habit(s, a.habit_id, a.title, now),
    DeleteHabit: lambda s, a, now: habit_state.delete_habit(s, a.habit_id, now),
    AddGoalProgress: lambda s, a, now: goal_ledger.add_progress(s, a.goal_id, a.amount, now),
    CreateGoal: lambda s, a, now: goal_ledger.create_goal(
        s, a.title, a.target, a.unit, a.category, a.deadline, a.goal_id, now
    ),
    EditGoal: lambda s, a, now: goal_ledger.edit_goal(s, a.goal_id, a.title, a.target, a.deadline, now),
    DeleteGoal: lambda s, a, now: goal_ledger.delete_goal(s, a.goal_id, now),
    EditProgressEntry: lambda s, a, now: activity_log.edit_progress_entry(s, a.log_id, a.new_amount, now),
    ReverseLogEntry: lambda s, a, now: activity_log.reverse_log_entry(s, a.log_id, now),
}


def reduce(state: TrackerState, action: BaseModel, now: datetime | None = None) -> Result:
    handler = HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown action: {type(action).__name__}")
    return handler(state, action, now or datetime.now(timezone.utc))
