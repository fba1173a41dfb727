from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from routes.deps import dump, get_tracker, respond
from services.habit_state import current_streak
from services.reducer import CreateHabit, DeleteHabit, RenameHabit, ToggleHabit
from services.tracker_session import TrackerSession

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])

class HabitCreate(BaseModel):
    title: str
    category: Optional[str] = "Health"
    is_negative: Optional[bool] = False
    description: Optional[str] = None

class HabitUpdate(BaseModel):
    title: str

class ToggleRequest(BaseModel):
    day: Optional[date] = Field(default=None, alias="date")


def _with_streak(habit, today: date) -> dict:
    data = dump(habit)
    data["streak"] = current_streak(habit, today)
    return data


@router.get("")
async def list_habits(tracker: TrackerSession = Depends(get_tracker)):
    today = tracker.clock().date()
    return [_with_streak(h, today) for h in tracker.state.habits.values()]

@router.post("")
async def create_habit(body: HabitCreate, tracker: TrackerSession = Depends(get_tracker)):
    result = tracker.dispatch(CreateHabit(
        title=body.title,
        category=body.category or "Health",
        is_negative=bool(body.is_negative),
        description=body.description,
    ))
    return respond(result)

@router.get("/streaks")
async def habit_streaks(tracker: TrackerSession = Depends(get_tracker)):
    today = tracker.clock().date()
    return [
        {"habit_id": h.id, "title": h.title, "streak": current_streak(h, today)}
        for h in tracker.state.habits.values()
    ]

@router.put("/{habit_id}")
async def rename_habit(habit_id: str, body: HabitUpdate, tracker: TrackerSession = Depends(get_tracker)):
    return respond(tracker.dispatch(RenameHabit(habit_id=habit_id, title=body.title)))

@router.delete("/{habit_id}")
async def delete_habit(habit_id: str, tracker: TrackerSession = Depends(get_tracker)):
    result = tracker.dispatch(DeleteHabit(habit_id=habit_id))
    return respond(result, data={"id": habit_id})

@router.post("/{habit_id}/toggle")
async def toggle_habit(habit_id: str, body: Optional[ToggleRequest] = None, tracker: TrackerSession = Depends(get_tracker)):
    """Advance the day's status: unset -> good -> bad -> unset. Defaults to today."""
    day = body.day if body and body.day else tracker.clock().date()
    result = tracker.dispatch(ToggleHabit(habit_id=habit_id, day=day))
    if not result.is_ok:
        return respond(result)
    return respond(result, data=_with_streak(result.value, tracker.clock().date()))
