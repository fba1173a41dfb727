from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from routes.deps import dump, get_tracker, respond
from services.goal_ledger import goals_at_risk
from services.reducer import AddGoalProgress, CreateGoal, DeleteGoal, EditGoal
from services.tracker_session import TrackerSession

router = APIRouter(prefix="/api/v1/goals", tags=["Goals"])

# Amounts stay untyped here so bad numbers surface as 400s from the ledger
class GoalCreate(BaseModel):
    title: str
    target: Any = None
    unit: Optional[str] = "units"
    category: Optional[str] = "Custom"
    deadline: Optional[date] = None

class GoalUpdate(BaseModel):
    title: Optional[str] = None
    target: Any = None
    deadline: Optional[date] = None

class ProgressRequest(BaseModel):
    amount: Any = None


@router.get("")
async def list_goals(tracker: TrackerSession = Depends(get_tracker)):
    return dump(list(tracker.state.goals.values()))

@router.post("")
async def create_goal(body: GoalCreate, tracker: TrackerSession = Depends(get_tracker)):
    result = tracker.dispatch(CreateGoal(
        title=body.title,
        target=body.target,
        unit=body.unit or "units",
        category=body.category or "Custom",
        deadline=body.deadline,
    ))
    return respond(result)

@router.get("/at-risk")
async def at_risk_goals(tracker: TrackerSession = Depends(get_tracker)):
    """Goals lagging behind the pace needed to meet their deadline."""
    return goals_at_risk(list(tracker.state.goals.values()), tracker.clock())

@router.put("/{goal_id}")
async def update_goal(goal_id: str, body: GoalUpdate, tracker: TrackerSession = Depends(get_tracker)):
    result = tracker.dispatch(EditGoal(
        goal_id=goal_id,
        title=body.title,
        target=body.target,
        deadline=body.deadline,
    ))
    return respond(result)

@router.delete("/{goal_id}")
async def delete_goal(goal_id: str, tracker: TrackerSession = Depends(get_tracker)):
    result = tracker.dispatch(DeleteGoal(goal_id=goal_id))
    return respond(result, data={"id": goal_id})

@router.post("/{goal_id}/add")
async def add_progress(goal_id: str, body: ProgressRequest, tracker: TrackerSession = Depends(get_tracker)):
    return respond(tracker.dispatch(AddGoalProgress(goal_id=goal_id, amount=body.amount)))
