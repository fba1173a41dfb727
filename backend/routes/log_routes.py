from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from config import ACTIVITY_LOG_LIMIT
from routes.deps import dump, get_tracker, respond
from services.activity_log import timeline
from services.reducer import EditProgressEntry, ReverseLogEntry
from services.tracker_session import TrackerSession

router = APIRouter(prefix="/api/v1/logs", tags=["Activity Log"])

class EditRequest(BaseModel):
    new_amount: Any = None


@router.get("")
async def list_logs(
    limit: int = Query(ACTIVITY_LOG_LIMIT, ge=1, le=500),
    type: Optional[str] = None,
    tracker: TrackerSession = Depends(get_tracker),
):
    """Newest first, read from the store so limits past the loaded window work."""
    return dump(tracker.repository.list_activity_log(limit=limit, log_type=type))

@router.get("/timeline")
async def log_timeline(type: Optional[str] = None, tracker: TrackerSession = Depends(get_tracker)):
    return [
        {"date": group["date"], "entries": dump(group["entries"])}
        for group in timeline(tracker.state.logs, type)
    ]

@router.put("/{log_id}")
async def edit_log(log_id: str, body: EditRequest, tracker: TrackerSession = Depends(get_tracker)):
    """Correct a goal progress amount; the goal shifts by the difference."""
    return respond(tracker.dispatch(EditProgressEntry(log_id=log_id, new_amount=body.new_amount)))

@router.put("/{log_id}/reverse")
async def reverse_log(log_id: str, tracker: TrackerSession = Depends(get_tracker)):
    return respond(tracker.dispatch(ReverseLogEntry(log_id=log_id)))
