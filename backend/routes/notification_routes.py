from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from routes.deps import dump, get_tracker, get_user_id
from services.event_service import EventService
from services.notification_service import NotificationService
from services.social_service import SocialService
from services.tracker_session import TrackerSession


router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(tracker: TrackerSession = Depends(get_tracker), db: Session = Depends(get_db)):
    """Derived on every read; dismissed ids are filtered out."""
    user_id = tracker.state.user_id
    notes = NotificationService.get_all(
        db,
        user_id,
        list(tracker.state.habits.values()),
        list(tracker.state.goals.values()),
        SocialService.pending_requests(db, user_id),
        EventService.list_events(db, user_id),
        now=tracker.clock(),
    )
    return dump(notes)


@router.delete("/{notification_id}")
async def dismiss_notification(notification_id: str, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    NotificationService.dismiss(db, user_id, notification_id)
    return {"status": "success"}
