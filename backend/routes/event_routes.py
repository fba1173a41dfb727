from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from database import get_db
from routes.deps import dump, get_user_id
from services.event_service import EventService

router = APIRouter(prefix="/api/v1/events", tags=["Events"])

class EventCreate(BaseModel):
    title: str
    day: date = Field(alias="date")
    time: Optional[str] = ""
    description: Optional[str] = ""
    location: Optional[str] = ""

class InviteRequest(BaseModel):
    friend_ids: List[str]

class RsvpRequest(BaseModel):
    attending: bool


@router.get("")
async def list_events(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return dump(EventService.list_events(db, user_id))

@router.post("")
async def create_event(body: EventCreate, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    event = EventService.create_event(
        db, user_id, body.title, body.day,
        time=body.time or "",
        description=body.description or "",
        location=body.location or "",
    )
    return {"status": "success", "data": dump(event)}

@router.post("/{event_id}/invite")
async def invite_friends(event_id: str, body: InviteRequest, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    event = EventService.invite(db, user_id, event_id, body.friend_ids)
    return {"status": "success", "data": dump(event)}

@router.post("/{event_id}/rsvp")
async def rsvp(event_id: str, body: RsvpRequest, db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    event = EventService.rsvp(db, user_id, event_id, body.attending)
    return {"status": "success", "data": dump(event)}
