"""
event_service.py — Group habit events, invites and RSVPs
An event's invitee/attendee/declined lists are derived from its RSVP rows.
"""

import logging
from datetime import date, datetime, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.event import EventRsvp, HabitEvent as EventRow
from models.friendship import Friendship
from models.user import User
from schemas import HabitEvent
from services.errors import ForbiddenError, NotFoundError, ValidationError
from services.log_entries import make_entry, new_id
from services.repository import SqlRepository

logger = logging.getLogger(__name__)


def _log(db: Session, user_id: str, description: str, related_id: str | None = None) -> None:
    entry = make_entry("event", description, datetime.now(timezone.utc), related_id=related_id)
    SqlRepository(db, user_id).append_log(entry)


def _to_schema(db: Session, row: EventRow) -> HabitEvent:
    organizer = db.get(User, row.organizer_id)
    rsvps = db.query(EventRsvp).filter_by(event_id=row.id).all()
    by_status = {"invited": [], "attending": [], "declined": []}
    for r in rsvps:
        by_status.setdefault(r.status, []).append(r.user_id)
    return HabitEvent(
        id=row.id,
        title=row.title,
        description=row.description or "",
        location=row.location or "",
        date=row.date,
        time=row.time or "",
        organizer=organizer.name if organizer else "",
        organizer_id=row.organizer_id,
        invitees=by_status["invited"],
        attendees=by_status["attending"],
        declined=by_status["declined"],
    )


class EventService:
    @staticmethod
    def list_events(db: Session, user_id: str) -> list[HabitEvent]:
        """Events the user organizes or has an RSVP row for, latest first."""
        rows = db.query(EventRow).outerjoin(
            EventRsvp, (EventRsvp.event_id == EventRow.id) & (EventRsvp.user_id == user_id)
        ).filter(
            or_(EventRow.organizer_id == user_id, EventRsvp.user_id == user_id)
        ).order_by(EventRow.date.desc(), EventRow.time.desc()).all()
        return [_to_schema(db, r) for r in rows]

    @staticmethod
    def create_event(
        db: Session,
        user_id: str,
        title: str,
        day: date,
        time: str = "",
        description: str = "",
        location: str = "",
    ) -> HabitEvent:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Event title is required")
        if day is None:
            raise ValidationError("Event date is required")

        try:
            row = EventRow(
                id=new_id(),
                organizer_id=user_id,
                title=title,
                description=description or "",
                location=location or "",
                date=day,
                time=time or "",
            )
            db.add(row)
            db.flush()
            db.add(EventRsvp(event_id=row.id, user_id=user_id, status="attending"))
            _log(db, user_id, f'Created event "{title}" on {day.isoformat()}', related_id=row.id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info(f"Event {row.id} created by {user_id}")
        return _to_schema(db, row)

    @staticmethod
    def invite(db: Session, user_id: str, event_id: str, friend_ids: list[str]) -> HabitEvent:
        """Only the organizer may invite, and only accepted friends get a row."""
        row = db.get(EventRow, event_id)
        if row is None:
            raise NotFoundError("Event not found")
        if row.organizer_id != user_id:
            raise ForbiddenError("Only the organizer can invite people to this event")
        if not friend_ids:
            raise ValidationError("friend_ids is required")

        friends = {
            f.friend_id for f in db.query(Friendship).filter(
                Friendship.user_id == user_id,
                Friendship.status == "accepted",
                Friendship.friend_id.in_(friend_ids),
            ).all()
        }
        try:
            invited = 0
            for fid in friend_ids:
                if fid not in friends:
                    continue
                if db.query(EventRsvp).filter_by(event_id=event_id, user_id=fid).first() is None:
                    db.add(EventRsvp(event_id=event_id, user_id=fid, status="invited"))
                    invited += 1
            if invited:
                _log(db, user_id, f'Invited {invited} friend(s) to "{row.title}"', related_id=event_id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return _to_schema(db, row)

    @staticmethod
    def rsvp(db: Session, user_id: str, event_id: str, attending: bool) -> HabitEvent:
        row = db.get(EventRow, event_id)
        if row is None:
            raise NotFoundError("Event not found")
        status = "attending" if attending else "declined"

        try:
            existing = db.query(EventRsvp).filter_by(event_id=event_id, user_id=user_id).first()
            if existing is None:
                db.add(EventRsvp(event_id=event_id, user_id=user_id, status=status))
            else:
                existing.status = status
            verb = "Joined" if attending else "Declined"
            _log(db, user_id, f'{verb} event "{row.title}"', related_id=event_id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return _to_schema(db, row)
