from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, UniqueConstraint
from database import Base


class HabitEvent(Base):
    __tablename__ = "events"

    id = Column(String(64), primary_key=True)
    organizer_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(300), nullable=False, default="")
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False, default="")  # HH:MM
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


class EventRsvp(Base):
    __tablename__ = "event_rsvps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(64), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default="invited")  # invited/attending/declined

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_user"),
    )
