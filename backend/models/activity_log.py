from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Date, DateTime, Boolean, Numeric, ForeignKey
from database import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # habit/goal/system/friend/event
    description = Column(Text, nullable=False)
    reversible = Column(Boolean, nullable=False, default=False)
    reversed = Column(Boolean, nullable=False, default=False)
    related_id = Column(String(64), nullable=True)  # habit, goal or event id

    # Structured reversal data; description is display text only
    amount = Column(Numeric(14, 4), nullable=True)
    entry_date = Column(Date, nullable=True)
    entry_id = Column(String(64), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)
