from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base


class Habit(Base):
    __tablename__ = "habits"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(20), nullable=False, default="Health")  # Health/Work/Fitness/Mindfulness/Custom
    is_negative = Column(Boolean, nullable=False, default=False)  # e.g. "No smoking"
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    entries = relationship(
        "HabitEntry",
        back_populates="habit",
        cascade="all, delete-orphan",
    )
