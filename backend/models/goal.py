from datetime import datetime, timezone

from sqlalchemy import Column, String, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from database import Base


class Goal(Base):
    __tablename__ = "goals"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    category = Column(String(50), nullable=False, default="Custom")
    target = Column(Numeric(14, 4), nullable=False)
    current = Column(Numeric(14, 4), nullable=False, default=0)
    unit = Column(String(50), nullable=False, default="units")
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    entries = relationship(
        "GoalEntry",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="GoalEntry.position",
    )
