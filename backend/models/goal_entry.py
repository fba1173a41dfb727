from sqlalchemy import Column, Integer, String, Date, Boolean, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from database import Base


class GoalEntry(Base):
    __tablename__ = "goal_entries"

    id = Column(String(64), primary_key=True)
    goal_id = Column(String(64), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # append order within the goal
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 4), nullable=False)
    reversed = Column(Boolean, nullable=False, default=False)

    goal = relationship("Goal", back_populates="entries")
