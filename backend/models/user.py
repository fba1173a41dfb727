from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)  # identity-provider subject
    email = Column(String(255), nullable=False, default="")
    name = Column(String(200), nullable=False, default="User")
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
