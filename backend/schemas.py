"""
schemas.py — Domain types shared by the reconciliation engine and the API.
Habits, goals and the activity log as they live in a user's in-memory state.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field, PlainSerializer, model_validator

# Decimals stay exact in memory and go out as JSON numbers
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

HabitCategory = Literal["Health", "Work", "Fitness", "Mindfulness", "Custom"]
LogType = Literal["habit", "goal", "system", "friend", "event"]
NotificationType = Literal["goal", "habit", "friend", "event", "ping", "friend_request", "event_invite"]


class HabitStatus(str, Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Habit(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: HabitCategory = "Health"
    is_negative: bool = False
    history: dict[date, HabitStatus] = Field(default_factory=dict)  # absent key = not logged


class GoalEntry(BaseModel):
    id: str
    date: date
    amount: Amount
    reversed: bool = False


class NumericGoal(BaseModel):
    id: str
    title: str
    category: str = "Custom"
    target: Amount
    current: Amount = Decimal("0")
    unit: str = "units"
    deadline: Optional[date] = None
    history: list[GoalEntry] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ActivityLogEntry(BaseModel):
    id: str
    type: LogType
    description: str
    timestamp: datetime
    reversible: bool = False
    reversed: bool = False
    related_id: Optional[str] = None
    amount: Optional[Amount] = None
    entry_date: Optional[date] = None
    entry_id: Optional[str] = None

    @model_validator(mode="after")
    def _reversed_requires_reversible(self):
        if self.reversed and not self.reversible:
            raise ValueError("only reversible entries can be reversed")
        return self


class Notification(BaseModel):
    id: str
    message: str
    timestamp: datetime
    read: bool = False
    type: NotificationType
    action_type: Optional[Literal["friend_request", "event_invite"]] = None
    action_data: dict[str, str] = Field(default_factory=dict)


class FriendRequest(BaseModel):
    request_id: str
    id: str  # the user who sent the request
    name: str
    email: str = ""
    avatar_url: str = ""
    created_at: datetime


class HabitEvent(BaseModel):
    id: str
    title: str
    description: str = ""
    location: str = ""
    date: date
    time: str = ""
    organizer: str = ""
    organizer_id: str
    invitees: list[str] = Field(default_factory=list)
    attendees: list[str] = Field(default_factory=list)
    declined: list[str] = Field(default_factory=list)


class FeedItem(BaseModel):
    id: str
    friend_id: str
    friend_name: str
    friend_avatar: str
    description: str
    timestamp: datetime


class TrackerState(BaseModel):
    """Everything the engine knows about one user; logs are newest-first."""

    user_id: str
    habits: dict[str, Habit] = Field(default_factory=dict)
    goals: dict[str, NumericGoal] = Field(default_factory=dict)
    logs: list[ActivityLogEntry] = Field(default_factory=list)
