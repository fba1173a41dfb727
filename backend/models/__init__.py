# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.habit import Habit
from models.habit_entry import HabitEntry
from models.goal import Goal
from models.goal_entry import GoalEntry
from models.activity_log import ActivityLog
from models.friendship import Friendship
from models.event import HabitEvent, EventRsvp
from models.notification import NotificationDismissal

__all__ = [
    "User",
    "Habit",
    "HabitEntry",
    "Goal",
    "GoalEntry",
    "ActivityLog",
    "Friendship",
    "HabitEvent",
    "EventRsvp",
    "NotificationDismissal",
]
