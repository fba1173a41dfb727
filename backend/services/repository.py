"""
repository.py — Persistence boundary for one user's tracker data
Maps SQLAlchemy rows to domain schemas and applies reducer effects inside a
single transaction: every write in a batch commits together or not at all.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

import schemas
from config import ACTIVITY_LOG_LIMIT
from models.activity_log import ActivityLog
from models.goal import Goal
from models.goal_entry import GoalEntry
from models.habit import Habit
from models.habit_entry import HabitEntry
from services.errors import StoreError
from services.result import Effect

logger = logging.getLogger(__name__)


def as_utc(ts: datetime | None) -> datetime | None:
    """SQLite and naive DateTime columns hand back naive UTC values."""
    if ts is not None and ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def habit_to_schema(row: Habit) -> schemas.Habit:
    return schemas.Habit(
        id=row.id,
        title=row.title,
        description=row.description,
        category=row.category,
        is_negative=bool(row.is_negative),
        history={e.date: schemas.HabitStatus(e.status) for e in row.entries},
    )


def goal_to_schema(row: Goal) -> schemas.NumericGoal:
    return schemas.NumericGoal(
        id=row.id,
        title=row.title,
        category=row.category,
        target=row.target,
        current=row.current,
        unit=row.unit,
        deadline=row.deadline,
        created_at=as_utc(row.created_at),
        history=[
            schemas.GoalEntry(id=e.id, date=e.date, amount=e.amount, reversed=bool(e.reversed))
            for e in row.entries
        ],
    )


def log_to_schema(row: ActivityLog) -> schemas.ActivityLogEntry:
    return schemas.ActivityLogEntry(
        id=row.id,
        type=row.type,
        description=row.description,
        timestamp=as_utc(row.created_at),
        reversible=bool(row.reversible),
        reversed=bool(row.reversed),
        related_id=row.related_id,
        amount=row.amount,
        entry_date=row.entry_date,
        entry_id=row.entry_id,
    )


class SqlRepository:
    def __init__(self, db: Session, user_id: str, log_limit: int = ACTIVITY_LOG_LIMIT):
        self.db = db
        self.user_id = user_id
        self.log_limit = log_limit

    # ── Reads ─────────────────────────────────────────────────────
    def list_habits(self) -> list[schemas.Habit]:
        rows = self.db.query(Habit).options(selectinload(Habit.entries))\
                   .filter_by(user_id=self.user_id).order_by(Habit.created_at).all()
        return [habit_to_schema(r) for r in rows]

    def list_goals(self) -> list[schemas.NumericGoal]:
        rows = self.db.query(Goal).options(selectinload(Goal.entries))\
                   .filter_by(user_id=self.user_id).order_by(Goal.created_at).all()
        return [goal_to_schema(r) for r in rows]

    def list_activity_log(self, limit: int | None = None, log_type: str | None = None) -> list[schemas.ActivityLogEntry]:
        query = self.db.query(ActivityLog).filter_by(user_id=self.user_id)
        if log_type and log_type != "all":
            query = query.filter_by(type=log_type)
        query = query.order_by(ActivityLog.created_at.desc())
        limit = limit or self.log_limit
        if limit:
            query = query.limit(limit)
        return [log_to_schema(r) for r in query.all()]

    def get_log(self, log_id: str) -> schemas.ActivityLogEntry | None:
        row = self.db.query(ActivityLog).filter_by(id=log_id, user_id=self.user_id).first()
        return log_to_schema(row) if row else None

    def load_state(self) -> schemas.TrackerState:
        return schemas.TrackerState(
            user_id=self.user_id,
            habits={h.id: h for h in self.list_habits()},
            goals={g.id: g for g in self.list_goals()},
            logs=self.list_activity_log(),
        )

    # ── Writes (flushed; apply() commits) ─────────────────────────
    def _habit_row(self, habit_id: str) -> Habit:
        row = self.db.query(Habit).filter_by(id=habit_id, user_id=self.user_id).first()
        if row is None:
            raise StoreError(f"Habit {habit_id} is missing from the store")
        return row

    def _goal_row(self, goal_id: str) -> Goal:
        row = self.db.query(Goal).filter_by(id=goal_id, user_id=self.user_id).first()
        if row is None:
            raise StoreError(f"Goal {goal_id} is missing from the store")
        return row

    def _log_row(self, log_id: str) -> ActivityLog:
        row = self.db.query(ActivityLog).filter_by(id=log_id, user_id=self.user_id).first()
        if row is None:
            raise StoreError(f"Log entry {log_id} is missing from the store")
        return row

    def upsert_habit_entry(self, habit_id: str, day: date, status) -> None:
        """Idempotent: writing the same (habit, day, status) twice leaves one row."""
        self._habit_row(habit_id)
        row = self.db.query(HabitEntry).filter_by(habit_id=habit_id, date=day).first()
        if status is None:
            if row is not None:
                self.db.delete(row)
        elif row is not None:
            row.status = schemas.HabitStatus(status).value
        else:
            self.db.add(HabitEntry(habit_id=habit_id, date=day, status=schemas.HabitStatus(status).value))
        self.db.flush()

    def create_habit(self, habit: schemas.Habit) -> None:
        self.db.add(Habit(
            id=habit.id,
            user_id=self.user_id,
            title=habit.title,
            description=habit.description,
            category=habit.category,
            is_negative=habit.is_negative,
        ))
        self.db.flush()

    def update_habit(self, habit_id: str, fields: dict) -> None:
        row = self._habit_row(habit_id)
        for k, v in fields.items():
            if hasattr(row, k):
                setattr(row, k, v)
        self.db.flush()

    def delete_habit(self, habit_id: str) -> None:
        self.db.delete(self._habit_row(habit_id))
        self.db.flush()

    def create_goal(self, goal: schemas.NumericGoal) -> None:
        self.db.add(Goal(
            id=goal.id,
            user_id=self.user_id,
            title=goal.title,
            category=goal.category,
            target=goal.target,
            current=goal.current,
            unit=goal.unit,
            deadline=goal.deadline,
            created_at=goal.created_at or datetime.now(timezone.utc),
        ))
        self.db.flush()

    def update_goal(self, goal_id: str, fields: dict) -> None:
        row = self._goal_row(goal_id)
        for k, v in fields.items():
            if hasattr(row, k):
                setattr(row, k, v)
        self.db.flush()

    def delete_goal(self, goal_id: str) -> None:
        self.db.delete(self._goal_row(goal_id))
        self.db.flush()

    def append_goal_entry(self, goal_id: str, entry: schemas.GoalEntry) -> None:
        self._goal_row(goal_id)
        position = self.db.query(GoalEntry).filter_by(goal_id=goal_id).count()
        self.db.add(GoalEntry(
            id=entry.id,
            goal_id=goal_id,
            position=position,
            date=entry.date,
            amount=entry.amount,
            reversed=entry.reversed,
        ))
        self.db.flush()

    def update_goal_entry(self, entry_id: str, amount: Decimal | None = None, reversed: bool | None = None) -> None:
        row = self.db.query(GoalEntry).join(Goal).filter(
            GoalEntry.id == entry_id,
            Goal.user_id == self.user_id,
        ).first()
        if row is None:
            raise StoreError(f"Goal entry {entry_id} is missing from the store")
        if amount is not None:
            row.amount = amount
        if reversed is not None:
            row.reversed = reversed
        self.db.flush()

    def set_goal_current(self, goal_id: str, current: Decimal) -> None:
        self._goal_row(goal_id).current = current
        self.db.flush()

    def append_log(self, entry: schemas.ActivityLogEntry) -> None:
        self.db.add(ActivityLog(
            id=entry.id,
            user_id=self.user_id,
            type=entry.type,
            description=entry.description,
            reversible=entry.reversible,
            reversed=entry.reversed,
            related_id=entry.related_id,
            amount=entry.amount,
            entry_date=entry.entry_date,
            entry_id=entry.entry_id,
            created_at=entry.timestamp,
        ))
        self.db.flush()

    def mark_log_reversed(self, log_id: str) -> None:
        self._log_row(log_id).reversed = True
        self.db.flush()

    def update_log_description(self, log_id: str, description: str, amount: Decimal | None = None) -> None:
        row = self._log_row(log_id)
        row.description = description
        if amount is not None:
            row.amount = amount
        self.db.flush()

    # ── Batch ─────────────────────────────────────────────────────
    def apply(self, effects: list[Effect]) -> None:
        """Run every effect, then commit once. Any failure rolls the batch back."""
        try:
            for effect in effects:
                getattr(self, effect.op)(**effect.args)
            self.db.commit()
        except StoreError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store write failed for user {self.user_id}: {e}")
            raise StoreError(str(e)) from e
