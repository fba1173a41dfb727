"""
habit_state.py — Habits & the daily three-state toggle
Each (habit, day) cycles unset -> good -> bad -> unset. Polarity decides which
stored status is "good": COMPLETED for positive habits, FAILED (avoided) for
negative ones. Streaks are counted backward from today.
"""

from datetime import date, datetime, timedelta, timezone

from schemas import Habit, HabitStatus, TrackerState
from services.errors import NotFoundError, ValidationError
from services.log_entries import make_entry, new_id, with_entry
from services.result import Effect, Result

# (is_negative, current status) -> next status; None means not logged
TRANSITIONS = {
    (False, None): HabitStatus.COMPLETED,
    (False, HabitStatus.COMPLETED): HabitStatus.FAILED,
    (False, HabitStatus.FAILED): None,
    (True, None): HabitStatus.FAILED,
    (True, HabitStatus.FAILED): HabitStatus.COMPLETED,
    (True, HabitStatus.COMPLETED): None,
}

HABIT_CATEGORIES = ("Health", "Work", "Fitness", "Mindfulness", "Custom")


def next_status(is_negative: bool, current: HabitStatus | None) -> HabitStatus | None:
    return TRANSITIONS[(bool(is_negative), current)]


def good_status(is_negative: bool) -> HabitStatus:
    return HabitStatus.FAILED if is_negative else HabitStatus.COMPLETED


def is_good(is_negative: bool, status: HabitStatus | None) -> bool:
    return status is not None and status == good_status(is_negative)


def set_status(habit: Habit, day: date, status: HabitStatus | None) -> Habit:
    history = dict(habit.history)
    if status is None:
        history.pop(day, None)
    else:
        history[day] = status
    return habit.model_copy(update={"history": history})


def with_habit(state: TrackerState, habit: Habit) -> TrackerState:
    habits = dict(state.habits)
    habits[habit.id] = habit
    return state.model_copy(update={"habits": habits})


def toggle_habit(state: TrackerState, habit_id: str, day: date, now: datetime | None = None) -> Result:
    """Advance one day's status; only a move into "good" is logged."""
    now = now or datetime.now(timezone.utc)
    habit = state.habits.get(habit_id)
    if habit is None:
        return Result.err(NotFoundError(f"Habit {habit_id} not found"))
    if day > now.date():
        return Result.err(ValidationError("Habits cannot be logged for a future date"))

    status = next_status(habit.is_negative, habit.history.get(day))
    updated = set_status(habit, day, status)
    new_state = with_habit(state, updated)
    effects = [Effect("upsert_habit_entry", {"habit_id": habit_id, "day": day, "status": status})]

    if is_good(habit.is_negative, status):
        verb = "Avoided" if habit.is_negative else "Completed"
        entry = make_entry(
            "habit",
            f'{verb} "{habit.title}" for {day.isoformat()}',
            now,
            reversible=True,
            related_id=habit_id,
            entry_date=day,
        )
        new_state = with_entry(new_state, entry)
        effects.append(Effect("append_log", {"entry": entry}))

    return Result.ok(new_state, effects, value=updated)


def create_habit(
    state: TrackerState,
    title: str,
    category: str = "Health",
    is_negative: bool = False,
    description: str | None = None,
    habit_id: str | None = None,
    now: datetime | None = None,
) -> Result:
    now = now or datetime.now(timezone.utc)
    title = (title or "").strip()
    if not title:
        return Result.err(ValidationError("Habit title is required"))
    if category not in HABIT_CATEGORIES:
        return Result.err(ValidationError(f"Unknown habit category: {category}"))
    habit_id = habit_id or new_id()
    if habit_id in state.habits:
        return Result.err(ValidationError(f"Habit {habit_id} already exists"))

    habit = Habit(id=habit_id, title=title, description=description, category=category, is_negative=is_negative)
    entry = make_entry("habit", f'Created habit "{title}"', now, related_id=habit_id)
    new_state = with_entry(with_habit(state, habit), entry)
    effects = [Effect("create_habit", {"habit": habit}), Effect("append_log", {"entry": entry})]
    return Result.ok(new_state, effects, value=habit)


def rename_habit(state: TrackerState, habit_id: str, title: str, now: datetime | None = None) -> Result:
    now = now or datetime.now(timezone.utc)
    habit = state.habits.get(habit_id)
    if habit is None:
        return Result.err(NotFoundError(f"Habit {habit_id} not found"))
    title = (title or "").strip()
    if not title:
        return Result.err(ValidationError("Habit title is required"))

    updated = habit.model_copy(update={"title": title})
    entry = make_entry("habit", f'Renamed habit to "{title}"', now, related_id=habit_id)
    new_state = with_entry(with_habit(state, updated), entry)
    effects = [
        Effect("update_habit", {"habit_id": habit_id, "fields": {"title": title}}),
        Effect("append_log", {"entry": entry}),
    ]
    return Result.ok(new_state, effects, value=updated)


def delete_habit(state: TrackerState, habit_id: str, now: datetime | None = None) -> Result:
    """Drop a habit and its history. Log entries that point at it stay."""
    now = now or datetime.now(timezone.utc)
    habit = state.habits.get(habit_id)
    if habit is None:
        return Result.err(NotFoundError(f"Habit {habit_id} not found"))

    habits = {k: v for k, v in state.habits.items() if k != habit_id}
    entry = make_entry("habit", f'Deleted habit "{habit.title}"', now)
    new_state = with_entry(state.model_copy(update={"habits": habits}), entry)
    effects = [Effect("delete_habit", {"habit_id": habit_id}), Effect("append_log", {"entry": entry})]
    return Result.ok(new_state, effects, value=habit)


def current_streak(habit: Habit, today: date) -> int:
    """Consecutive "good" days ending today; a gap or a bad day ends the run."""
    streak = 0
    day = today
    while is_good(habit.is_negative, habit.history.get(day)):
        streak += 1
        day -= timedelta(days=1)
    return streak


def completed_streak(habit: Habit, today: date) -> int:
    """Consecutive Completed days ending today, whatever the habit's polarity."""
    streak = 0
    day = today
    while habit.history.get(day) == HabitStatus.COMPLETED:
        streak += 1
        day -= timedelta(days=1)
    return streak
