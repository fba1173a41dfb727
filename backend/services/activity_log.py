"""
activity_log.py — Activity timeline & the reversal/edit coordinator
Every mutation leaves a log entry. Reversible entries can be edited (goal
progress only) until they are reversed; reversal is terminal and rolls the
aggregate back. The entry stays in the log, flagged, for the audit trail.

The related_id plus the structured amount/date fields locate what to undo.
Entries written before those fields existed fall back to the fixed
description patterns in log_entries.
"""

import logging
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal

from schemas import ActivityLogEntry, TrackerState
from services import goal_ledger, habit_state
from services.errors import ConsistencyError, NotFoundError, ValidationError
from services.log_entries import (
    find_entry,
    is_progress_entry,
    parse_amount_text,
    parse_date_text,
    replace_entry,
    rewrite_amount,
)
from services.result import Effect, Result

logger = logging.getLogger(__name__)


def recover_amount(entry: ActivityLogEntry, state: TrackerState | None = None) -> Decimal | None:
    """Structured amount, then the ledger entry it points at, then the description."""
    if entry.amount is not None:
        return entry.amount
    if state is not None and entry.entry_id and entry.related_id in state.goals:
        ledger_entry = goal_ledger.locate_entry(state.goals[entry.related_id], entry.entry_id, None)
        if ledger_entry is not None:
            return ledger_entry.amount
    return parse_amount_text(entry.description)


def recover_date(entry: ActivityLogEntry) -> date | None:
    return entry.entry_date or parse_date_text(entry.description)


def edit_progress_entry(state: TrackerState, log_id: str, new_amount, now: datetime | None = None) -> Result:
    """Correct the amount of a goal progress entry and shift the goal by the difference."""
    entry = find_entry(state, log_id)
    if entry is None:
        return Result.err(NotFoundError(f"Log entry {log_id} not found"))
    if entry.reversed:
        return Result.err(ConsistencyError("Reversed entries cannot be edited"))
    if not is_progress_entry(entry):
        return Result.err(ConsistencyError("Only goal progress entries can be edited"))
    try:
        new_amount = goal_ledger.parse_amount(new_amount)
    except ValidationError as e:
        return Result.err(e)

    new_state = state
    effects = []
    warnings = []
    old_amount = recover_amount(entry, state)
    goal = state.goals.get(entry.related_id) if entry.related_id else None

    if old_amount is None:
        logger.warning(f"Log {log_id}: could not recover the original amount from {entry.description!r}; goal left unchanged")
    elif goal is None:
        message = f"Goal for log entry {log_id} no longer exists; only the log was updated"
        logger.warning(message)
        warnings.append(message)
    elif entry.entry_id and goal_ledger.locate_entry(goal, entry.entry_id, None) is None:
        _missing_ledger_entry(entry, warnings)
    else:
        ledger_entry = goal_ledger.locate_entry(goal, entry.entry_id, old_amount)
        updated = goal_ledger.correct_entry(goal, ledger_entry, old_amount, new_amount)
        try:
            goal_ledger.check_total(updated.current)
        except ValidationError as e:
            return Result.err(e)
        new_state = goal_ledger.with_goal(new_state, updated)
        if ledger_entry is not None:
            effects.append(Effect("update_goal_entry", {"entry_id": ledger_entry.id, "amount": new_amount}))
        effects.append(Effect("set_goal_current", {"goal_id": goal.id, "current": updated.current}))

    edited = entry.model_copy(update={
        "description": rewrite_amount(entry.description, new_amount),
        "amount": new_amount,
    })
    new_state = replace_entry(new_state, edited)
    effects.append(Effect("update_log_description", {
        "log_id": log_id,
        "description": edited.description,
        "amount": new_amount,
    }))
    return Result.ok(new_state, effects, warnings, value=edited)


def reverse_log_entry(state: TrackerState, log_id: str, now: datetime | None = None) -> Result:
    """Mark an entry reversed and undo its effect on the goal or habit it names."""
    entry = find_entry(state, log_id)
    if entry is None:
        return Result.err(NotFoundError(f"Log entry {log_id} not found"))
    if not entry.reversible:
        return Result.err(ConsistencyError("This entry cannot be reversed"))
    if entry.reversed:
        return Result.err(ConsistencyError("This entry has already been reversed"))

    reversed_entry = entry.model_copy(update={"reversed": True})
    new_state = replace_entry(state, reversed_entry)
    effects = [Effect("mark_log_reversed", {"log_id": log_id})]
    warnings = []

    if entry.type == "goal":
        new_state, more = _undo_goal_progress(new_state, entry, warnings)
        effects.extend(more)
    elif entry.type == "habit":
        new_state, more = _undo_habit_check(new_state, entry, warnings)
        effects.extend(more)

    return Result.ok(new_state, effects, warnings, value=reversed_entry)


def _orphaned(entry: ActivityLogEntry, kind: str, warnings: list) -> None:
    message = f"The {kind} for log entry {entry.id} no longer exists; the entry was reversed without adjusting it"
    logger.warning(message)
    warnings.append(message)


def _missing_ledger_entry(entry: ActivityLogEntry, warnings: list) -> None:
    message = f"Ledger entry {entry.entry_id} for log entry {entry.id} no longer exists; the goal total was left unchanged"
    logger.warning(message)
    warnings.append(message)


def _undo_goal_progress(state: TrackerState, entry: ActivityLogEntry, warnings: list):
    goal = state.goals.get(entry.related_id) if entry.related_id else None
    if goal is None:
        _orphaned(entry, "goal", warnings)
        return state, []

    amount = recover_amount(entry, state)
    if amount is None:
        logger.warning(f"Log {entry.id}: could not recover the amount from {entry.description!r}; subtracting 0")
        return state, []

    ledger_entry = goal_ledger.locate_entry(goal, entry.entry_id, amount)
    if entry.entry_id and ledger_entry is None:
        _missing_ledger_entry(entry, warnings)
        return state, []
    updated = goal_ledger.reverse_entry(goal, ledger_entry, amount)
    effects = []
    if ledger_entry is not None:
        effects.append(Effect("update_goal_entry", {"entry_id": ledger_entry.id, "reversed": True}))
    effects.append(Effect("set_goal_current", {"goal_id": goal.id, "current": updated.current}))
    return goal_ledger.with_goal(state, updated), effects


def _undo_habit_check(state: TrackerState, entry: ActivityLogEntry, warnings: list):
    habit = state.habits.get(entry.related_id) if entry.related_id else None
    if habit is None:
        _orphaned(entry, "habit", warnings)
        return state, []

    day = recover_date(entry)
    if day is None:
        logger.warning(f"Log {entry.id}: no date found in {entry.description!r}; habit left unchanged")
        return state, []

    if not habit_state.is_good(habit.is_negative, habit.history.get(day)):
        message = f'"{habit.title}" changed on {day.isoformat()} after this entry; its status was left as is'
        logger.info(message)
        warnings.append(message)
        return state, []

    updated = habit_state.set_status(habit, day, None)
    effects = [Effect("upsert_habit_entry", {"habit_id": habit.id, "day": day, "status": None})]
    return habit_state.with_habit(state, updated), effects


def list_entries(logs: list[ActivityLogEntry], log_type: str | None = None, limit: int | None = None) -> list[ActivityLogEntry]:
    """Newest first, optionally filtered by type."""
    entries = [e for e in logs if log_type in (None, "all") or e.type == log_type]
    entries.sort(key=lambda e: e.timestamp, reverse=True)
    return entries[:limit] if limit else entries


def group_by_date(logs: list[ActivityLogEntry]) -> list[tuple[date, list[ActivityLogEntry]]]:
    """Bucket entries by the calendar date of their timestamp, newest day first."""
    groups: "OrderedDict[date, list[ActivityLogEntry]]" = OrderedDict()
    for entry in list_entries(logs):
        groups.setdefault(entry.timestamp.date(), []).append(entry)
    return list(groups.items())


def timeline(logs: list[ActivityLogEntry], log_type: str | None = None) -> list[dict]:
    return [
        {"date": day.isoformat(), "entries": entries}
        for day, entries in group_by_date(list_entries(logs, log_type))
    ]