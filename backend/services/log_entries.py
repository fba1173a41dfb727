"""
log_entries.py — Building, storing and reading activity log entries.
Structured amount/date fields are authoritative; the description patterns
below only exist to read entries written before those fields were stored.
"""

import re
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from schemas import ActivityLogEntry, TrackerState

AMOUNT_PATTERN = re.compile(r"Added (\d+(?:\.\d+)?)")
DATE_PATTERN = re.compile(r"for (\d{4}-\d{2}-\d{2})")


def new_id() -> str:
    return uuid.uuid4().hex


def format_amount(amount: Decimal) -> str:
    """Decimal('30.0000') -> '30', Decimal('2.50') -> '2.5'."""
    return format(amount.normalize(), "f")


def describe_progress(amount: Decimal, unit: str, title: str) -> str:
    return f"Added {format_amount(amount)} {unit} to {title}"


def rewrite_amount(description: str, new_amount: Decimal) -> str:
    replacement = f"Added {format_amount(new_amount)}"
    if AMOUNT_PATTERN.search(description):
        return AMOUNT_PATTERN.sub(replacement, description, count=1)
    return description


def parse_amount_text(description: str) -> Decimal | None:
    match = AMOUNT_PATTERN.search(description or "")
    if not match:
        return None
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return None


def parse_date_text(description: str) -> date | None:
    match = DATE_PATTERN.search(description or "")
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def is_progress_entry(entry: ActivityLogEntry) -> bool:
    """True for goal entries produced by an add-progress action."""
    if entry.type != "goal" or not entry.reversible:
        return False
    return entry.amount is not None or parse_amount_text(entry.description) is not None


def make_entry(
    log_type: str,
    description: str,
    now: datetime,
    reversible: bool = False,
    related_id: str | None = None,
    amount: Decimal | None = None,
    entry_date: date | None = None,
    entry_id: str | None = None,
) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=new_id(),
        type=log_type,
        description=description,
        timestamp=now,
        reversible=reversible,
        related_id=related_id,
        amount=amount,
        entry_date=entry_date,
        entry_id=entry_id,
    )


def find_entry(state: TrackerState, log_id: str) -> ActivityLogEntry | None:
    for entry in state.logs:
        if entry.id == log_id:
            return entry
    return None


def with_entry(state: TrackerState, entry: ActivityLogEntry) -> TrackerState:
    """Insert an entry keeping the log newest-first."""
    logs = sorted([entry, *state.logs], key=lambda e: e.timestamp, reverse=True)
    return state.model_copy(update={"logs": logs})


def replace_entry(state: TrackerState, entry: ActivityLogEntry) -> TrackerState:
    logs = [entry if e.id == entry.id else e for e in state.logs]
    return state.model_copy(update={"logs": logs})
