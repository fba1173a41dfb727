"""
goal_ledger.py — Numeric goals backed by an append-only progress ledger
A goal's current total is max(0, sum of non-reversed entries). Progress is
appended here; corrections and reversals are applied by the activity log
coordinator through correct_entry() and reverse_entry().
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from schemas import GoalEntry, NumericGoal, TrackerState
from services.errors import NotFoundError, ValidationError
from services.log_entries import describe_progress, format_amount, make_entry, new_id, with_entry
from services.result import Effect, Result

ZERO = Decimal("0")
# Numeric(14, 4) columns: four decimal places, ten integer digits
QUANTUM = Decimal("0.0001")
MAX_AMOUNT = Decimal("9999999999.9999")


def parse_amount(value) -> Decimal:
    """Positive, finite number or ValidationError."""
    if value is None or isinstance(value, bool):
        raise ValidationError("Amount must be a positive number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Amount must be a positive number, got {value!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Amount must be a positive number, got {value!r}")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Amount must not exceed {MAX_AMOUNT}, got {value!r}")
    if amount != amount.quantize(QUANTUM):
        raise ValidationError(f"Amount can have at most 4 decimal places, got {value!r}")
    return amount


def check_total(total: Decimal) -> None:
    if total > MAX_AMOUNT:
        raise ValidationError(f"Goal total would exceed {MAX_AMOUNT}")


def clamp(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


def ledger_total(goal: NumericGoal) -> Decimal:
    return clamp(sum((e.amount for e in goal.history if not e.reversed), ZERO))


def with_goal(state: TrackerState, goal: NumericGoal) -> TrackerState:
    goals = dict(state.goals)
    goals[goal.id] = goal
    return state.model_copy(update={"goals": goals})


def locate_entry(goal: NumericGoal, entry_id: str | None, amount: Decimal | None) -> GoalEntry | None:
    """Ledger entry by id; entries logged without an id match on amount, newest first."""
    if entry_id:
        for entry in goal.history:
            if entry.id == entry_id:
                return entry
        return None
    if amount is None:
        return None
    for entry in reversed(goal.history):
        if not entry.reversed and entry.amount == amount:
            return entry
    return None


def _replace_ledger_entry(goal: NumericGoal, entry: GoalEntry) -> list[GoalEntry]:
    return [entry if e.id == entry.id else e for e in goal.history]


def add_progress(state: TrackerState, goal_id: str, amount, now: datetime | None = None) -> Result:
    now = now or datetime.now(timezone.utc)
    try:
        amount = parse_amount(amount)
    except ValidationError as e:
        return Result.err(e)
    goal = state.goals.get(goal_id)
    if goal is None:
        return Result.err(NotFoundError(f"Goal {goal_id} not found"))
    try:
        check_total(goal.current + amount)
    except ValidationError as e:
        return Result.err(e)

    entry = GoalEntry(id=new_id(), date=now.date(), amount=amount)
    updated = goal.model_copy(update={
        "current": goal.current + amount,
        "history": [*goal.history, entry],
    })
    log = make_entry(
        "goal",
        describe_progress(amount, goal.unit, goal.title),
        now,
        reversible=True,
        related_id=goal_id,
        amount=amount,
        entry_id=entry.id,
    )
    new_state = with_entry(with_goal(state, updated), log)
    effects = [
        Effect("append_goal_entry", {"goal_id": goal_id, "entry": entry}),
        Effect("set_goal_current", {"goal_id": goal_id, "current": updated.current}),
        Effect("append_log", {"entry": log}),
    ]
    return Result.ok(new_state, effects, value=updated)


def correct_entry(goal: NumericGoal, entry: GoalEntry | None, old_amount: Decimal, new_amount: Decimal) -> NumericGoal:
    """Apply an amount correction: current = max(0, current + new - old)."""
    diff = new_amount - old_amount
    history = goal.history
    if entry is not None:
        history = _replace_ledger_entry(goal, entry.model_copy(update={"amount": new_amount}))
    return goal.model_copy(update={"current": clamp(goal.current + diff), "history": history})


def reverse_entry(goal: NumericGoal, entry: GoalEntry | None, amount: Decimal) -> NumericGoal:
    """Roll an entry back out of the total; the entry itself stays, flagged."""
    history = goal.history
    if entry is not None:
        history = _replace_ledger_entry(goal, entry.model_copy(update={"reversed": True}))
    return goal.model_copy(update={"current": clamp(goal.current - amount), "history": history})


def create_goal(
    state: TrackerState,
    title: str,
    target,
    unit: str = "units",
    category: str = "Custom",
    deadline: date | None = None,
    goal_id: str | None = None,
    now: datetime | None = None,
) -> Result:
    now = now or datetime.now(timezone.utc)
    title = (title or "").strip()
    if not title:
        return Result.err(ValidationError("Goal title is required"))
    try:
        target = parse_amount(target)
    except ValidationError:
        return Result.err(ValidationError("Goal target must be a positive number"))
    goal_id = goal_id or new_id()
    if goal_id in state.goals:
        return Result.err(ValidationError(f"Goal {goal_id} already exists"))

    goal = NumericGoal(
        id=goal_id,
        title=title,
        category=category or "Custom",
        target=target,
        current=ZERO,
        unit=unit or "units",
        deadline=deadline,
        created_at=now,
    )
    log = make_entry("goal", f'Created goal "{title}" - target: {format_amount(target)} {goal.unit}', now, related_id=goal_id)
    new_state = with_entry(with_goal(state, goal), log)
    effects = [Effect("create_goal", {"goal": goal}), Effect("append_log", {"entry": log})]
    return Result.ok(new_state, effects, value=goal)


def edit_goal(
    state: TrackerState,
    goal_id: str,
    title: str | None = None,
    target=None,
    deadline: date | None = None,
    now: datetime | None = None,
) -> Result:
    """Change title, target or deadline. Progress is untouched."""
    now = now or datetime.now(timezone.utc)
    goal = state.goals.get(goal_id)
    if goal is None:
        return Result.err(NotFoundError(f"Goal {goal_id} not found"))

    fields = {}
    if title is not None:
        title = title.strip()
        if not title:
            return Result.err(ValidationError("Goal title is required"))
        fields["title"] = title
    if target is not None:
        try:
            fields["target"] = parse_amount(target)
        except ValidationError:
            return Result.err(ValidationError("Goal target must be a positive number"))
    if deadline is not None:
        fields["deadline"] = deadline

    updated = goal.model_copy(update=fields)
    log = make_entry("goal", f'Updated goal "{updated.title}"', now, related_id=goal_id)
    new_state = with_entry(with_goal(state, updated), log)
    effects = [
        Effect("update_goal", {"goal_id": goal_id, "fields": fields}),
        Effect("append_log", {"entry": log}),
    ]
    return Result.ok(new_state, effects, value=updated)


def delete_goal(state: TrackerState, goal_id: str, now: datetime | None = None) -> Result:
    now = now or datetime.now(timezone.utc)
    goal = state.goals.get(goal_id)
    if goal is None:
        return Result.err(NotFoundError(f"Goal {goal_id} not found"))

    goals = {k: v for k, v in state.goals.items() if k != goal_id}
    log = make_entry("system", f'Deleted goal "{goal.title}"', now)
    new_state = with_entry(state.model_copy(update={"goals": goals}), log)
    effects = [Effect("delete_goal", {"goal_id": goal_id}), Effect("append_log", {"entry": log})]
    return Result.ok(new_state, effects, value=goal)


def goals_at_risk(goals: list[NumericGoal], now: datetime | None = None) -> list[dict]:
    """Find goals lagging behind the pace needed to meet their deadline."""
    now = now or datetime.now(timezone.utc)
    today = now.date()
    at_risk = []
    for g in goals:
        if not g.deadline or g.current >= g.target:
            continue
        start = g.created_at.date() if g.created_at else today
        total_days = (g.deadline - start).days
        if total_days <= 0:
            continue

        days_rem = (g.deadline - today).days
        if days_rem <= 0:
            at_risk.append({"id": g.id, "title": g.title, "risk": "expired"})
            continue

        days_elapsed = total_days - days_rem
        required_pace = (g.target - g.current) / days_rem
        actual_pace = g.current / (days_elapsed if days_elapsed > 0 else 1)

        if actual_pace < required_pace * Decimal("0.8"):
            at_risk.append({
                "id": g.id,
                "title": g.title,
                "risk": "behind",
                "required_pace": round(float(required_pace), 2),
                "actual_pace": round(float(actual_pace), 2),
                "days_remaining": days_rem,
            })
    return at_risk
