from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import NOW
from services import goal_ledger
from services.activity_log import edit_progress_entry, reverse_log_entry
from services.errors import NotFoundError, ValidationError


@pytest.fixture
def state(empty_state):
    return goal_ledger.create_goal(empty_state, "Read", 100, unit="pages", goal_id="g1", now=NOW).state


@pytest.mark.parametrize(
    "value",
    [0, -1, "abc", None, True, float("nan"), float("inf"), "", "0.00001", "1.23456", "10000000000"],
)
def test_parse_amount_rejects(value):
    with pytest.raises(ValidationError):
        goal_ledger.parse_amount(value)


@pytest.mark.parametrize(
    "value,expected",
    [(30, "30"), ("2.5", "2.5"), (0.1, "0.1"), (Decimal("7"), "7"), ("1.5000", "1.5"), ("1.2345", "1.2345")],
)
def test_parse_amount_accepts(value, expected):
    assert goal_ledger.parse_amount(value) == Decimal(expected)


def test_create_goal_requires_positive_target(empty_state):
    assert isinstance(goal_ledger.create_goal(empty_state, "Read", 0).error, ValidationError)
    assert isinstance(goal_ledger.create_goal(empty_state, "", 10).error, ValidationError)


def test_add_progress_appends_entry_and_log(state):
    result = goal_ledger.add_progress(state, "g1", 30, NOW)
    goal = result.state.goals["g1"]
    assert goal.current == Decimal("30")
    assert len(goal.history) == 1
    log = result.state.logs[0]
    assert log.description == "Added 30 pages to Read"
    assert log.entry_id == goal.history[0].id
    assert [e.op for e in result.effects] == ["append_goal_entry", "set_goal_current", "append_log"]


def test_add_progress_errors(state):
    assert isinstance(goal_ledger.add_progress(state, "nope", 5, NOW).error, NotFoundError)
    result = goal_ledger.add_progress(state, "g1", -5, NOW)
    assert isinstance(result.error, ValidationError)
    assert state.goals["g1"].current == 0


def test_totals_stay_within_the_stored_range(state):
    near_max = goal_ledger.add_progress(state, "g1", "9999999999", NOW).state
    result = goal_ledger.add_progress(near_max, "g1", 1, NOW)
    assert isinstance(result.error, ValidationError)
    assert near_max.goals["g1"].current == Decimal("9999999999")

    small = goal_ledger.add_progress(state, "g1", 5, NOW).state
    small = goal_ledger.add_progress(small, "g1", "9999999990", NOW).state
    log_id = next(e.id for e in small.logs if e.amount == Decimal("5"))
    assert isinstance(edit_progress_entry(small, log_id, 20).error, ValidationError)


def test_reverse_then_edit_scenario(state):
    first = goal_ledger.add_progress(state, "g1", 30, NOW)
    second = goal_ledger.add_progress(first.state, "g1", 40, NOW + timedelta(minutes=1))
    assert second.state.goals["g1"].current == Decimal("70")

    first_log = first.state.logs[0]
    reversed_ = reverse_log_entry(second.state, first_log.id, NOW)
    goal = reversed_.state.goals["g1"]
    assert goal.current == Decimal("40")
    assert [e.reversed for e in goal.history] == [True, False]
    second_log = next(e for e in reversed_.state.logs if e.amount == Decimal("40"))
    assert not second_log.reversed

    edited = edit_progress_entry(reversed_.state, second_log.id, 25, NOW)
    goal = edited.state.goals["g1"]
    assert goal.current == Decimal("25")
    assert edited.value.description == "Added 25 pages to Read"
    assert goal_ledger.ledger_total(goal) == goal.current


def test_reversal_restores_previous_total(state):
    before = goal_ledger.add_progress(state, "g1", 12, NOW).state
    after_add = goal_ledger.add_progress(before, "g1", 8, NOW + timedelta(minutes=1)).state
    log = after_add.logs[0]
    result = reverse_log_entry(after_add, log.id, NOW)
    assert result.state.goals["g1"].current == before.goals["g1"].current


def test_current_never_negative(state):
    goal = goal_ledger.add_progress(state, "g1", 5, NOW).state.goals["g1"]
    assert goal_ledger.reverse_entry(goal, None, Decimal("50")).current == 0
    assert goal_ledger.correct_entry(goal, None, Decimal("50"), Decimal("1")).current == 0


def test_edit_goal_keeps_progress(state):
    with_progress = goal_ledger.add_progress(state, "g1", 10, NOW).state
    result = goal_ledger.edit_goal(with_progress, "g1", title="Read more", target="200", now=NOW)
    goal = result.state.goals["g1"]
    assert (goal.title, goal.target, goal.current) == ("Read more", Decimal("200"), Decimal("10"))
    assert isinstance(goal_ledger.edit_goal(state, "g1", target=-1).error, ValidationError)


def test_delete_goal_logs_system_entry(state):
    result = goal_ledger.delete_goal(state, "g1", NOW)
    assert "g1" not in result.state.goals
    assert result.state.logs[0].type == "system"


def test_goals_at_risk(empty_state):
    created = NOW - timedelta(days=10)
    behind = goal_ledger.create_goal(
        empty_state, "Save", 100, deadline=NOW.date() + timedelta(days=10), goal_id="slow", now=created
    ).state
    expired = goal_ledger.create_goal(
        behind, "Old", 10, deadline=NOW.date() - timedelta(days=1), goal_id="old", now=created
    ).state
    on_track = goal_ledger.create_goal(
        expired, "Fast", 10, deadline=NOW.date() + timedelta(days=10), goal_id="fast", now=created
    ).state
    on_track = goal_ledger.add_progress(on_track, "fast", 9, NOW).state

    risks = {r["id"]: r["risk"] for r in goal_ledger.goals_at_risk(list(on_track.goals.values()), NOW)}
    assert risks == {"slow": "behind", "old": "expired"}


def test_locate_entry_without_id_matches_newest_amount(state):
    s = goal_ledger.add_progress(state, "g1", 5, NOW).state
    s = goal_ledger.add_progress(s, "g1", 5, NOW + timedelta(minutes=1)).state
    goal = s.goals["g1"]
    assert goal_ledger.locate_entry(goal, None, Decimal("5")) is goal.history[-1]
    assert goal_ledger.locate_entry(goal, None, Decimal("6")) is None
    assert goal_ledger.locate_entry(goal, "missing", Decimal("5")) is None


def test_deadline_round_trips(empty_state):
    result = goal_ledger.create_goal(empty_state, "Trip", 3, deadline=date(2024, 12, 31), now=NOW)
    assert result.value.deadline == date(2024, 12, 31)
