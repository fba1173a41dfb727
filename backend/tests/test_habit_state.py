from datetime import date, timedelta

import pytest

from conftest import NOW
from schemas import Habit, HabitStatus, TrackerState
from services import habit_state
from services.errors import NotFoundError, ValidationError

DAY = date(2024, 6, 1)


def state_with(habit: Habit) -> TrackerState:
    return TrackerState(user_id="alice", habits={habit.id: habit})


@pytest.mark.parametrize("is_negative", [False, True])
def test_toggle_cycle_has_length_three(is_negative):
    status = None
    seen = []
    for _ in range(3):
        status = habit_state.next_status(is_negative, status)
        seen.append(status)
    assert seen[-1] is None
    assert len({s for s in seen if s is not None}) == 2


def test_transition_table_covers_every_state():
    for is_negative in (False, True):
        for status in (None, HabitStatus.COMPLETED, HabitStatus.FAILED):
            assert (is_negative, status) in habit_state.TRANSITIONS


def test_positive_habit_three_toggles():
    state = state_with(Habit(id="h1", title="Exercise"))
    observed = []
    log_counts = []
    for _ in range(3):
        result = habit_state.toggle_habit(state, "h1", DAY, NOW)
        assert result.is_ok
        state = result.state
        observed.append(state.habits["h1"].history.get(DAY))
        log_counts.append(len(state.logs))

    assert observed == [HabitStatus.COMPLETED, HabitStatus.FAILED, None]
    assert log_counts == [1, 1, 1]
    entry = state.logs[0]
    assert entry.description == 'Completed "Exercise" for 2024-06-01'
    assert entry.reversible and entry.entry_date == DAY and entry.related_id == "h1"


def test_negative_habit_logs_only_the_avoided_day():
    state = state_with(Habit(id="h2", title="No smoking", is_negative=True))

    first = habit_state.toggle_habit(state, "h2", DAY, NOW)
    assert first.state.habits["h2"].history[DAY] == HabitStatus.FAILED
    assert habit_state.is_good(True, HabitStatus.FAILED)
    assert first.state.logs[0].description == 'Avoided "No smoking" for 2024-06-01'

    second = habit_state.toggle_habit(first.state, "h2", DAY, NOW)
    assert second.state.habits["h2"].history[DAY] == HabitStatus.COMPLETED
    assert len(second.state.logs) == 1
    assert [e.op for e in second.effects] == ["upsert_habit_entry"]


def test_toggle_unknown_habit():
    result = habit_state.toggle_habit(TrackerState(user_id="alice"), "missing", DAY, NOW)
    assert isinstance(result.error, NotFoundError)


def test_toggle_future_date_is_rejected():
    state = state_with(Habit(id="h1", title="Exercise"))
    result = habit_state.toggle_habit(state, "h1", NOW.date() + timedelta(days=1), NOW)
    assert isinstance(result.error, ValidationError)
    assert result.state is None
    assert state.habits["h1"].history == {}


def test_create_habit_validates_title_and_category(empty_state):
    assert isinstance(habit_state.create_habit(empty_state, "  ").error, ValidationError)
    assert isinstance(habit_state.create_habit(empty_state, "Read", category="Hobby").error, ValidationError)

    result = habit_state.create_habit(empty_state, "Read", category="Mindfulness", now=NOW)
    habit = result.value
    assert habit.id in result.state.habits
    assert [e.op for e in result.effects] == ["create_habit", "append_log"]


def test_rename_and_delete(empty_state):
    created = habit_state.create_habit(empty_state, "Read", habit_id="h1", now=NOW).state
    renamed = habit_state.rename_habit(created, "h1", "Read 20 pages", NOW)
    assert renamed.state.habits["h1"].title == "Read 20 pages"

    deleted = habit_state.delete_habit(renamed.state, "h1", NOW)
    assert "h1" not in deleted.state.habits
    assert deleted.state.logs[0].description == 'Deleted habit "Read 20 pages"'


def test_streak_counts_good_days_back_from_today():
    today = NOW.date()
    history = {today - timedelta(days=i): HabitStatus.COMPLETED for i in range(5)}
    history[today - timedelta(days=6)] = HabitStatus.COMPLETED
    assert habit_state.current_streak(Habit(id="h", title="Run", history=history), today) == 5


def test_streak_for_negative_habit_counts_avoided_days():
    today = NOW.date()
    history = {today - timedelta(days=i): HabitStatus.FAILED for i in range(3)}
    habit = Habit(id="h", title="No sugar", is_negative=True, history=history)
    assert habit_state.current_streak(habit, today) == 3


def test_completed_streak_ignores_polarity():
    today = NOW.date()
    history = {today - timedelta(days=i): HabitStatus.COMPLETED for i in range(4)}
    history[today - timedelta(days=4)] = HabitStatus.FAILED
    habit = Habit(id="h", title="No sugar", is_negative=True, history=history)
    assert habit_state.completed_streak(habit, today) == 4
    assert habit_state.current_streak(habit, today) == 0
