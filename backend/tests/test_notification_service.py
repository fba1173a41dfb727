from datetime import date, timedelta
from decimal import Decimal

from conftest import NOW
from schemas import FriendRequest, Habit, HabitEvent, HabitStatus, NumericGoal
from services.notification_service import NotificationService, get_notifications

TODAY = NOW.date()


def habit_with_streak(days: int, habit_id: str = "h1") -> Habit:
    history = {TODAY - timedelta(days=i): HabitStatus.COMPLETED for i in range(days)}
    return Habit(id=habit_id, title="Meditate", history=history)


def goal(current: str, target: str = "100", goal_id: str = "g1") -> NumericGoal:
    return NumericGoal(id=goal_id, title="Save", target=Decimal(target), current=Decimal(current), unit="USD")


def test_seven_day_streak_emits_one_milestone():
    notes = get_notifications([habit_with_streak(7)], [], [], [], now=NOW)
    assert [n.id for n in notes] == ["habit-streak-h1-7"]
    assert notes[0].message == '🔥 7-day streak on "Meditate"!'


def test_six_days_is_not_a_milestone():
    assert get_notifications([habit_with_streak(6)], [], [], [], now=NOW) == []


def test_streak_with_a_gap_today_does_not_count():
    habit = habit_with_streak(8)
    history = dict(habit.history)
    history.pop(TODAY)
    assert get_notifications([habit.model_copy(update={"history": history})], [], [], [], now=NOW) == []


def test_milestones_count_completed_days_for_negative_habits():
    completed = habit_with_streak(7).model_copy(update={"is_negative": True})
    assert [n.id for n in get_notifications([completed], [], [], [], now=NOW)] == ["habit-streak-h1-7"]

    avoided = {day: HabitStatus.FAILED for day in completed.history}
    failed = completed.model_copy(update={"history": avoided})
    assert get_notifications([failed], [], [], [], now=NOW) == []


def test_goal_thresholds():
    notes = get_notifications([], [goal("100"), goal("80", goal_id="g2"), goal("74", goal_id="g3")], [], [], now=NOW)
    assert [n.id for n in notes] == ["goal-complete-g1", "goal-near-g2"]
    assert notes[1].message.startswith("You're 80% of the way")


def test_friend_requests_come_first_and_carry_the_sender():
    request = FriendRequest(request_id="9", id="bob", name="Bob", created_at=NOW)
    event = HabitEvent(id="e1", title="Park run", date=date(2024, 6, 15), organizer="Bob",
                       organizer_id="bob", invitees=["alice"])
    notes = get_notifications([habit_with_streak(7)], [goal("100")], [request], [event], user_id="alice", now=NOW)

    assert [n.type for n in notes] == ["friend_request", "event_invite", "goal", "habit"]
    assert notes[0].action_type == "friend_request"
    assert notes[0].action_data == {"friend_id": "bob"}
    assert notes[1].action_data == {"event_id": "e1"}


def test_event_invites_only_for_invitees():
    event = HabitEvent(id="e1", title="Park run", date=date(2024, 6, 15), organizer_id="bob", attendees=["alice"])
    assert get_notifications([], [], [], [event], user_id="alice", now=NOW) == []


def test_ids_are_stable_and_cleared_ones_are_hidden():
    habits = [habit_with_streak(7)]
    first = get_notifications(habits, [goal("90")], [], [], now=NOW)
    second = get_notifications(habits, [goal("90")], [], [], now=NOW + timedelta(minutes=5))
    assert [n.id for n in first] == [n.id for n in second]

    cleared = {"goal-near-g1"}
    assert [n.id for n in get_notifications(habits, [goal("90")], [], [], now=NOW, cleared=cleared)] == [
        "habit-streak-h1-7"
    ]


def test_dismissal_is_persisted_and_idempotent(db):
    from services.user_service import UserService

    UserService.ensure(db, "alice", name="Alice")
    NotificationService.dismiss(db, "alice", "goal-near-g1")
    NotificationService.dismiss(db, "alice", "goal-near-g1")
    assert NotificationService.cleared_ids(db, "alice") == {"goal-near-g1"}

    notes = NotificationService.get_all(db, "alice", [], [goal("90")], [], [], now=NOW)
    assert notes == []
