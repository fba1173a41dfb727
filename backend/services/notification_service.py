"""
notification_service.py — Derived notifications
Recomputed on every read from pending friend requests, event invites, goal
thresholds and habit streaks. Nothing here is persisted except the set of
notification ids a user has dismissed.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import GOAL_NEAR_THRESHOLD, STREAK_MILESTONES
from models.notification import NotificationDismissal
from schemas import FriendRequest, Habit, HabitEvent, Notification, NumericGoal
from services.habit_state import completed_streak
from services.log_entries import format_amount


def _milestone(streak: int) -> int | None:
    reached = [m for m in STREAK_MILESTONES if m <= streak]
    return reached[-1] if reached else None


def get_notifications(
    habits: list[Habit],
    goals: list[NumericGoal],
    requests: list[FriendRequest],
    events: list[HabitEvent],
    user_id: str | None = None,
    now: datetime | None = None,
    cleared: set[str] | None = None,
) -> list[Notification]:
    """
    Friend requests first, then event invites, then achievements in the order
    they are evaluated: goals before habits. Ids are stable across reads so
    the caller's cleared set keeps suppressing the same notification.
    """
    now = now or datetime.now(timezone.utc)
    today = now.date()
    cleared = cleared or set()
    notes: list[Notification] = []

    for r in requests:
        notes.append(Notification(
            id=f"friend-request-{r.request_id}",
            message=f"{r.name} sent you a friend request",
            timestamp=r.created_at,
            type="friend_request",
            action_type="friend_request",
            action_data={"friend_id": r.id},
        ))

    for e in events:
        if user_id and user_id in e.invitees:
            notes.append(Notification(
                id=f"event-invite-{e.id}",
                message=f'{e.organizer or "A friend"} invited you to "{e.title}" on {e.date.isoformat()}',
                timestamp=now,
                type="event_invite",
                action_type="event_invite",
                action_data={"event_id": e.id},
            ))

    for g in goals:
        if g.target <= 0:
            continue
        ratio = g.current / g.target
        if ratio >= 1:
            notes.append(Notification(
                id=f"goal-complete-{g.id}",
                message=f"🎉 You reached your goal: {g.title} ({format_amount(g.current)} {g.unit})!",
                timestamp=now,
                type="goal",
            ))
        elif ratio >= Decimal(str(GOAL_NEAR_THRESHOLD)):
            percent = int(ratio * 100)
            notes.append(Notification(
                id=f"goal-near-{g.id}",
                message=f"You're {percent}% of the way to {g.title}. Keep going!",
                timestamp=now,
                type="goal",
            ))

    for h in habits:
        streak = completed_streak(h, today)
        milestone = _milestone(streak)
        if milestone is None:
            continue
        notes.append(Notification(
            id=f"habit-streak-{h.id}-{milestone}",
            message=f'🔥 {streak}-day streak on "{h.title}"!',
            timestamp=now,
            type="habit",
        ))

    seen = set()
    result = []
    for n in notes:
        if n.id in cleared or n.id in seen:
            continue
        seen.add(n.id)
        result.append(n)
    return result


class NotificationService:
    @staticmethod
    def cleared_ids(db: Session, user_id: str) -> set[str]:
        rows = db.query(NotificationDismissal.notification_id).filter_by(user_id=user_id).all()
        return {r[0] for r in rows}

    @staticmethod
    def dismiss(db: Session, user_id: str, notification_id: str) -> None:
        """Remember a cleared notification; dismissing twice is harmless."""
        exists = db.query(NotificationDismissal).filter_by(
            user_id=user_id, notification_id=notification_id
        ).first()
        if exists:
            return
        try:
            db.add(NotificationDismissal(user_id=user_id, notification_id=notification_id))
            db.commit()
        except IntegrityError:
            db.rollback()

    @staticmethod
    def get_all(db: Session, user_id: str, habits, goals, requests, events, now=None) -> list[Notification]:
        return get_notifications(
            habits, goals, requests, events,
            user_id=user_id,
            now=now,
            cleared=NotificationService.cleared_ids(db, user_id),
        )
