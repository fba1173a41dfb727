"""
user_service.py — Local user records for ids issued by the identity provider.
"""

from urllib.parse import quote

from sqlalchemy.orm import Session

from models.activity_log import ActivityLog
from models.event import EventRsvp, HabitEvent
from models.friendship import Friendship
from models.goal import Goal
from models.habit import Habit
from models.notification import NotificationDismissal
from models.user import User
from services.errors import NotFoundError


def avatar_for(name: str, avatar_url: str | None = None) -> str:
    return avatar_url or f"https://ui-avatars.com/api/?name={quote(name)}&background=2ea043&color=fff"


def user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "avatar_url": avatar_for(u.name, u.avatar_url),
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


class UserService:
    @staticmethod
    def ensure(db: Session, user_id: str, email: str = "", name: str = "User") -> User:
        """Make sure a row exists for the caller so owned rows have a parent."""
        user = db.get(User, user_id)
        if user is None:
            user = User(id=user_id, email=email or "", name=name or "User")
            db.add(user)
            db.commit()
            db.refresh(user)
        return user

    @staticmethod
    def sync(db: Session, user_id: str, email: str = "", name: str | None = None, avatar_url: str | None = None) -> User:
        """Insert or refresh the caller's profile after sign-in."""
        user = db.get(User, user_id)
        if user is None:
            user = User(id=user_id, email=email or "", name=name or "User", avatar_url=avatar_url)
            db.add(user)
        else:
            if email:
                user.email = email
            if name:
                user.name = name
            if avatar_url:
                user.avatar_url = avatar_url
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get(db: Session, user_id: str) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update(db: Session, user_id: str, name: str | None = None, avatar_url: str | None = None) -> User:
        user = UserService.get(db, user_id)
        if name:
            user.name = name
        if avatar_url is not None:
            user.avatar_url = avatar_url
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete(db: Session, user_id: str) -> None:
        """Remove the account and everything it owns."""
        try:
            for habit in db.query(Habit).filter_by(user_id=user_id).all():
                db.delete(habit)
            for goal in db.query(Goal).filter_by(user_id=user_id).all():
                db.delete(goal)
            db.query(ActivityLog).filter_by(user_id=user_id).delete()
            db.query(NotificationDismissal).filter_by(user_id=user_id).delete()
            db.query(Friendship).filter(
                (Friendship.user_id == user_id) | (Friendship.friend_id == user_id)
            ).delete(synchronize_session=False)
            event_ids = [e.id for e in db.query(HabitEvent.id).filter_by(organizer_id=user_id).all()]
            if event_ids:
                db.query(EventRsvp).filter(EventRsvp.event_id.in_(event_ids)).delete(synchronize_session=False)
                db.query(HabitEvent).filter(HabitEvent.id.in_(event_ids)).delete(synchronize_session=False)
            db.query(EventRsvp).filter_by(user_id=user_id).delete()
            db.query(User).filter_by(id=user_id).delete()
            db.commit()
        except Exception:
            db.rollback()
            raise
