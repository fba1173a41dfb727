"""
social_service.py — Friends, friend requests and the friend activity feed
Requests are one-directional pending rows; accepting one flips it and adds
the reverse link so both users see each other.
"""

from datetime import datetime, timezone

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from config import FEED_LIMIT
from models.activity_log import ActivityLog
from models.friendship import Friendship
from models.goal import Goal
from models.user import User
from schemas import FeedItem, FriendRequest
from services.errors import NotFoundError, ValidationError
from services.log_entries import make_entry
from services.repository import SqlRepository, as_utc, goal_to_schema
from services.user_service import avatar_for


def _log(db: Session, user_id: str, description: str) -> None:
    entry = make_entry("friend", description, datetime.now(timezone.utc))
    SqlRepository(db, user_id).append_log(entry)


class SocialService:
    @staticmethod
    def list_friends(db: Session, user_id: str) -> list[dict]:
        """Accepted friends with their goals."""
        rows = db.query(User, Friendship).join(Friendship, Friendship.friend_id == User.id).filter(
            Friendship.user_id == user_id,
            Friendship.status == "accepted",
        ).order_by(Friendship.created_at.desc()).all()

        friends = []
        for u, _ in rows:
            goals = db.query(Goal).filter_by(user_id=u.id).order_by(Goal.created_at).all()
            friends.append({
                "id": u.id,
                "name": u.name,
                "email": u.email,
                "avatar_url": avatar_for(u.name, u.avatar_url),
                "goals": [goal_to_schema(g).model_dump(mode="json") for g in goals],
            })
        return friends

    @staticmethod
    def pending_requests(db: Session, user_id: str) -> list[FriendRequest]:
        """Requests other users have sent to this user."""
        rows = db.query(Friendship, User).join(User, User.id == Friendship.user_id).filter(
            Friendship.friend_id == user_id,
            Friendship.status == "pending",
        ).order_by(Friendship.created_at.desc()).all()
        return [
            FriendRequest(
                request_id=str(f.id),
                id=u.id,
                name=u.name,
                email=u.email,
                avatar_url=avatar_for(u.name, u.avatar_url),
                created_at=as_utc(f.created_at),
            )
            for f, u in rows
        ]

    @staticmethod
    def search_users(db: Session, user_id: str, q: str) -> list[dict]:
        """Name/email search excluding self, existing links and requests awaiting my answer."""
        q = (q or "").strip()
        if len(q) < 2:
            return []
        linked = select(Friendship.friend_id).where(Friendship.user_id == user_id)
        asking = select(Friendship.user_id).where(
            Friendship.friend_id == user_id, Friendship.status == "pending"
        )
        pattern = f"%{q}%"
        users = db.query(User).filter(
            User.id != user_id,
            or_(User.name.ilike(pattern), User.email.ilike(pattern)),
            ~User.id.in_(linked),
            ~User.id.in_(asking),
        ).order_by(User.name).limit(20).all()
        return [
            {"id": u.id, "name": u.name, "email": u.email, "avatar_url": avatar_for(u.name, u.avatar_url)}
            for u in users
        ]

    @staticmethod
    def send_request(db: Session, user_id: str, friend_id: str) -> str:
        if not friend_id:
            raise ValidationError("friend_id is required")
        if friend_id == user_id:
            raise ValidationError("Cannot add yourself")
        target = db.get(User, friend_id)
        if target is None:
            raise NotFoundError("User not found")

        try:
            existing = db.query(Friendship).filter_by(user_id=user_id, friend_id=friend_id).first()
            if existing is None:
                db.add(Friendship(user_id=user_id, friend_id=friend_id, status="pending"))
            _log(db, user_id, f'Sent friend request to "{target.name}"')
            db.commit()
            return target.name
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def accept_request(db: Session, user_id: str, friend_id: str) -> dict:
        request = db.query(Friendship).filter_by(user_id=friend_id, friend_id=user_id, status="pending").first()
        if request is None:
            raise NotFoundError("No pending friend request from this user")
        friend = db.get(User, friend_id)
        me = db.get(User, user_id)

        try:
            request.status = "accepted"
            reverse = db.query(Friendship).filter_by(user_id=user_id, friend_id=friend_id).first()
            if reverse is None:
                db.add(Friendship(user_id=user_id, friend_id=friend_id, status="accepted"))
            else:
                reverse.status = "accepted"
            _log(db, user_id, f'Accepted friend request from "{friend.name}"')
            _log(db, friend_id, f"{me.name if me else 'Someone'} accepted your friend request")
            db.commit()
        except Exception:
            db.rollback()
            raise

        return {
            "id": friend.id,
            "name": friend.name,
            "email": friend.email,
            "avatar_url": avatar_for(friend.name, friend.avatar_url),
        }

    @staticmethod
    def reject_request(db: Session, user_id: str, friend_id: str) -> None:
        friend = db.get(User, friend_id)
        try:
            deleted = db.query(Friendship).filter_by(
                user_id=friend_id, friend_id=user_id, status="pending"
            ).delete()
            if not deleted:
                raise NotFoundError("No pending friend request from this user")
            _log(db, user_id, f'Declined friend request from "{friend.name if friend else "Unknown"}"')
            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def remove_friend(db: Session, user_id: str, friend_id: str) -> None:
        friend = db.get(User, friend_id)
        try:
            db.query(Friendship).filter(
                or_(
                    (Friendship.user_id == user_id) & (Friendship.friend_id == friend_id),
                    (Friendship.user_id == friend_id) & (Friendship.friend_id == user_id),
                )
            ).delete(synchronize_session=False)
            _log(db, user_id, f'Removed "{friend.name if friend else "a friend"}" from friends')
            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def feed(db: Session, user_id: str, limit: int = FEED_LIMIT) -> list[FeedItem]:
        """Friends' habit and goal activity, newest first. Reversed entries are hidden."""
        friend_ids = select(Friendship.friend_id).where(
            Friendship.user_id == user_id, Friendship.status == "accepted"
        )
        rows = db.query(ActivityLog, User).join(User, User.id == ActivityLog.user_id).filter(
            ActivityLog.user_id.in_(friend_ids),
            ActivityLog.type.in_(["habit", "goal"]),
            ActivityLog.reversed.is_(False),
        ).order_by(ActivityLog.created_at.desc()).limit(limit).all()
        return [
            FeedItem(
                id=log.id,
                friend_id=u.id,
                friend_name=u.name,
                friend_avatar=avatar_for(u.name, u.avatar_url),
                description=log.description,
                timestamp=as_utc(log.created_at),
            )
            for log, u in rows
        ]
