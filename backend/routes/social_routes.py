from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config import FEED_LIMIT
from database import get_db
from routes.deps import dump, get_user_id
from services.social_service import SocialService

router = APIRouter(prefix="/api/v1/social", tags=["social"])

class FriendRequestBody(BaseModel):
    friend_id: str


@router.get("/friends")
async def list_friends(db: Session = Depends(get_db), current_user_id: str = Depends(get_user_id)):
    """Accepted friends, each with their goals."""
    return SocialService.list_friends(db, current_user_id)

@router.get("/friends/requests")
async def list_requests(db: Session = Depends(get_db), current_user_id: str = Depends(get_user_id)):
    return dump(SocialService.pending_requests(db, current_user_id))

@router.get("/users/search")
async def search_users(q: str = "", db: Session = Depends(get_db), current_user_id: str = Depends(get_user_id)):
    return SocialService.search_users(db, current_user_id, q)

@router.post("/friends")
async def send_request(body: FriendRequestBody, db: Session = Depends(get_db), current_user_id: str = Depends(get_user_id)):
    name = SocialService.send_request(db, current_user_id, body.friend_id)
    return {"status": "success", "message": f"Friend request sent to {name}"}

@router.post("/friends/accept")
async def accept_request(body: FriendRequestBody, db: Session = Depends(get_db), current_user_id: str = Depends(get_user_id)):
    friend = SocialService.accept_request(db, current_user_id, body.friend_id)
    return {"status": "success", "data": friend}

@router.post("/friends/reject")
async def reject_request(body: FriendRequestBody, db: Session = Depends(get_db), current_user_id: str = Depends(get_user_id)):
    SocialService.reject_request(db, current_user_id, body.friend_id)
    return {"status": "success"}

@router.delete("/friends/{friend_id}")
async def remove_friend(friend_id: str, db: Session = Depends(get_db), current_user_id: str = Depends(get_user_id)):
    SocialService.remove_friend(db, current_user_id, friend_id)
    return {"status": "success"}

@router.get("/feed")
async def friend_feed(
    limit: int = Query(FEED_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_user_id),
):
    """Friends' habit and goal activity, newest first."""
    return dump(SocialService.feed(db, current_user_id, limit))
