from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import get_current_user, get_token_claims
from database import get_db
from services.user_service import UserService, user_to_dict

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

class SyncRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    avatar_url: Optional[str] = None


@router.post("/sync")
async def sync_user(body: SyncRequest, claims: dict = Depends(get_token_claims), db: Session = Depends(get_db)):
    """Create or refresh the local profile for the signed-in identity."""
    user = UserService.sync(
        db,
        str(claims["user_id"]),
        email=body.email or claims.get("email", ""),
        name=body.name or claims.get("name"),
        avatar_url=body.avatar_url,
    )
    return {"status": "success", "data": user_to_dict(user)}

@router.get("/me")
async def get_me(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_to_dict(UserService.get(db, user_id))

@router.patch("/me")
async def update_me(body: ProfileUpdate, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    user = UserService.update(db, user_id, name=body.name, avatar_url=body.avatar_url)
    return {"status": "success", "data": user_to_dict(user)}

@router.delete("/me")
async def delete_me(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    UserService.delete(db, user_id)
    return {"status": "success"}
