"""
Shared route dependencies: the caller's user row, a tracker session bound
to it, and the success envelope for engine results.
"""

from fastapi import Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import get_token_claims
from database import get_db
from services.repository import SqlRepository
from services.result import Result
from services.tracker_session import TrackerSession
from services.user_service import UserService


async def get_user_id(claims: dict = Depends(get_token_claims), db: Session = Depends(get_db)) -> str:
    """Caller's id, with a local user row created on first sight."""
    user_id = str(claims["user_id"])
    UserService.ensure(db, user_id, claims.get("email", ""), claims.get("name", "User"))
    return user_id


async def get_tracker(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> TrackerSession:
    return TrackerSession(SqlRepository(db, user_id))


def dump(value):
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [dump(v) for v in value]
    return value


def respond(result: Result, data=None) -> dict:
    """Engine result -> {"status": "success", "data": ...}; errors become HTTP errors."""
    if not result.is_ok:
        raise HTTPException(status_code=result.error.status_code, detail=result.error.message)
    body = {"status": "success", "data": dump(result.value if data is None else data)}
    if result.warnings:
        body["warnings"] = result.warnings
    return body
