"""Session resolution shared by every protected route."""
from typing import Optional

from bson import ObjectId
from fastapi import Cookie, Depends, HTTPException, status
from pymongo.database import Database

from lifetracker.database import get_db
from lifetracker.security import verify_token


def resolve_session(token: Optional[str], db: Database) -> Optional[dict]:
    """Token cookie value -> ``{"id", "username"}`` or None.

    The user document is always reloaded so a deleted account loses access
    before its token expires.
    """
    if not token:
        return None
    payload = verify_token(token)
    if payload is None or not ObjectId.is_valid(payload["id"]):
        return None
    user = db["user"].find_one({"_id": ObjectId(payload["id"])})
    if not user:
        return None
    return {"id": str(user["_id"]), "username": user["username"]}


def get_session(token: Optional[str] = Cookie(None), db: Database = Depends(get_db)) -> Optional[dict]:
    return resolve_session(token, db)


def get_current_user(session: Optional[dict] = Depends(get_session)) -> dict:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return session
