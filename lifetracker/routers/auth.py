import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from lifetracker import config
from lifetracker.database import create_document, get_db
from lifetracker.deps import resolve_session
from lifetracker.schemas import Credentials
from lifetracker.security import (
    burn_password_check,
    create_access_token,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_token_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        config.TOKEN_COOKIE,
        token,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="strict",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: Credentials, db: Database = Depends(get_db)):
    if db["user"].find_one({"username": body.username}):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")
    try:
        create_document(db, "user", {
            "username": body.username,
            "password_hash": get_password_hash(body.password),
        })
    except DuplicateKeyError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")
    logger.info("User registered: %s", body.username)
    return {"message": "Registration successful"}


@router.post("/login")
def login(body: Credentials, response: Response, db: Database = Depends(get_db)):
    user = db["user"].find_one({"username": body.username})
    if not user:
        burn_password_check()
        logger.warning("Login failed for %s: unknown user", body.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not verify_password(body.password, user.get("password_hash", "")):
        logger.warning("Login failed for %s: password mismatch", body.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user_id = str(user["_id"])
    token = create_access_token(user_id, user["username"])
    _set_token_cookie(response, token, max_age=config.TOKEN_EXPIRE_MINUTES * 60)
    logger.info("Login successful for %s", body.username)
    return {"user": {"id": user_id, "username": user["username"]}}


@router.post("/logout")
def logout(response: Response):
    _set_token_cookie(response, "", max_age=0)
    return {"message": "Logged out"}


@router.get("/me")
def me(token: Optional[str] = Cookie(None), db: Database = Depends(get_db)):
    try:
        return {"user": resolve_session(token, db)}
    except PyMongoError:
        logger.exception("Error fetching user for session")
        return {"user": None}
