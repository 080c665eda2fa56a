import logging
import os

from fastapi import APIRouter, Depends
from pymongo.database import Database
from pymongo.errors import PyMongoError

from lifetracker import config
from lifetracker.database import get_db, utcnow
from lifetracker.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/debug", tags=["debug"])


@router.get("")
def debug_info(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Counts and environment flags. Requires a session; never exposes secrets."""
    response = {
        "timestamp": utcnow().isoformat(),
        "environment": config.APP_ENV,
        "hasJWTSecret": bool(os.getenv("JWT_SECRET")),
        "database": {
            "type": "MongoDB",
            "name": getattr(db, "name", None),
            "connected": False,
            "collections": [],
        },
    }
    try:
        response["database"].update({
            "connected": True,
            "userCount": db["user"].count_documents({}),
            "boardCount": db["board"].count_documents({}),
            "taskCount": db["task"].count_documents({}),
            "collections": sorted(db.list_collection_names())[:10],
        })
    except PyMongoError as e:
        logger.exception("Debug endpoint could not reach the database")
        response["database"].update({"connected": False, "error": str(e)[:50]})
    return response
