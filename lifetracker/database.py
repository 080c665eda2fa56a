"""
MongoDB access for the life tracker.

One client per process, created from DATABASE_URL / DATABASE_NAME. The client
pools connections and is shared by every request. Routes get the database
through the ``get_db`` dependency so tests can swap in another one.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from lifetracker import config

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
db: Optional[Database] = None

if config.DATABASE_URL and config.DATABASE_NAME:
    _client = MongoClient(config.DATABASE_URL)
    db = _client[config.DATABASE_NAME]


def get_db() -> Database:
    if db is None:
        raise RuntimeError("Database is not configured, set DATABASE_URL and DATABASE_NAME")
    return db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_document(database: Database, collection: str, data: dict, session=None) -> dict:
    doc = dict(data)
    now = utcnow()
    doc.setdefault("created_at", now)
    doc["updated_at"] = now
    result = database[collection].insert_one(doc, session=session)
    doc["_id"] = result.inserted_id
    return doc


def get_documents(database: Database, collection: str, filter_dict: Optional[dict] = None,
                  sort=None, limit: int = 0, session=None) -> list:
    cursor = database[collection].find(filter_dict or {}, session=session)
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


@contextmanager
def transaction(database: Database):
    """Group the writes of one request.

    Yields a client session inside a started transaction when
    MONGO_TRANSACTIONS is on (replica set or sharded cluster required),
    otherwise None and the caller's writes run one after another.
    """
    if not config.MONGO_TRANSACTIONS:
        yield None
        return
    with database.client.start_session() as session:
        with session.start_transaction():
            yield session


def ensure_indexes(database: Database) -> None:
    database["user"].create_index("username", unique=True)
    database["board"].create_index([("user_id", ASCENDING), ("created_at", ASCENDING)])
    database["task"].create_index([("board_id", ASCENDING), ("order", ASCENDING)])
    database["habit_tracker"].create_index(
        [("user_id", ASCENDING), ("habit_id", ASCENDING), ("date", ASCENDING)], unique=True
    )
    database["smoking_tracker"].create_index(
        [("user_id", ASCENDING), ("date", ASCENDING)], unique=True
    )
    database["health_goal"].create_index([("user_id", ASCENDING), ("type", ASCENDING)], unique=True)
    logger.info("MongoDB indexes ensured on %s", database.name)
