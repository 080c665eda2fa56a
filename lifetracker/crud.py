"""
Generic ownership-scoped CRUD.

A domain describes itself once with a ``Resource`` (collection, schemas, sort,
hooks) and ``register_routes`` attaches list/create/get/update/delete handlers
to its router. Every handler resolves the session, scopes the query by the
caller's ``user_id`` and answers 404 for documents owned by someone else.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Optional, Type

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from pymongo import DESCENDING
from pymongo.database import Database

from lifetracker.database import create_document, get_db, transaction, utcnow
from lifetracker.deps import get_current_user
from lifetracker.validation import parse_iso_datetime

logger = logging.getLogger(__name__)


def serialize(doc: dict) -> dict:
    """MongoDB document -> JSON-ready dict with camelCase keys and ``id``."""
    out = {}
    for key, value in doc.items():
        if key == "_id":
            out["id"] = str(value)
            continue
        out[to_camel(key)] = jsonable(value)
    return out


def jsonable(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, list):
        return [jsonable(v) for v in value]
    if isinstance(value, dict):
        return serialize(value)
    return value


def to_object_id(value: str, label: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {label.lower()} id")
    return ObjectId(value)


def query_day(value: str, label: str = "date") -> date:
    """``?date=`` query value -> calendar day, 400 when unparseable."""
    try:
        return parse_iso_datetime(value, label).date()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


# Hook signatures:
#   list_filter(query_params) -> dict
#   before_create(db, doc, user, session)
#   before_update(db, updates, existing, user, session)
@dataclass
class Resource:
    collection: str
    label: str
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    sort: List[tuple] = field(default_factory=lambda: [("date", DESCENDING)])
    base_filter: dict = field(default_factory=dict)
    create_defaults: dict = field(default_factory=dict)
    list_filter: Optional[Callable] = None
    before_create: Optional[Callable] = None
    before_update: Optional[Callable] = None
    summary_field: Optional[str] = None

    def find_owned(self, db: Database, item_id: str, user: dict, session=None) -> dict:
        doc = db[self.collection].find_one(
            {"_id": to_object_id(item_id, self.label), "user_id": user["id"]}, session=session
        )
        if not doc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{self.label} not found")
        return doc


def register_routes(router: APIRouter, resource: Resource, skip: Iterable[str] = ()) -> APIRouter:
    """Attach the CRUD handlers for ``resource`` to ``router``.

    Register static sub-paths (``/summary`` and the like) on the router before
    calling this, ``/{item_id}`` would shadow them otherwise.
    """
    skip = set(skip)
    coll = resource.collection
    label = resource.label

    if "list" not in skip:
        @router.get("")
        def list_items(request: Request, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
            query = {"user_id": user["id"], **resource.base_filter}
            if resource.list_filter:
                query.update(resource.list_filter(request.query_params))
            return [serialize(d) for d in db[coll].find(query).sort(resource.sort)]

    if "create" not in skip:
        @router.post("", status_code=status.HTTP_201_CREATED)
        def create_item(body: resource.create_schema, user: dict = Depends(get_current_user),
                        db: Database = Depends(get_db)):
            doc = {**resource.create_defaults, **body.model_dump(), "user_id": user["id"]}
            with transaction(db) as session:
                if resource.before_create:
                    resource.before_create(db, doc, user, session)
                doc = create_document(db, coll, doc, session=session)
            logger.info("%s created: %s for user %s", label, doc["_id"], user["username"])
            return serialize(doc)

    if "get" not in skip:
        @router.get("/{item_id}")
        def get_item(item_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
            return serialize(resource.find_owned(db, item_id, user))

    if "update" not in skip:
        @router.put("/{item_id}")
        def update_item(item_id: str, body: resource.update_schema, user: dict = Depends(get_current_user),
                        db: Database = Depends(get_db)):
            existing = resource.find_owned(db, item_id, user)
            updates = body.model_dump(exclude_unset=True)
            with transaction(db) as session:
                if resource.before_update:
                    resource.before_update(db, updates, existing, user, session)
                updates["updated_at"] = utcnow()
                db[coll].update_one({"_id": existing["_id"]}, {"$set": updates}, session=session)
            logger.info("%s updated: %s", label, item_id)
            return serialize(db[coll].find_one({"_id": existing["_id"]}))

    if "delete" not in skip:
        @router.delete("/{item_id}")
        def delete_item(item_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
            existing = resource.find_owned(db, item_id, user)
            db[coll].delete_one({"_id": existing["_id"]})
            logger.info("%s deleted: %s", label, item_id)
            body = {"message": f"{label} deleted successfully"}
            if resource.summary_field:
                body["deleted" + label.title().replace(" ", "")] = existing.get(resource.summary_field)
            return body

    return router
