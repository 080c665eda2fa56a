import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import DESCENDING
from pymongo.database import Database

from lifetracker import schemas
from lifetracker.crud import Resource, query_day, register_routes, serialize
from lifetracker.database import get_db, utcnow
from lifetracker.deps import get_current_user
from lifetracker.stats import today
from lifetracker.validation import day_range

logger = logging.getLogger(__name__)

MACROS = ("calories", "protein", "carbs", "fat", "fiber")


def deactivate_other_diets(db, user, session, keep=None):
    """At most one active diet per user: switch the others off first."""
    query = {"user_id": user["id"], "is_active": True}
    if keep is not None:
        query["_id"] = {"$ne": keep}
    result = db["diet"].update_many(query, {"$set": {"is_active": False, "updated_at": utcnow()}}, session=session)
    if result.modified_count:
        logger.info("Deactivated %d diets for user %s", result.modified_count, user["username"])


def diet_before_create(db, doc, user, session):
    if doc.get("is_active"):
        deactivate_other_diets(db, user, session)


def diet_before_update(db, updates, existing, user, session):
    if updates.get("is_active"):
        deactivate_other_diets(db, user, session, keep=existing["_id"])


def entries_on_day(query_params) -> dict:
    day = query_params.get("date")
    if not day:
        return {}
    return {"date": day_range(query_day(day))}


diets = Resource(
    collection="diet",
    label="Diet",
    create_schema=schemas.Diet,
    update_schema=schemas.DietUpdate,
    sort=[("created_at", DESCENDING)],
    before_create=diet_before_create,
    before_update=diet_before_update,
    summary_field="name",
)

diet_entries = Resource(
    collection="diet_entry",
    label="Diet entry",
    create_schema=schemas.DietEntry,
    update_schema=schemas.DietEntryUpdate,
    sort=[("created_at", DESCENDING)],
    list_filter=entries_on_day,
    summary_field="food_name",
)

diets_router = register_routes(APIRouter(prefix="/api/diets", tags=["diet"]), diets)

entries_router = APIRouter(prefix="/api/diet-entries", tags=["diet"])


@entries_router.get("/summary")
def daily_summary(date: Optional[str] = None, user: dict = Depends(get_current_user),
                  db: Database = Depends(get_db)):
    """Macro totals for one day against the active diet, net of exercise."""
    day = query_day(date) if date else today()
    scope = {"user_id": user["id"], "date": day_range(day)}

    entries = list(db["diet_entry"].find(scope))
    consumed = {m: round(sum(e.get(m) or 0 for e in entries), 1) for m in MACROS}
    burned = round(sum(x.get("calories_burned") or 0 for x in db["exercise"].find(scope)), 1)

    diet = db["diet"].find_one({"user_id": user["id"], "is_active": True})
    targets = remaining = None
    if diet:
        targets = {m: diet.get(f"target_{m}", 0) for m in MACROS}
        remaining = {m: round(targets[m] - consumed[m], 1) for m in MACROS}

    return {
        "date": day.isoformat(),
        "entries": len(entries),
        "totals": consumed,
        "activeDiet": serialize(diet) if diet else None,
        "targets": targets,
        "remaining": remaining,
        "caloriesBurned": burned,
        "netCalories": round(consumed["calories"] - burned, 1),
    }


register_routes(entries_router, diet_entries)

routers = [diets_router, entries_router]
