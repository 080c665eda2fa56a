"""
Health domains.

Exercises and weight entries are full owned records. The health tracker is a
lighter quick-log surface (weight with BMI, exercise minutes, meals from the
food search, per-type goals) kept in its own ``*_log`` collections.
"""
import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo import DESCENDING
from pymongo.database import Database

from lifetracker import schemas
from lifetracker.crud import Resource, query_day, register_routes, serialize
from lifetracker.database import create_document, get_db, get_documents, utcnow
from lifetracker.deps import get_current_user
from lifetracker.foods import search_foods
from lifetracker.stats import today
from lifetracker.validation import day_range, day_start

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30
RECENT = [("date", DESCENDING), ("created_at", DESCENDING)]


def exercises_in_range(query_params) -> dict:
    """``?date=`` selects one day, otherwise the last ``?days=`` (7) days."""
    day = query_params.get("date")
    if day:
        return {"date": day_range(query_day(day))}
    days = query_params.get("days") or "7"
    if not days.isdigit() or not 1 <= int(days) <= 365:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid days")
    return {"date": {"$gte": day_start(today() - timedelta(days=int(days) - 1))}}


exercises = Resource(
    collection="exercise",
    label="Exercise",
    create_schema=schemas.Exercise,
    update_schema=schemas.ExerciseUpdate,
    sort=RECENT,
    list_filter=exercises_in_range,
    summary_field="exercise_name",
)

weight_entries = Resource(
    collection="weight_entry",
    label="Weight entry",
    create_schema=schemas.WeightEntry,
    update_schema=schemas.WeightEntryUpdate,
    sort=RECENT,
    summary_field="weight",
)

exercises_router = register_routes(APIRouter(prefix="/api/exercises", tags=["health"]), exercises)
weights_router = register_routes(APIRouter(prefix="/api/weight-entries", tags=["health"]), weight_entries)

tracker_router = APIRouter(prefix="/api/health-tracker", tags=["health"])


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "underweight"
    if bmi < 25:
        return "normal"
    if bmi < 30:
        return "overweight"
    return "obese"


def _log(db: Database, collection: str, user: dict, data: dict) -> dict:
    doc = create_document(db, collection, {"user_id": user["id"], "date": day_start(today()), **data})
    logger.info("%s entry added for user %s", collection, user["username"])
    return serialize(doc)


@tracker_router.get("")
def overview(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    owner = {"user_id": user["id"]}

    def history(collection):
        return [serialize(d) for d in get_documents(db, collection, owner, sort=RECENT, limit=HISTORY_LIMIT)]

    return {
        "weightHistory": history("weight_log"),
        "calorieHistory": history("meal_log"),
        "exerciseHistory": history("exercise_log"),
    }


@tracker_router.post("/weight", status_code=status.HTTP_201_CREATED)
def log_weight(body: schemas.WeightLog, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    entry = _log(db, "weight_log", user, {**body.model_dump(), "bmi_category": bmi_category(body.bmi)})
    return {"message": "Weight entry added successfully", "entry": entry}


@tracker_router.post("/exercise", status_code=status.HTTP_201_CREATED)
def log_exercise(body: schemas.ExerciseLog, user: dict = Depends(get_current_user),
                 db: Database = Depends(get_db)):
    entry = _log(db, "exercise_log", user, body.model_dump())
    return {"message": "Exercise entry added successfully", "entry": entry}


@tracker_router.get("/goals")
def list_goals(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    goals = get_documents(db, "health_goal", {"user_id": user["id"]}, sort=[("created_at", DESCENDING)])
    return {"goals": [serialize(g) for g in goals]}


@tracker_router.post("/goals")
def set_goal(body: schemas.HealthGoal, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    now = utcnow()
    key = {"user_id": user["id"], "type": body.type}
    db["health_goal"].update_one(
        key,
        {
            "$set": {
                "current_value": body.current_value,
                "target_value": body.target_value,
                "date": day_start(today()),
                "updated_at": now,
            },
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
    )
    logger.info("Health goal set: %s for user %s", body.type, user["username"])
    return {"message": "Health goal set successfully", "goal": serialize(db["health_goal"].find_one(key))}


@tracker_router.get("/meals")
def search_meals(query: Optional[str] = None, user: dict = Depends(get_current_user)):
    if not query or not query.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Query parameter is required")
    return {"meals": search_foods(query.strip())}


@tracker_router.post("/meals", status_code=status.HTTP_201_CREATED)
def log_meal(body: schemas.MealLog, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    entry = _log(db, "meal_log", user, body.model_dump())
    return {"message": "Meal entry added successfully", "entry": entry}


routers = [exercises_router, weights_router, tracker_router]
