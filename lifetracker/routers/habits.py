import logging
from datetime import timedelta

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status
from pymongo import DESCENDING
from pymongo.database import Database

from lifetracker import schemas
from lifetracker.crud import Resource, jsonable, register_routes
from lifetracker.database import get_db, transaction, utcnow
from lifetracker.deps import get_current_user

logger = logging.getLogger(__name__)

habits = Resource(
    collection="habit",
    label="Habit",
    create_schema=schemas.Habit,
    update_schema=schemas.HabitUpdate,
    sort=[("created_at", DESCENDING)],
    base_filter={"is_active": True},
    create_defaults={"is_active": True},
    summary_field="name",
)

router = APIRouter(prefix="/api/habits", tags=["habits"])


def find_owned_habits(db: Database, habit_ids, user: dict) -> list:
    """All of ``habit_ids`` owned by the user, 404 if any is missing."""
    wanted = {ObjectId(i) for i in habit_ids}
    found = list(db["habit"].find({"_id": {"$in": list(wanted)}, "user_id": user["id"]}))
    if len(found) != len(wanted):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Some habits not found or do not belong to you",
        )
    return found


@router.post("/bulk-delete")
def bulk_delete(body: schemas.HabitBulkDelete, user: dict = Depends(get_current_user),
                db: Database = Depends(get_db)):
    found = find_owned_habits(db, body.habit_ids, user)
    object_ids = [h["_id"] for h in found]
    names = [h["name"] for h in found]

    if not body.hard_delete:
        result = db["habit"].update_many(
            {"_id": {"$in": object_ids}, "user_id": user["id"]},
            {"$set": {"is_active": False, "updated_at": utcnow()}},
        )
        logger.info("Habits deactivated: %d for user %s", result.modified_count, user["username"])
        return {
            "message": "Habits deactivated successfully",
            "deactivatedHabits": names,
            "deactivatedCount": result.modified_count,
        }

    with transaction(db) as session:
        tracking = db["habit_tracker"].delete_many(
            {"user_id": user["id"], "habit_id": {"$in": [str(i) for i in object_ids]}}, session=session
        )
        removed = db["habit"].delete_many({"_id": {"$in": object_ids}, "user_id": user["id"]}, session=session)
    logger.info("Habits deleted: %d (%d tracking rows)", removed.deleted_count, tracking.deleted_count)
    return {
        "message": "Habits and all tracking data deleted permanently",
        "deletedHabits": names,
        "deletedHabitsCount": removed.deleted_count,
        "deletedTrackingRecords": tracking.deleted_count,
    }


@router.post("/cleanup")
def cleanup(body: schemas.HabitCleanup, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    if body.habit_ids:
        targets = find_owned_habits(db, body.habit_ids, user)
    else:
        targets = list(db["habit"].find({"user_id": user["id"]}))

    if not targets:
        return {"message": "No habits found to clean up", "cleanedRecords": 0}

    now = utcnow()
    older_than = now - timedelta(days=body.older_than_days)
    keep_after = now - timedelta(days=body.keep_last_days)
    # Rows must be past both cut-offs to go.
    cutoff = min(older_than, keep_after)

    result = db["habit_tracker"].delete_many({
        "user_id": user["id"],
        "habit_id": {"$in": [str(h["_id"]) for h in targets]},
        "date": {"$lt": cutoff},
    })
    logger.info("Habit tracking cleanup: %d rows for user %s", result.deleted_count, user["username"])
    return {
        "message": "Old tracking data cleaned up successfully",
        "cleanedRecords": result.deleted_count,
        "habitsAffected": len(targets),
        "cutoffDate": jsonable(older_than),
        "keptDataAfter": jsonable(keep_after),
    }


@router.delete("/{habit_id}")
def delete_habit(habit_id: str, hard: bool = False, user: dict = Depends(get_current_user),
                 db: Database = Depends(get_db)):
    habit = habits.find_owned(db, habit_id, user)

    if not hard:
        db["habit"].update_one({"_id": habit["_id"]}, {"$set": {"is_active": False, "updated_at": utcnow()}})
        logger.info("Habit deactivated: %s", habit_id)
        return {"message": "Habit deactivated successfully", "deactivatedHabit": habit["name"]}

    with transaction(db) as session:
        tracking = db["habit_tracker"].delete_many(
            {"user_id": user["id"], "habit_id": str(habit["_id"])}, session=session
        )
        db["habit"].delete_one({"_id": habit["_id"]}, session=session)
    logger.info("Habit deleted: %s (%d tracking rows)", habit_id, tracking.deleted_count)
    return {
        "message": "Habit and all tracking data deleted permanently",
        "deletedHabit": habit["name"],
        "deletedTrackingRecords": tracking.deleted_count,
    }


register_routes(router, habits, skip=("delete",))
