import logging
from collections import defaultdict
from datetime import timedelta
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pymongo import ReturnDocument
from pymongo.database import Database

from lifetracker.crud import query_day, serialize
from lifetracker.database import get_db, utcnow
from lifetracker.deps import get_current_user
from lifetracker.schemas import HabitTracker
from lifetracker.stats import HABIT_MISSING_DAY, date_window, day_of, fill_window, habit_statistics
from lifetracker.validation import day_start

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/habit-tracker", tags=["habit-tracker"])


@router.get("")
def tracking_grid(
    days: int = Query(30, ge=1, le=365),
    habit_id: Optional[str] = Query(None, alias="habitId"),
    date: Optional[str] = None,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Every active habit (or just ``habitId``) crossed with the last ``days`` days."""
    habits = list(db["habit"].find({"user_id": user["id"], "is_active": True}))
    if not habits:
        return {"habits": [], "trackingData": [], "statistics": {}}

    if habit_id:
        habits = [h for h in habits if str(h["_id"]) == habit_id]
        if not habits:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")

    window = date_window(days, query_day(date) if date else None)
    records = defaultdict(dict)
    for rec in db["habit_tracker"].find({
        "user_id": user["id"],
        "habit_id": {"$in": [str(h["_id"]) for h in habits]},
        "date": {"$gte": day_start(window[0]), "$lt": day_start(window[-1] + timedelta(days=1))},
    }):
        records[rec["habit_id"]][day_of(rec["date"])] = {
            "completed": rec["completed"],
            "count": rec["count"],
            "notes": rec.get("notes", ""),
            "id": str(rec["_id"]),
        }

    rows = []
    tracking_data = []
    for habit in habits:
        key = str(habit["_id"])
        for row in fill_window(window, records[key], HABIT_MISSING_DAY):
            rows.append({**row, "habit_id": key})
            tracking_data.append({
                "habitId": key,
                "habitName": habit["name"],
                "habitColor": habit.get("color"),
                "date": row["date"].isoformat(),
                "dayOfWeek": row["date"].strftime("%a"),
                "completed": row["completed"],
                "count": row["count"],
                "targetCount": habit.get("target_count", 1),
                "notes": row["notes"],
                "id": row["id"],
            })

    return {
        "habits": [serialize(h) for h in habits],
        "trackingData": tracking_data,
        "statistics": habit_statistics(habits, rows, days),
    }


@router.post("")
def track_habit(body: HabitTracker, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    habit = db["habit"].find_one({"_id": ObjectId(body.habit_id), "user_id": user["id"], "is_active": True})
    if not habit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")

    now = utcnow()
    record = db["habit_tracker"].find_one_and_update(
        {"user_id": user["id"], "habit_id": str(habit["_id"]), "date": day_start(body.date)},
        {
            "$set": {
                "completed": body.completed,
                "count": body.count if body.completed else 0,
                "notes": body.notes,
                "updated_at": now,
            },
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    logger.info("Habit tracked: %s on %s (completed=%s)", habit["name"], body.date, body.completed)
    return {
        "habitId": str(habit["_id"]),
        "habitName": habit["name"],
        "date": body.date.isoformat(),
        "completed": record["completed"],
        "count": record["count"],
        "notes": record["notes"],
        "id": str(record["_id"]),
    }
