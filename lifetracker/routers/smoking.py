import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from lifetracker.crud import query_day
from lifetracker.database import get_db, utcnow
from lifetracker.deps import get_current_user
from lifetracker.schemas import SmokingTracker
from lifetracker.stats import date_window, day_of, fill_window, smoking_missing_day, smoking_statistics
from lifetracker.validation import day_start

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/smoking-tracker", tags=["smoking-tracker"])


@router.get("")
def smoking_grid(
    days: int = Query(30, ge=1, le=365),
    date: Optional[str] = None,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    window = date_window(days, query_day(date) if date else None)
    cursor = db["smoking_tracker"].find({
        "user_id": user["id"],
        "date": {"$gte": day_start(window[0]), "$lt": day_start(window[-1] + timedelta(days=1))},
    }).sort("date", ASCENDING)
    records = {
        day_of(rec["date"]): {
            "smoke_free": rec["smoke_free"],
            "cigarettes_smoked": rec.get("cigarettes_smoked") or 0,
            "notes": rec.get("notes", ""),
            "id": str(rec["_id"]),
        }
        for rec in cursor
    }

    rows = fill_window(window, records, smoking_missing_day())
    tracking_data = [
        {
            "date": row["date"].isoformat(),
            "dayOfWeek": row["date"].strftime("%a"),
            "smokeFree": row["smoke_free"],
            "cigarettesSmoked": row["cigarettes_smoked"],
            "notes": row["notes"],
            "id": row["id"],
        }
        for row in rows
    ]
    return {"trackingData": tracking_data, "stats": smoking_statistics(rows)}


@router.post("")
def track_day(body: SmokingTracker, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    now = utcnow()
    record = db["smoking_tracker"].find_one_and_update(
        {"user_id": user["id"], "date": day_start(body.date)},
        {
            "$set": {
                "smoke_free": body.smoke_free,
                "cigarettes_smoked": 0 if body.smoke_free else body.cigarettes_smoked,
                "notes": body.notes,
                "updated_at": now,
            },
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    logger.info(
        "Smoking tracker updated: %s smokeFree=%s cigarettes=%d for user %s",
        body.date, record["smoke_free"], record["cigarettes_smoked"], user["username"],
    )
    return {
        "date": body.date.isoformat(),
        "smokeFree": record["smoke_free"],
        "cigarettesSmoked": record["cigarettes_smoked"],
        "notes": record["notes"],
        "id": str(record["_id"]),
    }
