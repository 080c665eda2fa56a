"""
Derived statistics for the daily trackers.

Everything here is a pure function over rows that were already fetched for a
fixed window of days, oldest first. Days without a stored row are filled from a
named default before any statistic is computed.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from lifetracker import config

# A habit day without a record counts as not done.
HABIT_MISSING_DAY = {"completed": False, "count": 0, "notes": "", "id": None}

# A smoking day without a record is never smoke-free. "pessimistic" also
# assumes one cigarette was smoked.
SMOKING_GAP_POLICIES = {
    "pessimistic": {"smoke_free": False, "cigarettes_smoked": 1},
    "neutral": {"smoke_free": False, "cigarettes_smoked": 0},
}


def smoking_missing_day(policy: Optional[str] = None) -> dict:
    policy = policy or config.SMOKING_GAP_POLICY
    if policy not in SMOKING_GAP_POLICIES:
        raise ValueError(f"Unknown smoking gap policy: {policy}")
    return {**SMOKING_GAP_POLICIES[policy], "notes": "", "id": None}


def today() -> date:
    return datetime.now(timezone.utc).date()


def date_window(days: int, end: Optional[date] = None) -> List[date]:
    """The ``days`` calendar days ending at ``end`` (today by default), oldest first."""
    end = end or today()
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def day_of(value) -> date:
    """Calendar day (UTC) of a stored datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: float, whole: float) -> int:
    if whole <= 0:
        return 0
    return int(round_half_up(part * 100 / whole))


def average(total: float, count: int) -> float:
    """Mean rounded to one decimal place, 0 for an empty window."""
    if count <= 0:
        return 0
    return round_half_up(total / count, 1)


def current_streak(flags: Sequence[bool]) -> int:
    """Consecutive True values ending at the newest day."""
    streak = 0
    for flag in reversed(flags):
        if not flag:
            break
        streak += 1
    return streak


def longest_streak(flags: Iterable[bool]) -> int:
    best = run = 0
    for flag in flags:
        run = run + 1 if flag else 0
        best = max(best, run)
    return best


def fill_window(window: Sequence[date], records: Dict[date, dict], default: dict) -> List[dict]:
    """One row per day in ``window``: the stored record or a copy of ``default``."""
    rows = []
    for day in window:
        record = records.get(day)
        rows.append({"date": day, **(record if record is not None else default)})
    return rows


def habit_statistics(habits: Sequence[dict], rows: Sequence[dict], days: int) -> dict:
    """Completion statistics across several habits.

    ``rows`` carry ``habit_id``, ``completed`` and ``count``. The denominator is
    ``days * len(habits)``: every habit contributes one slot per day.
    """
    total_days = days * len(habits)
    completed_days = sum(1 for r in rows if r["completed"])
    total_count = sum(r["count"] for r in rows)

    quit_ids = {str(h["_id"]) for h in habits if h.get("habit_type") == "quit"}
    quit_days = days * len(quit_ids)
    quit_completed = sum(1 for r in rows if r["completed"] and r["habit_id"] in quit_ids)

    return {
        "totalHabits": len(habits),
        "totalDays": total_days,
        "completedDays": completed_days,
        "completionRate": percentage(completed_days, total_days),
        "totalCount": total_count,
        "averageCount": average(total_count, total_days),
        "quitHabits": len(quit_ids),
        "quitHabitDays": quit_days,
        "quitHabitCompletedDays": quit_completed,
        "quitHabitSuccessRate": percentage(quit_days - quit_completed, quit_days),
    }


def smoking_statistics(rows: Sequence[dict]) -> dict:
    total_days = len(rows)
    flags = [r["smoke_free"] for r in rows]
    smoke_free = sum(1 for f in flags if f)
    total_cigarettes = sum(r["cigarettes_smoked"] or 0 for r in rows)
    smoking_days = [r["cigarettes_smoked"] for r in rows if not r["smoke_free"] and r["cigarettes_smoked"] > 0]

    return {
        "totalDays": total_days,
        "smokeFreeCount": smoke_free,
        "smokedCount": total_days - smoke_free,
        "successRate": percentage(smoke_free, total_days),
        "currentStreak": current_streak(flags),
        "longestStreak": longest_streak(flags),
        "totalCigarettes": total_cigarettes,
        "averageCigarettesPerDay": average(total_cigarettes, total_days),
        "averageCigarettesOnSmokingDays": average(sum(smoking_days), len(smoking_days)),
    }
