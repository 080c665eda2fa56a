"""Food search for the meal quick log: Edamam when configured, a small built-in list otherwise."""
import logging
from typing import List, Optional

import requests

from lifetracker import config

logger = logging.getLogger(__name__)

EDAMAM_URL = "https://api.edamam.com/api/food-database/v2/parser"
MAX_RESULTS = 10

BUILTIN_FOODS = [
    {"id": "1", "title": "Grilled Chicken Breast", "calories": 165, "protein": 31, "carbs": 0, "fat": 3.6, "fiber": 0},
    {"id": "2", "title": "Salmon Fillet", "calories": 208, "protein": 25, "carbs": 0, "fat": 12, "fiber": 0},
    {"id": "3", "title": "Brown Rice", "calories": 111, "protein": 2.6, "carbs": 23, "fat": 0.9, "fiber": 1.8},
    {"id": "4", "title": "Broccoli", "calories": 34, "protein": 2.8, "carbs": 7, "fat": 0.4, "fiber": 2.6},
    {"id": "5", "title": "Sweet Potato", "calories": 86, "protein": 1.6, "carbs": 20, "fat": 0.1, "fiber": 3},
    {"id": "6", "title": "Greek Yogurt", "calories": 59, "protein": 10, "carbs": 3.6, "fat": 0.5, "fiber": 0},
    {"id": "7", "title": "Oatmeal", "calories": 68, "protein": 2.4, "carbs": 12, "fat": 1.4, "fiber": 1.7},
    {"id": "8", "title": "Banana", "calories": 89, "protein": 1.1, "carbs": 23, "fat": 0.3, "fiber": 2.6},
    {"id": "9", "title": "Eggs", "calories": 74, "protein": 6.3, "carbs": 0.6, "fat": 5.3, "fiber": 0},
    {"id": "10", "title": "Quinoa", "calories": 120, "protein": 4.4, "carbs": 22, "fat": 1.9, "fiber": 2.8},
]


def builtin_search(query: str) -> List[dict]:
    needle = query.lower()
    return [food for food in BUILTIN_FOODS if needle in food["title"].lower()]


def search_foods(query: str, app_id: Optional[str] = None, app_key: Optional[str] = None) -> List[dict]:
    app_id = app_id or config.EDAMAM_APP_ID
    app_key = app_key or config.EDAMAM_APP_KEY
    if not app_id or not app_key:
        return builtin_search(query)

    try:
        response = requests.get(
            EDAMAM_URL,
            params={"app_id": app_id, "app_key": app_key, "ingr": query, "lang": "en"},
            timeout=10,
        )
        response.raise_for_status()
        hints = response.json().get("hints") or []
    except (requests.RequestException, ValueError):
        logger.exception("Food search failed for %r, using built-in list", query)
        return builtin_search(query)

    foods = []
    for hint in hints[:MAX_RESULTS]:
        food = hint.get("food", {})
        nutrients = food.get("nutrients", {})
        foods.append({
            "id": food.get("foodId"),
            "title": food.get("label"),
            "calories": round(nutrients.get("ENERC_KCAL") or 0),
            "protein": round(nutrients.get("PROCNT") or 0, 1),
            "carbs": round(nutrients.get("CHOCDF") or 0, 1),
            "fat": round(nutrients.get("FAT") or 0, 1),
            "fiber": round(nutrients.get("FIBTG") or 0, 1),
        })
    return foods
