"""Edamam and API Ninjas lookups used when the local catalogue has no match."""
import requests
from flask import current_app
from sqlalchemy import func

from leqet.extensions import db
from leqet.models import FoodItem, Exercise
from leqet.services.workouts import estimate_calories_per_minute, infer_exercise_category

EDAMAM_PARSER_URL = "https://api.edamam.com/api/food-database/v2/parser"
API_NINJAS_EXERCISES_URL = "https://api.api-ninjas.com/v1/exercises"
CACHED_RESULTS = 5


class ExternalApiError(RuntimeError):
    pass


def _clean(value):
    # .env values sometimes keep their surrounding quotes
    return value.strip().strip('"') if isinstance(value, str) else value


def _timeout():
    return current_app.config.get("EXTERNAL_API_TIMEOUT", 10)


def search_edamam_foods(query):
    app_id = _clean(current_app.config.get("EDAMAM_APP_ID"))
    app_key = _clean(current_app.config.get("EDAMAM_APP_KEY"))
    if not app_id or not app_key:
        current_app.logger.warning("Edamam API credentials not configured")
        return []

    try:
        response = requests.get(
            EDAMAM_PARSER_URL,
            params={"app_id": app_id, "app_key": app_key, "ingr": query, "nutrition-type": "logging"},
            timeout=_timeout(),
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise ExternalApiError(f"Edamam API error: {e}") from e

    foods = []
    for hint in data.get("hints") or []:
        food = hint.get("food") or {}
        nutrients = food.get("nutrients") or {}
        foods.append({
            "id": f"edamam-{food.get('foodId')}",
            "name": food.get("label") or "",
            "category": "",
            "calories": nutrients.get("ENERC_KCAL") or 0,
            "protein": nutrients.get("PROCNT") or 0,
            "carbs": nutrients.get("CHOCDF") or 0,
            "fat": nutrients.get("FAT") or 0,
            "source": "edamam",
        })
    return foods


def search_api_ninjas_exercises(query):
    api_key = _clean(current_app.config.get("API_NINJAS_KEY"))
    if not api_key:
        current_app.logger.warning("API Ninjas key not configured")
        return []

    try:
        response = requests.get(
            API_NINJAS_EXERCISES_URL,
            params={"name": query},
            headers={"X-Api-Key": api_key},
            timeout=_timeout(),
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise ExternalApiError(f"Exercise API error: {e}") from e

    return [
        {
            "id": f"api-{index}",
            "name": ex.get("name") or "",
            "description": ex.get("instructions") or "",
            "caloriesPerMinute": estimate_calories_per_minute(ex),
            "source": "api-ninjas",
            "type": ex.get("type"),
            "muscle": ex.get("muscle"),
            "equipment": ex.get("equipment"),
            "difficulty": ex.get("difficulty"),
        }
        for index, ex in enumerate(data or [])
    ]


def cache_foods(foods):
    """Store the first few external results locally, skipping names already present."""
    added = 0
    try:
        for food in foods[:CACHED_RESULTS]:
            name = (food.get("name") or "").strip()
            if not name or FoodItem.query.filter(func.lower(FoodItem.name) == name.lower()).first():
                continue
            db.session.add(FoodItem(
                name=name,
                calories=food.get("calories") or 0,
                protein=food.get("protein") or 0,
                carbs=food.get("carbs") or 0,
                fat=food.get("fat") or 0,
                is_local=False,
                source_api=food.get("source"),
            ))
            added += 1
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving foods to local DB: {e}")
        return 0
    return added


def cache_exercises(exercises):
    added = 0
    try:
        for ex in exercises[:CACHED_RESULTS]:
            name = (ex.get("name") or "").strip()
            if not name or Exercise.query.filter(func.lower(Exercise.name) == name.lower()).first():
                continue
            db.session.add(Exercise(
                name=name,
                description=ex.get("description") or "",
                category=infer_exercise_category(name),
                calories_per_min=ex.get("caloriesPerMinute") or 0,
            ))
            added += 1
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving exercises to local DB: {e}")
        return 0
    return added
