from flask import request, jsonify, current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from leqet.extensions import db
from leqet.models import FoodItem, Exercise
from leqet.schemas import FoodSchema
from leqet.services.external import (
    ExternalApiError, search_edamam_foods, search_api_ninjas_exercises, cache_foods, cache_exercises,
)
from leqet.services.nutrition import Food, Ingredient, save_custom_food, NutritionError
from leqet.utils.decorators import inject_current_user
from leqet.utils.helpers import json_body, positive_id, to_number

from . import api_bp

food_schema = FoodSchema()

FOOD_LIST_LIMIT = 50
FOOD_SEARCH_LIMIT = 20
EXERCISE_LIST_LIMIT = 100
EXERCISE_SEARCH_LIMIT = 20


def _ingredient(entry):
    if not isinstance(entry, dict):
        raise NutritionError("Each ingredient must be an object")
    food_id = positive_id(entry.get("foodId"))
    if food_id:
        row = db.session.get(FoodItem, food_id)
        if row is None:
            raise NutritionError(f"Food {food_id} not found")
        food = Food.from_mapping(row.to_dict())
    else:
        food = Food.from_mapping(entry.get("food") or entry)
    return Ingredient(food=food, quantity_grams=to_number(entry.get("quantity"), 0))


def _composed_values(name, entries):
    """Per-100g values of a food mixed from catalogue or inline ingredients."""
    food = save_custom_food(name, [_ingredient(entry) for entry in entries])
    return {
        "category": food.category,
        "calories": food.calories,
        "protein": food.protein,
        "carbs": food.carbs,
        "fat": food.fat,
        "fiber": food.fiber,
    }


def _search_query():
    return (request.args.get("q") or "").strip()


@api_bp.route("/foods", methods=["GET"])
def list_foods():
    q = _search_query()
    if not q:
        foods = FoodItem.query.order_by(FoodItem.name).limit(FOOD_LIST_LIMIT).all()
        return jsonify({"foods": [food.to_dict() for food in foods]}), 200

    local = (
        FoodItem.query.filter(FoodItem.name.ilike(f"%{q}%"))
        .order_by(FoodItem.name)
        .limit(FOOD_SEARCH_LIMIT)
        .all()
    )
    if local:
        return jsonify({"foods": [dict(food.to_dict(), source="local") for food in local]}), 200

    try:
        foods = search_edamam_foods(q)
    except ExternalApiError as e:
        current_app.logger.error(f"Food search error: {e}")
        return jsonify({"msg": "Failed to search for foods"}), 500

    if foods:
        cache_foods(foods)
    return jsonify({"foods": foods}), 200


@api_bp.route("/foods", methods=["POST"])
@inject_current_user
def create_food(current_user):
    data = json_body()
    if not isinstance(data.get("name"), str) or not data["name"].strip():
        return jsonify({"msg": "name is required"}), 400

    values = food_schema.load(data)
    if isinstance(data.get("ingredients"), list):
        values.update(_composed_values(values["name"], data["ingredients"]))

    if FoodItem.query.filter(func.lower(FoodItem.name) == values["name"].lower()).first():
        return jsonify({"msg": "A food with this name already exists"}), 409

    try:
        food = FoodItem(is_local=True, **values)
        db.session.add(food)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"msg": "A food with this name already exists"}), 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating food item: {e}")
        return jsonify({"msg": "Failed to create food item"}), 500

    current_app.logger.info(f"Food item {food.id} created by user {current_user.id}")
    return jsonify({"id": food.id}), 201


@api_bp.route("/exercises", methods=["GET"])
def list_exercises():
    exercises = Exercise.query.order_by(Exercise.name).limit(EXERCISE_LIST_LIMIT).all()
    return jsonify({"exercises": [ex.to_dict() for ex in exercises]}), 200


@api_bp.route("/exercises/search", methods=["GET"])
def search_exercises():
    q = _search_query()
    if not q:
        return jsonify({"msg": "Search query is required"}), 400

    local = (
        Exercise.query.filter(Exercise.name.ilike(f"%{q}%"))
        .order_by(Exercise.name)
        .limit(EXERCISE_SEARCH_LIMIT)
        .all()
    )
    if local:
        return jsonify([dict(ex.to_dict(), source="local") for ex in local]), 200

    try:
        exercises = search_api_ninjas_exercises(q)
    except ExternalApiError as e:
        current_app.logger.error(f"Exercise search error: {e}")
        return jsonify({"msg": "Failed to search for exercises"}), 500

    if exercises:
        cache_exercises(exercises)
    return jsonify(exercises), 200
