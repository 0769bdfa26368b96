from flask import request, jsonify, current_app

from leqet.extensions import db
from leqet.models import MealLog, MealLogItem
from leqet.models.logs import MEAL_TYPES
from leqet.services.access import ensure, can_log_for_member, can_view_member
from leqet.services.summaries import meals_today, meals_by_date, recent_meals, parse_day, scoped_member_ids
from leqet.utils.decorators import inject_current_user
from leqet.utils.helpers import json_body, to_number, positive_id, int_arg

from . import api_bp

RECENT_MEALS_DEFAULT = 10
RECENT_MEALS_MAX = 100


@api_bp.route("/meals", methods=["POST"])
@inject_current_user
def log_meal(current_user):
    data = json_body()
    member_id = positive_id(data.get("member_id"))
    meal_type = data.get("meal_type")

    if not member_id or not meal_type:
        return jsonify({"msg": "member_id and meal_type are required"}), 400
    if meal_type not in MEAL_TYPES:
        return jsonify({"msg": f"meal_type must be one of {', '.join(MEAL_TYPES)}"}), 400

    ensure(can_log_for_member(current_user, member_id))

    try:
        meal_log = MealLog(member_id=member_id, meal_type=meal_type)
        item = MealLogItem(
            food_item_id=positive_id(data.get("food_item_id")),
            quantity=to_number(data.get("quantity"), 0),
            unit=data.get("unit") or "g",
            calories=to_number(data.get("calories"), 0),
            protein=to_number(data.get("protein"), 0),
            carbs=to_number(data.get("carbs"), 0),
            fat=to_number(data.get("fat"), 0),
        )
        meal_log.items.append(item)
        db.session.add(meal_log)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error logging meal: {e}")
        return jsonify({"msg": "Failed to log meal"}), 500

    return jsonify({"meal_log_id": meal_log.id, "item_id": item.id}), 201


@api_bp.route("/meals/today", methods=["GET"])
@inject_current_user
def todays_meals(current_user):
    member_id = positive_id(request.args.get("member_id"))
    if not member_id:
        return jsonify({"msg": "member_id is required"}), 400
    ensure(can_view_member(current_user, member_id))

    return jsonify({"meals": meals_today(member_id)}), 200


@api_bp.route("/meals/items/<int:item_id>", methods=["DELETE"])
@inject_current_user
def delete_meal_item(item_id, current_user):
    item = db.session.get(MealLogItem, item_id)
    if item is None:
        return jsonify({"msg": "Meal item not found"}), 404

    meal_log = item.meal_log
    ensure(can_log_for_member(current_user, meal_log.member_id))

    try:
        meal_log.items.remove(item)
        if not meal_log.items:
            db.session.delete(meal_log)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting meal item: {e}")
        return jsonify({"msg": "Failed to delete meal item"}), 500
    return "", 204


@api_bp.route("/meals/by-date", methods=["GET"])
@inject_current_user
def meals_for_date(current_user):
    member_id = positive_id(request.args.get("member_id"))
    if not member_id:
        return jsonify({"msg": "member_id is required"}), 400

    day = parse_day(request.args.get("date"))
    if day is None:
        return jsonify({"msg": "date must be in YYYY-MM-DD format"}), 400

    ensure(can_view_member(current_user, member_id))
    return jsonify({"meals": meals_by_date(member_id, day)}), 200


@api_bp.route("/meals/recent", methods=["GET"])
@inject_current_user
def latest_meals(current_user):
    limit = int_arg("limit", RECENT_MEALS_DEFAULT, maximum=RECENT_MEALS_MAX)
    member_ids = scoped_member_ids(current_user)
    if member_ids is None:
        # members only see their own log
        member_ids = [current_user.id]
    return jsonify({"meals": recent_meals(limit, member_ids=member_ids)}), 200
