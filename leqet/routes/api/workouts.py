from flask import request, jsonify, current_app
from sqlalchemy import func

from leqet.extensions import db
from leqet.models import Exercise, WorkoutLog, WorkoutLogItem
from leqet.services.access import ensure, can_log_for_member, can_view_member
from leqet.services.summaries import workouts_today
from leqet.services.workouts import infer_exercise_category
from leqet.utils.decorators import inject_current_user
from leqet.utils.helpers import json_body, to_number, positive_id

from . import api_bp


def _resolve_exercise(name, calories_burned, duration):
    """Match an exercise by name (case-insensitive) or add it to the catalogue."""
    existing = (
        Exercise.query.filter(func.lower(Exercise.name) == name.lower())
        .order_by(Exercise.id.asc())
        .first()
    )
    if existing:
        return existing.id

    exercise = Exercise(
        name=name,
        category=infer_exercise_category(name),
        calories_per_min=calories_burned / duration if duration > 0 else 0,
    )
    db.session.add(exercise)
    db.session.flush()
    return exercise.id


@api_bp.route("/workouts", methods=["POST"])
@inject_current_user
def log_workout(current_user):
    data = json_body()
    member_id = positive_id(data.get("member_id"))
    if not member_id:
        return jsonify({"msg": "member_id is required"}), 400

    ensure(can_log_for_member(current_user, member_id))

    duration = to_number(data.get("duration_minutes"), 0)
    if duration <= 0:
        return jsonify({"msg": "duration_minutes must be > 0"}), 400

    calories_burned = to_number(data.get("calories_burned"), 0)
    if calories_burned < 0:
        calories_burned = 0

    weight_used = to_number(data.get("weight_used"))
    if weight_used is not None and weight_used < 0:
        return jsonify({"msg": "weight_used must be >= 0"}), 400
    weight_unit = data.get("weight_unit").strip() if isinstance(data.get("weight_unit"), str) else None

    exercise_id = positive_id(data.get("exercise_id"))
    exercise_name = data.get("exercise_name").strip() if isinstance(data.get("exercise_name"), str) else ""
    if not exercise_id and not exercise_name:
        return jsonify({"msg": "exercise_id or exercise_name is required"}), 400

    try:
        if not exercise_id:
            exercise_id = _resolve_exercise(exercise_name, calories_burned, duration)

        workout_log = WorkoutLog(member_id=member_id)
        item = WorkoutLogItem(
            exercise_id=exercise_id,
            duration_minutes=duration,
            calories_burned=calories_burned,
            weight_used=weight_used,
            weight_unit=weight_unit or None,
        )
        workout_log.items.append(item)
        db.session.add(workout_log)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error logging workout: {e}")
        return jsonify({"msg": "Failed to log workout"}), 500

    return jsonify({"workout_log_id": workout_log.id, "item_id": item.id}), 201


@api_bp.route("/workouts/today", methods=["GET"])
@inject_current_user
def todays_workouts(current_user):
    member_id = positive_id(request.args.get("member_id"))
    if not member_id:
        return jsonify({"msg": "member_id is required"}), 400
    ensure(can_view_member(current_user, member_id))

    return jsonify({"workouts": workouts_today(member_id)}), 200


@api_bp.route("/workouts/items/<int:item_id>", methods=["DELETE"])
@inject_current_user
def delete_workout_item(item_id, current_user):
    item = db.session.get(WorkoutLogItem, item_id)
    if item is None:
        return jsonify({"msg": "Workout item not found"}), 404

    workout_log = item.workout_log
    ensure(can_log_for_member(current_user, workout_log.member_id))

    try:
        workout_log.items.remove(item)
        if not workout_log.items:
            db.session.delete(workout_log)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting workout item: {e}")
        return jsonify({"msg": "Failed to delete workout item"}), 500
    return "", 204
