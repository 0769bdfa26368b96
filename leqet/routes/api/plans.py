from flask import jsonify, current_app

from leqet.extensions import db
from leqet.models import DietPlan, WorkoutPlan
from leqet.roles import Role
from leqet.services.access import ensure, can_access_diet, can_access_workout, get_member_or_none
from leqet.services.plans import (
    PlanValidationError, build_manual_diet_plan, build_manual_workout_plan,
    generate_default_diet_plan, generate_default_workout_plan,
    active_plan, serialize_diet_plan, serialize_workout_plan,
)
from leqet.utils.decorators import inject_current_user, roles_required
from leqet.utils.helpers import json_body

from . import api_bp


def _author(user, role):
    """The coach recorded on a plan; admins and members leave it empty."""
    return user if user.role == role.value else None


def _save_plan(builder, member_id, author, payload, action):
    if get_member_or_none(member_id) is None:
        return jsonify({"msg": "Member not found"}), 404

    try:
        plan = builder(member_id, author, payload) if payload is not None else builder(member_id, author)
        db.session.commit()
    except PlanValidationError as e:
        db.session.rollback()
        return jsonify({"msg": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving plan ({action}): {e}")
        return jsonify({"msg": f"Failed to {action}"}), 500

    current_app.logger.info(f"Plan {plan.id} saved for member {member_id}")
    return jsonify({"id": plan.id}), 201


@api_bp.route("/members/<int:member_id>/diet-plan", methods=["GET"])
@inject_current_user
def get_diet_plan(member_id, current_user):
    ensure(can_access_diet(current_user, member_id))
    return jsonify({"plan": serialize_diet_plan(active_plan(DietPlan, member_id))}), 200


@api_bp.route("/members/<int:member_id>/workout-plan", methods=["GET"])
@inject_current_user
def get_workout_plan(member_id, current_user):
    ensure(can_access_workout(current_user, member_id))
    return jsonify({"plan": serialize_workout_plan(active_plan(WorkoutPlan, member_id))}), 200


@api_bp.route("/members/<int:member_id>/diet-plan/manual", methods=["POST"])
@roles_required(Role.NUTRITIONIST, Role.ADMIN)
def create_manual_diet_plan(member_id, current_user):
    ensure(can_access_diet(current_user, member_id))
    return _save_plan(
        build_manual_diet_plan, member_id, _author(current_user, Role.NUTRITIONIST),
        json_body(), "create diet plan",
    )


@api_bp.route("/members/<int:member_id>/workout-plan/manual", methods=["POST"])
@roles_required(Role.TRAINER, Role.ADMIN)
def create_manual_workout_plan(member_id, current_user):
    ensure(can_access_workout(current_user, member_id))
    return _save_plan(
        build_manual_workout_plan, member_id, _author(current_user, Role.TRAINER),
        json_body(), "create workout plan",
    )


@api_bp.route("/members/<int:member_id>/diet-plan/generate-default", methods=["POST"])
@inject_current_user
def generate_diet_plan(member_id, current_user):
    ensure(can_access_diet(current_user, member_id))
    return _save_plan(
        generate_default_diet_plan, member_id, _author(current_user, Role.NUTRITIONIST),
        None, "generate diet plan",
    )


@api_bp.route("/members/<int:member_id>/workout-plan/generate-default", methods=["POST"])
@inject_current_user
def generate_workout_plan(member_id, current_user):
    ensure(can_access_workout(current_user, member_id))
    return _save_plan(
        generate_default_workout_plan, member_id, _author(current_user, Role.TRAINER),
        None, "generate workout plan",
    )
