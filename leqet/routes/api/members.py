from flask import request, jsonify, current_app

from leqet.extensions import db
from leqet.models import MemberProfile, MemberGoals, CheckIn, WeightLog, TrainerFeedback, NutritionistFeedback
from leqet.models.member_profile import profile_to_dict
from leqet.roles import Role
from leqet.schemas import ProfileSchema, CheckInSchema
from leqet.services.access import (
    ensure, can_view_member, can_log_for_member, get_member_or_none,
    is_assigned_trainer, is_assigned_nutritionist,
)
from leqet.services.nutrition import derive_energy_targets
from leqet.services.summaries import member_overview, dashboard_summary, progress_summary, clamp_summary_days
from leqet.utils.decorators import inject_current_user, roles_required
from leqet.utils.helpers import json_body, int_arg

from . import api_bp

profile_schema = ProfileSchema()
check_in_schema = CheckInSchema()

CHECK_INS_DEFAULT = 10
CHECK_INS_MAX = 50

PROFILE_FIELDS = (
    "age", "gender", "weight_kg", "height_cm", "goal", "activity_level",
    "trainer_intake", "nutrition_intake", "bmr", "tdee", "target_calories",
)
GOAL_FIELDS = ("weekly_calorie_goal", "weekly_workout_minutes", "daily_steps_goal", "daily_water_liters")


def _member_or_404(member_id):
    member = get_member_or_none(member_id)
    if member is None:
        return None, (jsonify({"msg": "Member not found"}), 404)
    return member, None


# Profile

@api_bp.route("/members/<int:member_id>/profile", methods=["GET"])
@inject_current_user
def get_profile(member_id, current_user):
    ensure(can_view_member(current_user, member_id))
    member, error = _member_or_404(member_id)
    if error:
        return error
    return jsonify({"profile": profile_to_dict(member.id, member.profile, member.goals)}), 200


@api_bp.route("/members/<int:member_id>/profile", methods=["PUT"])
@inject_current_user
def save_profile(member_id, current_user):
    ensure(can_view_member(current_user, member_id))
    member, error = _member_or_404(member_id)
    if error:
        return error

    values = profile_schema.load(json_body())

    # Energy targets the client did not send are derived from the body stats
    derived = derive_energy_targets(
        values.get("gender"), values.get("weight_kg"), values.get("height_cm"),
        values.get("age"), values.get("activity_level"), values.get("goal"),
    )
    for key, value in derived.items():
        if values.get(key) is None:
            values[key] = value
    if values.get("weekly_calorie_goal") is None and values.get("target_calories"):
        values["weekly_calorie_goal"] = values["target_calories"] * 7

    try:
        profile = member.profile or MemberProfile(user_id=member.id)
        for key in PROFILE_FIELDS:
            setattr(profile, key, values.get(key))
        profile.is_private = bool(values.get("is_private"))
        member.profile = profile

        goals = member.goals or MemberGoals(member_id=member.id)
        for key in GOAL_FIELDS:
            setattr(goals, key, values.get(key))
        member.goals = goals

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving member profile: {e}")
        return jsonify({"msg": "Failed to save member profile"}), 500

    return jsonify({"profile": profile_to_dict(member.id, member.profile, member.goals)}), 200


# Overview and summaries

@api_bp.route("/members/overview", methods=["GET"])
@roles_required(Role.TRAINER, Role.NUTRITIONIST, Role.ADMIN)
def members_overview(current_user):
    return jsonify({"members": member_overview(current_user)}), 200


@api_bp.route("/members/<int:member_id>/dashboard-summary", methods=["GET"])
@inject_current_user
def member_dashboard_summary(member_id, current_user):
    ensure(can_view_member(current_user, member_id))
    days = clamp_summary_days(request.args.get("days"))
    return jsonify(dashboard_summary(member_id, days)), 200


@api_bp.route("/members/<int:member_id>/progress-summary", methods=["GET"])
@inject_current_user
def member_progress_summary(member_id, current_user):
    ensure(can_view_member(current_user, member_id))
    _, error = _member_or_404(member_id)
    if error:
        return error
    return jsonify(progress_summary(member_id)), 200


# Check-ins

@api_bp.route("/members/<int:member_id>/check-ins", methods=["GET"])
@inject_current_user
def list_check_ins(member_id, current_user):
    ensure(can_view_member(current_user, member_id))
    limit = int_arg("limit", CHECK_INS_DEFAULT, maximum=CHECK_INS_MAX)
    rows = (
        CheckIn.query.filter_by(member_id=member_id)
        .order_by(CheckIn.logged_at.desc(), CheckIn.id.desc())
        .limit(limit)
        .all()
    )
    return jsonify({"checkIns": [row.to_dict() for row in rows]}), 200


@api_bp.route("/members/<int:member_id>/check-ins", methods=["POST"])
@inject_current_user
def create_check_in(member_id, current_user):
    ensure(can_log_for_member(current_user, member_id))
    _, error = _member_or_404(member_id)
    if error:
        return error

    values = check_in_schema.load(json_body())
    try:
        check_in = CheckIn(member_id=member_id, **values)
        db.session.add(check_in)
        if values.get("weight_kg"):
            db.session.add(WeightLog(member_id=member_id, weight_kg=values["weight_kg"]))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating check-in: {e}")
        return jsonify({"msg": "Failed to create check-in"}), 500

    return jsonify({"checkIn": check_in.to_dict()}), 201


# Coach feedback

def _feedback_message():
    message = json_body().get("message")
    if not isinstance(message, str) or not message.strip():
        return None
    return message.strip()


@api_bp.route("/members/<int:member_id>/trainer-feedback", methods=["POST"])
@roles_required(Role.TRAINER, Role.ADMIN)
def create_trainer_feedback(member_id, current_user):
    message = _feedback_message()
    if not message:
        return jsonify({"msg": "Message is required"}), 400
    if current_user.role == Role.TRAINER.value:
        ensure(is_assigned_trainer(current_user.id, member_id))
    _, error = _member_or_404(member_id)
    if error:
        return error

    try:
        feedback = TrainerFeedback(trainer_id=current_user.id, member_id=member_id, content=message)
        db.session.add(feedback)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating trainer feedback: {e}")
        return jsonify({"msg": "Failed to create trainer feedback"}), 500

    return jsonify({"id": feedback.id, "created_at": feedback.created_at.isoformat()}), 201


@api_bp.route("/members/<int:member_id>/nutritionist-feedback", methods=["POST"])
@roles_required(Role.NUTRITIONIST, Role.ADMIN)
def create_nutritionist_feedback(member_id, current_user):
    message = _feedback_message()
    if not message:
        return jsonify({"msg": "Message is required"}), 400
    if current_user.role == Role.NUTRITIONIST.value:
        ensure(is_assigned_nutritionist(current_user.id, member_id))
    _, error = _member_or_404(member_id)
    if error:
        return error

    try:
        feedback = NutritionistFeedback(nutritionist_id=current_user.id, member_id=member_id, content=message)
        db.session.add(feedback)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating nutritionist feedback: {e}")
        return jsonify({"msg": "Failed to create nutritionist feedback"}), 500

    return jsonify({"id": feedback.id, "created_at": feedback.created_at.isoformat()}), 201
