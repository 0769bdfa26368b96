from datetime import datetime

from flask import jsonify, current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from leqet.extensions import db
from leqet.models import (
    User, TrainerAssignment, NutritionistAssignment, DietPlan, WorkoutPlan,
    TrainerFeedback, NutritionistFeedback, ScheduleSession, PlanMessage,
)
from leqet.roles import Role
from leqet.schemas import UserSchema, InviteUserSchema, UpdateUserSchema
from leqet.services.maintenance import write_system_log
from leqet.utils.decorators import roles_required
from leqet.utils.helpers import json_body

from . import admin_bp

user_schema = UserSchema()
users_schema = UserSchema(many=True)
invite_schema = InviteUserSchema()
update_schema = UpdateUserSchema()

# payload key -> (assignment model, coach column, coach role)
ASSIGNMENTS = {
    "trainerId": (TrainerAssignment, "trainer_id", Role.TRAINER),
    "nutritionistId": (NutritionistAssignment, "nutritionist_id", Role.NUTRITIONIST),
}


@admin_bp.route("/users/invite", methods=["POST"])
@roles_required(Role.ADMIN)
def invite_user(current_user):
    data = json_body()
    if not data.get("full_name") or not data.get("email") or not data.get("role"):
        return jsonify({"msg": "full_name, email and role are required"}), 400

    values = invite_schema.load(data)
    if User.query.filter(func.lower(User.email) == values["email"]).first():
        return jsonify({"msg": "A user with this email already exists"}), 409

    try:
        user = User(status="pending", **values)
        db.session.add(user)
        write_system_log("info", f"User {values['email']} invited as {values['role']} by admin {current_user.id}")
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"msg": "A user with this email already exists"}), 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error inviting user: {e}")
        return jsonify({"msg": "Failed to invite user"}), 500

    # No OTP here; the invitee requests one when ready to activate
    return jsonify({"id": user.id}), 201


@admin_bp.route("/users", methods=["GET"])
@roles_required(Role.ADMIN)
def list_users(current_user):
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify(users_schema.dump(users)), 200


@admin_bp.route("/users/<int:user_id>", methods=["GET"])
@roles_required(Role.ADMIN)
def get_user(user_id, current_user):
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"msg": "User not found"}), 404
    return jsonify(user_schema.dump(user)), 200


def _apply_assignment(user, key, coach_id):
    model, column, coach_role = ASSIGNMENTS[key]
    existing = db.session.get(model, user.id)

    if coach_id is None:
        if existing is not None:
            db.session.delete(existing)
        return None

    if user.role != Role.MEMBER.value:
        return f"{key} can only be set on a member"

    coach = db.session.get(User, coach_id)
    if coach is None or coach.role != coach_role.value:
        return f"{key} must reference a {coach_role.value}"

    if existing is None:
        db.session.add(model(member_id=user.id, **{column: coach_id}))
    else:
        setattr(existing, column, coach_id)
        existing.assigned_at = datetime.utcnow()
    return None


@admin_bp.route("/users/<int:user_id>", methods=["PUT"])
@roles_required(Role.ADMIN)
def update_user(user_id, current_user):
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"msg": "User not found"}), 404

    values = update_schema.load(json_body())
    try:
        if values.get("role"):
            user.role = values["role"]

        for key in ASSIGNMENTS:
            if key not in values:
                continue
            error = _apply_assignment(user, key, values[key])
            if error:
                db.session.rollback()
                return jsonify({"msg": error}), 400

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating user: {e}")
        return jsonify({"msg": "Failed to update user"}), 500

    db.session.refresh(user)
    return jsonify(user_schema.dump(user)), 200


@admin_bp.route("/users/<int:user_id>", methods=["DELETE"])
@roles_required(Role.ADMIN)
def delete_user(user_id, current_user):
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"msg": "User not found"}), 404
    if user.id == current_user.id:
        return jsonify({"msg": "You cannot delete your own account"}), 400

    try:
        # Plans written by this coach stay with the member
        DietPlan.query.filter_by(nutritionist_id=user_id).update({"nutritionist_id": None})
        WorkoutPlan.query.filter_by(trainer_id=user_id).update({"trainer_id": None})
        PlanMessage.query.filter_by(coach_id=user_id).update({"coach_id": None})

        TrainerFeedback.query.filter(
            (TrainerFeedback.trainer_id == user_id) | (TrainerFeedback.member_id == user_id)
        ).delete(synchronize_session=False)
        NutritionistFeedback.query.filter(
            (NutritionistFeedback.nutritionist_id == user_id) | (NutritionistFeedback.member_id == user_id)
        ).delete(synchronize_session=False)
        ScheduleSession.query.filter(
            (ScheduleSession.trainer_id == user_id) | (ScheduleSession.member_id == user_id)
        ).delete(synchronize_session=False)
        TrainerAssignment.query.filter_by(trainer_id=user_id).delete(synchronize_session=False)
        NutritionistAssignment.query.filter_by(nutritionist_id=user_id).delete(synchronize_session=False)

        db.session.delete(user)
        write_system_log("info", f"User {user_id} deleted by admin {current_user.id}")
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting user: {e}")
        return jsonify({"msg": "Failed to delete user"}), 500

    return "", 204
