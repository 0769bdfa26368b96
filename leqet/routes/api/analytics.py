from flask import jsonify

from leqet.roles import Role
from leqet.services.access import ensure, can_access_diet, can_view_member, get_member_or_none
from leqet.services.analytics import trainer_analytics, nutritionist_analytics, member_analytics
from leqet.services.summaries import member_overview, member_snapshot, dashboard_summary
from leqet.utils.decorators import inject_current_user, roles_required

from . import api_bp

WEEK_DAYS = 7


@api_bp.route("/analytics/trainer", methods=["GET"])
@roles_required(Role.TRAINER, Role.ADMIN)
def trainer_dashboard_analytics(current_user):
    members = member_overview(current_user)
    return jsonify({"estimated": trainer_analytics(current_user.id, members)}), 200


@api_bp.route("/analytics/nutritionist/<int:member_id>", methods=["GET"])
@roles_required(Role.NUTRITIONIST, Role.ADMIN)
def nutritionist_member_analytics(member_id, current_user):
    ensure(can_access_diet(current_user, member_id))
    if get_member_or_none(member_id) is None:
        return jsonify({"msg": "Member not found"}), 404

    member = member_snapshot(member_id)
    summary = dashboard_summary(member_id, WEEK_DAYS * 2)
    return jsonify({"estimated": nutritionist_analytics(member, summary["days"])}), 200


@api_bp.route("/analytics/member/<int:member_id>", methods=["GET"])
@inject_current_user
def member_dashboard_analytics(member_id, current_user):
    ensure(can_view_member(current_user, member_id))
    profile_owner = get_member_or_none(member_id)
    if profile_owner is None:
        return jsonify({"msg": "Member not found"}), 404

    member = member_snapshot(member_id)
    summary = dashboard_summary(member_id, WEEK_DAYS)
    goals = profile_owner.goals
    weekly_minutes = goals.weekly_workout_minutes if goals else None
    return jsonify({"estimated": member_analytics(member, summary["days"], weekly_minutes)}), 200
