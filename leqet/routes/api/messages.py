from flask import request, jsonify, current_app

from leqet.extensions import db
from leqet.models import PlanMessage, Notification
from leqet.models.communication import PLAN_TYPES
from leqet.roles import Role
from leqet.services.access import ensure, can_view_member, get_member_or_none
from leqet.services.notifications import notify_plan_message
from leqet.utils.decorators import inject_current_user
from leqet.utils.helpers import json_body, int_arg

from . import api_bp

MESSAGES_DEFAULT = 50
MESSAGES_MAX = 200
NOTIFICATIONS_LIMIT = 100

# Staff roles that may only write to one thread type
COACH_THREADS = {
    Role.TRAINER: "workout",
    Role.NUTRITIONIST: "diet",
}


def _plan_type(value):
    plan_type = value.lower() if isinstance(value, str) else ""
    return plan_type if plan_type in PLAN_TYPES else None


@api_bp.route("/members/<int:member_id>/plan-messages", methods=["GET"])
@inject_current_user
def list_plan_messages(member_id, current_user):
    plan_type = _plan_type(request.args.get("planType"))
    if plan_type is None:
        return jsonify({"msg": "planType must be 'diet' or 'workout'"}), 400

    limit = int_arg("limit", MESSAGES_DEFAULT)
    limit = min(limit, MESSAGES_MAX)
    ensure(can_view_member(current_user, member_id))

    messages = (
        PlanMessage.query.filter_by(member_id=member_id, plan_type=plan_type)
        .order_by(PlanMessage.created_at.asc(), PlanMessage.id.asc())
        .limit(limit)
        .all()
    )
    return jsonify({"messages": [m.to_dict() for m in messages]}), 200


@api_bp.route("/members/<int:member_id>/plan-messages", methods=["POST"])
@inject_current_user
def create_plan_message(member_id, current_user):
    data = json_body()
    plan_type = _plan_type(data.get("planType"))
    if plan_type is None:
        return jsonify({"msg": "planType must be 'diet' or 'workout'"}), 400

    text = data.get("message")
    if not isinstance(text, str) or not text.strip():
        return jsonify({"msg": "Message is required"}), 400

    role = Role.parse(current_user.role)
    thread = COACH_THREADS.get(role)
    if thread and thread != plan_type:
        return jsonify({"msg": f"{role.value.title()}s can only post to {thread} plan messages"}), 403
    ensure(can_view_member(current_user, member_id))
    if get_member_or_none(member_id) is None:
        return jsonify({"msg": "Member not found"}), 404

    try:
        message = PlanMessage(
            member_id=member_id,
            coach_id=None if role is Role.MEMBER else current_user.id,
            sender_role=role.value,
            plan_type=plan_type,
            message=text.strip(),
        )
        db.session.add(message)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating plan message: {e}")
        return jsonify({"msg": "Failed to create plan message"}), 500

    try:
        notify_plan_message(message, current_user.id)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating plan message notifications: {e}")

    return jsonify({"message": message.to_dict()}), 201


@api_bp.route("/notifications", methods=["GET"])
@inject_current_user
def list_notifications(current_user):
    only_unread = (request.args.get("only_unread") or "").lower() in ("1", "true")

    query = Notification.query.filter_by(user_id=current_user.id)
    if only_unread:
        query = query.filter(Notification.is_read.is_(False))
    notifications = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(NOTIFICATIONS_LIMIT)
        .all()
    )
    return jsonify({"notifications": [n.to_dict() for n in notifications]}), 200


@api_bp.route("/notifications/<int:notification_id>/read", methods=["POST"])
@inject_current_user
def mark_notification_read(notification_id, current_user):
    notification = Notification.query.filter_by(id=notification_id, user_id=current_user.id).first()
    if notification is None:
        # someone else's notification is left untouched
        return jsonify({"ok": True}), 200

    try:
        notification.mark_as_read()
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error marking notification as read: {e}")
        return jsonify({"msg": "Failed to mark notification as read"}), 500
    return jsonify({"ok": True}), 200
