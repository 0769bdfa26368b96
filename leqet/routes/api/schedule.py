from flask import request, jsonify, current_app

from leqet.extensions import db
from leqet.models import ScheduleSession
from leqet.roles import Role
from leqet.schemas import ScheduleSessionSchema
from leqet.services.access import ensure, can_view_member, is_assigned_trainer, get_member_or_none
from leqet.services.summaries import parse_day
from leqet.utils.decorators import inject_current_user, roles_required
from leqet.utils.helpers import json_body

from . import api_bp

session_schema = ScheduleSessionSchema()


def _date_window(query):
    start = parse_day(request.args.get("from"))
    end = parse_day(request.args.get("to"))
    if start:
        query = query.filter(ScheduleSession.session_date >= start)
    if end:
        query = query.filter(ScheduleSession.session_date <= end)
    return query.order_by(
        ScheduleSession.session_date.asc(), ScheduleSession.session_time.asc(), ScheduleSession.id.asc()
    )


@api_bp.route("/trainer/schedule", methods=["GET"])
@roles_required(Role.TRAINER, Role.ADMIN)
def trainer_schedule(current_user):
    sessions = _date_window(ScheduleSession.query.filter_by(trainer_id=current_user.id)).all()
    return jsonify({"sessions": [s.to_dict("member") for s in sessions]}), 200


@api_bp.route("/trainer/schedule", methods=["POST"])
@roles_required(Role.TRAINER, Role.ADMIN)
def create_schedule_session(current_user):
    values = session_schema.load(json_body())
    member_id = values["member_id"]

    if current_user.role == Role.TRAINER.value:
        ensure(is_assigned_trainer(current_user.id, member_id))
    if get_member_or_none(member_id) is None:
        return jsonify({"msg": "Member not found"}), 404

    try:
        session = ScheduleSession(trainer_id=current_user.id, status="scheduled", **values)
        db.session.add(session)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating schedule session: {e}")
        return jsonify({"msg": "Failed to create schedule session"}), 500

    return jsonify({"id": session.id}), 201


@api_bp.route("/members/<int:member_id>/schedule", methods=["GET"])
@inject_current_user
def member_schedule(member_id, current_user):
    ensure(can_view_member(current_user, member_id))
    sessions = _date_window(ScheduleSession.query.filter_by(member_id=member_id)).all()
    return jsonify({"sessions": [s.to_dict("trainer") for s in sessions]}), 200
