from flask import Blueprint, jsonify
from flask_jwt_extended import verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from leqet.roles import LOGIN_PATH, resolve_dashboard_view
from leqet.utils.decorators import current_user_or_none

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route("/dashboard", methods=["GET"])
@dashboard_bp.route("/dashboard/<path:subpath>", methods=["GET"])
def dashboard(subpath=""):
    """Tell the frontend which view to render for the caller's role."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return jsonify({"redirect": LOGIN_PATH}), 401

    user = current_user_or_none()
    if user is None or user.status == "suspended":
        return jsonify({"redirect": LOGIN_PATH}), 401

    kind, target = resolve_dashboard_view(user.role, subpath)
    if kind == "redirect":
        return jsonify({"redirect": target}), 200
    return jsonify({"view": target, "role": user.role, "path": subpath.strip("/")}), 200
