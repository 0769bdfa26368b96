# leqet/utils/decorators.py
from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required
from leqet.extensions import db
from leqet.models import User
from leqet.roles import Role


def current_user_or_none():
    identity = get_jwt_identity()
    if identity is None:
        return None
    try:
        return db.session.get(User, int(identity))
    except (TypeError, ValueError):
        return None


def inject_current_user(view_func):
    """
    Require a valid JWT and pass the matching user to the view as
    ``current_user``. Unknown or suspended users get a 401.
    """
    @wraps(view_func)
    @jwt_required()
    def wrapper(*args, **kwargs):
        user = current_user_or_none()
        if not user or user.status == "suspended":
            return jsonify({"msg": "Unauthorized"}), 401

        kwargs['current_user'] = user
        return view_func(*args, **kwargs)
    return wrapper


def roles_required(*roles):
    """Like ``inject_current_user`` but only lets the given roles through (403 otherwise)."""
    allowed = {Role.parse(r) for r in roles}

    def decorator(view_func):
        @wraps(view_func)
        @inject_current_user
        def wrapper(*args, **kwargs):
            if Role.parse(kwargs['current_user'].role) not in allowed:
                return jsonify({"msg": "Forbidden"}), 403
            return view_func(*args, **kwargs)
        return wrapper
    return decorator
