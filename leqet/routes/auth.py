from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from sqlalchemy import func

from leqet.extensions import db, limiter
from leqet.models import User
from leqet.services.auth_codes import (
    AuthCodeError, issue_activation_otp, activate_user, can_reset_password, issue_reset_code, reset_password,
)
from leqet.services.mailer import MailerError, send_otp_email, send_password_reset_email
from leqet.utils.decorators import inject_current_user
from leqet.utils.helpers import json_body

auth_bp = Blueprint("auth", __name__)


def _code_limit():
    return current_app.config["AUTH_CODE_RATE_LIMIT"]


def _login_limit():
    return current_app.config["LOGIN_RATE_LIMIT"]


def _find_user(email):
    return User.query.filter(func.lower(User.email) == email).first()


def _email_from(data):
    email = data.get("email")
    return email.strip().lower() if isinstance(email, str) else ""


def _minutes(ttl):
    return int(ttl.total_seconds() // 60)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_limit)
def login():
    data = json_body()
    email = _email_from(data)
    password = data.get("password") or ""

    if not email or not password:
        return jsonify({"success": False, "msg": "Email and password are required"}), 400

    user = _find_user(email)
    if not user or not user.check_password(password):
        current_app.logger.info(f"Failed login for {email}")
        return jsonify({"success": False, "msg": "Invalid email or password"}), 401

    if user.status == "suspended":
        return jsonify({"success": False, "msg": "Account is suspended"}), 403

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role},
    )
    response = jsonify({
        "success": True,
        "user": user.to_session_dict(),
        "access_token": access_token,
    })
    set_access_cookies(response, access_token)
    return response, 200


@auth_bp.route("/me", methods=["GET"])
@inject_current_user
def me(current_user):
    return jsonify({"user": current_user.to_session_dict()}), 200


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"ok": True})
    unset_jwt_cookies(response)
    return response, 200


@auth_bp.route("/request-otp", methods=["POST"])
@limiter.limit(_code_limit)
def request_otp():
    email = _email_from(json_body())
    if not email:
        return jsonify({"msg": "Email is required"}), 400

    user = _find_user(email)
    if not user:
        return jsonify({"msg": "User not found"}), 404

    ttl = current_app.config["ACTIVATION_OTP_TTL"]
    try:
        code = issue_activation_otp(user, ttl)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error issuing activation OTP: {e}")
        return jsonify({"msg": "Failed to request OTP"}), 500

    try:
        sent = send_otp_email(user.email, user.full_name, code, _minutes(ttl))
        current_app.logger.info(f"Activation OTP for user {user.id} issued (emailed: {sent})")
    except MailerError as e:
        current_app.logger.error(f"Activation OTP email for user {user.id} failed: {e}")
    return jsonify({"ok": True}), 200


@auth_bp.route("/activate", methods=["POST"])
@limiter.limit(_code_limit)
def activate():
    data = json_body()
    email = _email_from(data)
    otp = str(data.get("otp") or "").strip()
    password = data.get("password") or ""

    if not email or not otp or not password:
        return jsonify({"msg": "email, otp and password are required"}), 400

    min_length = current_app.config["PASSWORD_MIN_LENGTH"]
    if len(password) < min_length:
        return jsonify({"msg": f"Password must be at least {min_length} characters"}), 400

    user = _find_user(email)
    if not user:
        return jsonify({"msg": "User not found"}), 404

    full_name = data.get("full_name") if isinstance(data.get("full_name"), str) else None
    try:
        activate_user(user, otp, password, current_app.config["ACTIVATION_OTP_MAX_ATTEMPTS"], full_name=full_name)
    except AuthCodeError as e:
        # failed attempts are counted even though the activation is rejected
        db.session.commit()
        return jsonify({"msg": str(e)}), 400

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error activating account: {e}")
        return jsonify({"msg": "Failed to activate account"}), 500
    return jsonify({"ok": True}), 200


@auth_bp.route("/forgot-password/request", methods=["POST"])
@limiter.limit(_code_limit)
def forgot_password_request():
    email = _email_from(json_body())
    if not email:
        return jsonify({"msg": "Email is required"}), 400

    user = _find_user(email)
    # Same answer whether or not the account exists
    if not can_reset_password(user):
        return jsonify({"ok": True}), 200

    ttl = current_app.config["PASSWORD_RESET_TTL"]
    try:
        code = issue_reset_code(user, ttl)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error issuing password reset code: {e}")
        return jsonify({"ok": True}), 200

    try:
        send_password_reset_email(user.email, user.full_name, code, _minutes(ttl))
    except MailerError as e:
        current_app.logger.error(f"Password reset email for user {user.id} failed: {e}")
    return jsonify({"ok": True}), 200


@auth_bp.route("/forgot-password/reset", methods=["POST"])
@limiter.limit(_code_limit)
def forgot_password_reset():
    data = json_body()
    email = _email_from(data)
    code = str(data.get("otp") or data.get("code") or "").strip()
    password = data.get("password") or ""

    if not email or not code or not password:
        return jsonify({"msg": "email, otp and password are required"}), 400

    min_length = current_app.config["PASSWORD_MIN_LENGTH"]
    if len(password) < min_length:
        return jsonify({"msg": f"Password must be at least {min_length} characters"}), 400

    user = _find_user(email)
    try:
        reset_password(user, code, password)
    except AuthCodeError as e:
        return jsonify({"msg": str(e)}), 400

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error resetting password: {e}")
        return jsonify({"msg": "Failed to reset password"}), 500
    return jsonify({"ok": True}), 200
