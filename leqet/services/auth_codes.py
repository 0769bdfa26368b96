"""One-time codes for account activation and password reset.

Codes are six digits, stored only as werkzeug hashes with an expiry. The
caller commits the session.
"""
import secrets
from datetime import datetime

from werkzeug.security import generate_password_hash, check_password_hash

CODE_DIGITS = 6


class AuthCodeError(ValueError):
    pass


def generate_code():
    return str(secrets.randbelow(10 ** CODE_DIGITS)).zfill(CODE_DIGITS)


def _expired(expires_at, now):
    return expires_at is None or expires_at < now


def issue_activation_otp(user, ttl, now=None):
    """Store a fresh activation OTP on ``user`` and return the plain code."""
    now = now or datetime.utcnow()
    code = generate_code()
    user.activation_otp_hash = generate_password_hash(code)
    user.activation_otp_expires = now + ttl
    user.activation_otp_attempts = 0
    return code


def clear_activation_otp(user):
    user.activation_otp_hash = None
    user.activation_otp_expires = None
    user.activation_otp_attempts = 0


def verify_activation_otp(user, code, max_attempts, now=None):
    """Check ``code`` against the stored OTP.

    A wrong code counts as an attempt; once ``max_attempts`` is reached the
    OTP is burnt and a new one must be requested. Raises AuthCodeError on
    any failure and clears the OTP on success.
    """
    now = now or datetime.utcnow()
    if not user.activation_otp_hash or _expired(user.activation_otp_expires, now):
        raise AuthCodeError("Invalid or expired OTP")

    if not check_password_hash(user.activation_otp_hash, str(code or "")):
        user.activation_otp_attempts = (user.activation_otp_attempts or 0) + 1
        if user.activation_otp_attempts >= max_attempts:
            clear_activation_otp(user)
        raise AuthCodeError("Invalid or expired OTP")

    clear_activation_otp(user)


def activate_user(user, code, password, max_attempts, full_name=None, now=None):
    verify_activation_otp(user, code, max_attempts, now=now)
    user.set_password(password)
    user.status = "active"
    if full_name and full_name.strip():
        user.full_name = full_name.strip()


def can_reset_password(user):
    return user is not None and user.status == "active" and bool(user.password_hash)


def issue_reset_code(user, ttl, now=None):
    now = now or datetime.utcnow()
    code = generate_code()
    user.reset_token = generate_password_hash(code)
    user.reset_token_expires = now + ttl
    return code


def reset_password(user, code, password, now=None):
    now = now or datetime.utcnow()
    if not can_reset_password(user) or not user.reset_token or _expired(user.reset_token_expires, now):
        raise AuthCodeError("Invalid or expired code")
    if not check_password_hash(user.reset_token, str(code or "")):
        raise AuthCodeError("Invalid or expired code")

    user.set_password(password)
    user.reset_token = None
    user.reset_token_expires = None
