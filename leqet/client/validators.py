import re
from datetime import date

OTP_PATTERN = re.compile(r"[0-9]{6}")
MIN_PASSWORD_LENGTH = 6


def require_email(email):
    email = email.strip().lower() if isinstance(email, str) else ""
    if not email:
        raise ValueError("Email is required")
    return email


def validate_otp(otp):
    """OTP codes are exactly six digits; anything else never reaches the server."""
    otp = str(otp if otp is not None else "").strip()
    if not OTP_PATTERN.fullmatch(otp):
        raise ValueError("OTP must be exactly 6 digits")
    return otp


def validate_password(password, confirm_password=None):
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if confirm_password is not None and confirm_password != password:
        raise ValueError("Passwords do not match")
    return password


def require_text(value, label):
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} is required")
    return value.strip()


def require_id(value, label):
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 0
    if number < 1:
        raise ValueError(f"{label} is required")
    return number


def iso_day(value):
    """Accepts a date or a YYYY-MM-DD string."""
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value)).isoformat()
    except ValueError:
        raise ValueError("date must be in YYYY-MM-DD format")
