import smtplib
import ssl
from email.message import EmailMessage

from flask import current_app


class MailerError(RuntimeError):
    pass


def mail_configured():
    return bool(current_app.config.get("MAIL_SERVER"))


def send_email(to, subject, body):
    """Send a plain-text email with the SMTP settings from app config.

    Returns False when no mail server is configured (the message is only
    logged), True once the server accepted it. Raises MailerError on SMTP
    failures.
    """
    cfg = current_app.config
    if not mail_configured():
        current_app.logger.warning(f"MAIL_SERVER not configured; email to {to} not sent ({subject})")
        return False

    msg = EmailMessage()
    msg.set_content(body)
    msg["Subject"] = subject
    msg["From"] = cfg.get("MAIL_DEFAULT_SENDER") or cfg.get("MAIL_USERNAME")
    msg["To"] = to

    server_name = cfg["MAIL_SERVER"]
    port = cfg.get("MAIL_PORT", 587)
    username = cfg.get("MAIL_USERNAME")
    password = cfg.get("MAIL_PASSWORD")
    timeout = cfg.get("MAIL_TIMEOUT", 12)
    context = ssl.create_default_context()

    try:
        if cfg.get("MAIL_USE_SSL"):
            with smtplib.SMTP_SSL(server_name, port, context=context, timeout=timeout) as server:
                if username and password:
                    server.login(username, password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(server_name, port, timeout=timeout) as server:
                server.ehlo()
                if cfg.get("MAIL_USE_TLS", True):
                    server.starttls(context=context)
                    server.ehlo()
                if username and password:
                    server.login(username, password)
                server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.error(f"Failed to send email to {to}: {e}")
        raise MailerError(f"Failed to send email: {e}") from e

    current_app.logger.info(f"Email '{subject}' sent to {to}")
    return True


def send_otp_email(to, full_name, code, minutes):
    body = f"""Hi {full_name or 'there'},

Your Leqet Gym activation code is: {code}

It expires in {minutes} minutes. Enter it on the activation page together
with your new password.

If you were not expecting this email, you can ignore it.

Leqet Gym"""
    return send_email(to, "Your Leqet Gym activation code", body)


def send_password_reset_email(to, full_name, code, minutes):
    body = f"""Hi {full_name or 'there'},

Use this code to reset your Leqet Gym password: {code}

It expires in {minutes} minutes. If you did not ask for a reset, you can
ignore this email and your password stays the same.

Leqet Gym"""
    return send_email(to, "Reset your Leqet Gym password", body)
