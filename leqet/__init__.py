import logging
import os
import time

import click
from flask import Flask, jsonify, request, g
from flask_cors import CORS
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from leqet.config import config
from leqet.extensions import db, ma, jwt, migrate, limiter


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    if not app.debug and not app.testing and not app.logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        app.logger.addHandler(handler)
    logging.getLogger("leqet").setLevel(level)


def register_jwt_callbacks():
    from leqet.models import User

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"msg": "Token has expired"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({"msg": "Unauthorized"}), 401

    @jwt.unauthorized_loader
    def unauthorized_callback(error):
        return jsonify({"msg": "Unauthorized"}), 401

    @jwt.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        try:
            return db.session.get(User, int(jwt_data["sub"]))
        except (TypeError, ValueError):
            return None


def register_error_handlers(app):
    from leqet.services.access import AccessDenied
    from leqet.services.maintenance import write_system_log
    from leqet.services.nutrition import NutritionError
    from leqet.services.plans import PlanValidationError

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"msg": "Invalid request data", "errors": e.messages}), 400

    @app.errorhandler(AccessDenied)
    def handle_access_denied(e):
        return jsonify({"msg": e.msg}), 403

    @app.errorhandler(NutritionError)
    @app.errorhandler(PlanValidationError)
    def handle_bad_input(e):
        return jsonify({"msg": str(e)}), 400

    @app.errorhandler(429)
    def handle_rate_limit(e):
        return jsonify({"msg": "Too many requests, please try again later"}), 429

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({"msg": "Not found"}), 404

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        db.session.rollback()
        app.logger.exception(f"Unhandled error on {request.method} {request.path}: {e}")
        try:
            write_system_log("error", f"{request.method} {request.path}: {e}")
            db.session.commit()
        except Exception as log_error:
            db.session.rollback()
            app.logger.error(f"Could not record system log: {log_error}")
        return jsonify({"msg": "Internal server error"}), 500


def register_request_sampling(app):
    from leqet.services.monitor import perf_recorder

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def record_request(response):
        started = g.pop("request_started", None)
        if started is not None:
            perf_recorder.record(
                (time.perf_counter() - started) * 1000,
                bytes_in=request.content_length or 0,
                bytes_out=response.calculate_content_length() or 0,
            )
        return response


def register_cli(app):
    from leqet.cli import seed_demo

    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development shortcut for `flask db upgrade`)."""
        db.create_all()
        click.echo("Database tables created.")

    app.cli.add_command(seed_demo)


def create_app(config_name=None):
    app = Flask(__name__, instance_relative_config=True)
    config_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config[config_name])

    configure_logging(app)

    # Extensions
    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    CORS(app, resources={r"/api/*": {
        "origins": app.config["CORS_ORIGINS"],
        "allow_headers": ["Content-Type", "Authorization", "X-CSRF-TOKEN"],
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    }}, supports_credentials=True)

    register_jwt_callbacks()
    register_error_handlers(app)
    register_request_sampling(app)

    # Blueprints
    from leqet.routes.auth import auth_bp
    from leqet.routes.api import api_bp
    from leqet.routes.admin import admin_bp
    from leqet.routes.dashboard import dashboard_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(dashboard_bp)

    register_cli(app)

    app.logger.info(f"Leqet backend started with '{config_name}' config")
    return app
