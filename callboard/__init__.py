# -*- coding: utf-8 -*-
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config, ensure_instance
from .extensions import db, migrate, login_manager
from .errors import CallboardError

# blueprints
from .auth import auth_bp
from .modules.shows import bp as shows_bp
from .modules.attendance import bp as attendance_bp
from .modules.sign_in import bp as sign_in_bp
from .modules.actor import bp as actor_bp
from .modules.roster import bp as roster_bp

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)
    ensure_instance(app)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # --- API: JSON instead of a login redirect ---
    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Unauthorized"}), 401

    # --- errors ---
    @app.errorhandler(CallboardError)
    def handle_callboard_error(err):
        db.session.rollback()
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"error": err.description or err.name}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500

    # --- blueprints ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(shows_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(sign_in_bp)
    app.register_blueprint(actor_bp)
    app.register_blueprint(roster_bp)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    return app
