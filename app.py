# app.py: application factory: config, logging, extensions, session backend, blueprints, JSON errors.
import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from commands import register_commands
from config import load_config
from errors import ApiError
from extensions import db, limiter, migrate
from routes.auth import auth_bp
from routes.uploads import uploads_bp
from routes.users import users_bp
from security import middleware
from security.sessions import build_session_backend

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


# -----------------------
# Logging
# -----------------------
def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    app.logger.setLevel(level)


# -----------------------
# Errors: everything under the API answers {"error": ...}
# -----------------------
def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        message = e.description if e.code == 400 else e.name
        return jsonify({"error": message}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({"error": "Internal Server Error"}), 500


# -----------------------
# CORS for the browser front-end (credentials carried by the cookie)
# -----------------------
def register_cors(app):
    @app.before_request
    def answer_preflight():
        if request.method == "OPTIONS" and request.path.startswith("/api/"):
            return "", 204

    @app.after_request
    def add_cors_headers(response):
        if not request.path.startswith("/api/"):
            return response
        origin = request.headers.get("Origin")
        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers.add("Vary", "Origin")
        else:
            response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,DELETE,PATCH,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response


def create_app(config=None):
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    sessions = build_session_backend(app.config)
    register_cors(app)
    middleware.init_app(app, sessions)
    app.logger.info("Session backend: %s", app.config["AUTH_SESSION_BACKEND"])

    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(uploads_bp)

    register_error_handlers(app)
    register_commands(app)
    return app


# -----------------------
# Startup: create DB tables and print registered routes
# -----------------------
if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()
        print("\n=== Registered routes ===")
        for rule in app.url_map.iter_rules():
            print(f"{rule.endpoint:30} -> {rule.rule}")
        print("=========================\n")
    app.run(debug=True)
