"""Flask entry point for the curriculum quiz generator."""

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config, configure_logging
from routes.api_routes import api_bp
from routes.auth_routes import auth_bp
from routes.student_routes import student_bp
from routes.teacher_routes import teacher_bp
from services.db import DocumentNotFound, init_store
from services.errors import QuizAppError
from services.generation_service import init_generation_service
from services.seed_service import seed_database
from services.session import load_current_user

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configure_logging(app.config["LOG_LEVEL"])
    app.secret_key = app.config["SECRET_KEY"]
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    init_store(
        app.config["STORE_BACKEND"],
        data_dir=app.config["DATA_DIR"],
        service_account_path=app.config["FIREBASE_SERVICE_ACCOUNT_PATH"],
    )
    init_generation_service(
        app.config["GROQ_API_KEY"],
        model=app.config["GROQ_MODEL"],
        vision_model=app.config["GROQ_VISION_MODEL"],
        timeout=app.config["GROQ_TIMEOUT"],
    )
    if not app.testing:
        try:
            Config.validate()
        except RuntimeError as e:
            logger.warning("%s Topic extraction and quiz generation are disabled.", e)

    app.before_request(load_current_user)

    app.register_blueprint(api_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(teacher_bp)
    app.register_blueprint(student_bp)

    @app.errorhandler(QuizAppError)
    def handle_app_error(e):
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(DocumentNotFound)
    def handle_missing_document(e):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500

    @app.cli.command("seed")
    def seed_command():
        """Load demo teachers, students, curricula and quizzes."""
        if seed_database():
            print("Database seeded successfully!")
        else:
            print("Database already has data, skipping seed.")

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.config["DEBUG"])
