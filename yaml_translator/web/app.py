"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from yaml_translator import __version__
from yaml_translator.ai.exceptions import TranslationError
from yaml_translator.logger import get_logger

from .routes.documents import documents_bp
from .routes.translation import translation_bp
from .routes.providers import providers_bp
from .routes.settings import settings_bp

logger = get_logger(__name__)


def build_app() -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.config["JSON_AS_ASCII"] = False
    app.json.ensure_ascii = False

    register_blueprints(app)
    register_error_handlers(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(documents_bp, url_prefix="/api/documents")
    app.register_blueprint(translation_bp, url_prefix="/api/translate")
    app.register_blueprint(providers_bp, url_prefix="/api/providers")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_error_handlers(app: Flask) -> None:
    """Return JSON bodies for errors raised out of views."""

    @app.errorhandler(TranslationError)
    def handle_translation_error(e: TranslationError):
        logger.warning(f"Request failed: {e}")
        return jsonify(e.to_dict()), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"error": e.description, "code": e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception(f"Unhandled error: {e}")
        return jsonify({"error": "Internal server error"}), 500


def register_default_routes(app: Flask) -> None:
    """Register the health route."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok", "version": __version__})
