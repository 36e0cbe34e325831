import logging
import os

from flask import Flask, jsonify, request

from .blueprints.images import images_bp
from .blueprints.transport import transport_bp
from .constants import (
    DEFAULT_CHECK_URL,
    DEFAULT_CONTROLLER_PROPERTIES_NAME,
    DEFAULT_MONITORING_DIR_NAME,
    DEFAULT_STORAGE_URL,
)
from .extensions import cors

# Set up logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],  # Log to standard output
)
logger = logging.getLogger("resource_server")

DEFAULT_DATA_DIR_IN_CONTAINER = "/app/data"


def _default_data_dir():
    data_dir_env = os.environ.get("DATA_DIR")
    if data_dir_env:
        logger.info("Using DATA_DIR environment variable: %s", data_dir_env)
        return data_dir_env
    if not os.path.exists("/app"):  # Assume local development
        project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        data_dir = os.path.join(project_root, "data")
        logger.info("DATA_DIR not set, assuming local run. Using: %s", data_dir)
        return data_dir
    logger.info("DATA_DIR not set, assuming container run. Using: %s",
                DEFAULT_DATA_DIR_IN_CONTAINER)
    return DEFAULT_DATA_DIR_IN_CONTAINER


def _configure(app, test_config):
    app.config["TESTING"] = bool(
        app.config.get("TESTING") or os.environ.get("TESTING") == "true")
    app.config["DATA_DIR"] = _default_data_dir()

    # FLASK_IMAGE_RESOURCE_DIR lands in app.config["IMAGE_RESOURCE_DIR"], the
    # host-context parameter. The plain IMAGE_RESOURCE_DIR variable is read
    # later by the environment provider.
    app.config.from_prefixed_env()

    app.config["IMAGE_RESOURCE_CACHE_CONTROL"] = os.environ.get(
        "IMAGE_RESOURCE_CACHE_CONTROL")
    app.config["MONITORING_DIR_NAME"] = os.environ.get(
        "MONITORING_DIR_NAME", DEFAULT_MONITORING_DIR_NAME)
    app.config["MONITORING_PROPERTIES_NAME"] = os.environ.get(
        "MONITORING_PROPERTIES_NAME", DEFAULT_CONTROLLER_PROPERTIES_NAME)
    app.config["MONITORING_STORAGE_URL"] = os.environ.get(
        "MONITORING_STORAGE_URL", DEFAULT_STORAGE_URL)
    app.config["MONITORING_CHECK_URL"] = os.environ.get(
        "MONITORING_CHECK_URL", DEFAULT_CHECK_URL)

    if test_config:
        app.config.update(test_config)
    if app.config["TESTING"]:
        logger.info("TESTING mode enabled.")


def create_app(test_config=None):
    """Creates and configures the Flask application.

    Args:
        test_config (dict): Values applied on top of the environment-derived
            configuration.

    Returns:
        Flask: The configured application.
    """
    app = Flask(__name__)
    _configure(app, test_config)

    # Configure CORS with specific allowed origins
    allowed_origins_str = os.environ.get(
        "CORS_ALLOWED_ORIGINS", "http://localhost:8080,http://127.0.0.1:8080")
    allowed_origins = [
        origin.strip() for origin in allowed_origins_str.split(",") if origin.strip()
    ]
    cors.init_app(app, origins=allowed_origins,
                  resources={r"/api/*": {}, r"/images/*": {}})

    app.register_blueprint(images_bp)
    app.register_blueprint(transport_bp)

    @app.after_request
    def add_security_headers(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'self'"
        return response

    @app.errorhandler(404)
    def not_found_error(error):
        """Handles 404 Not Found errors with a JSON response."""
        logger.warning("404 Not Found: %s", request.path)
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handles 500 Internal Server Errors with a JSON response and logs the error."""
        logger.error("500 Internal Server Error: %s", error, exc_info=True)
        return jsonify({"error": "An internal server error occurred"}), 500

    return app


app = create_app()

if __name__ == "__main__":
    # Start the Flask development server for local testing.
    is_debug_mode = os.environ.get("FLASK_DEBUG", "0") == "1"
    logger.info("Starting Flask app (Debug mode: %s)", is_debug_mode)
    app.run(host="0.0.0.0", port=5001, debug=is_debug_mode)
