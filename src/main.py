import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from flask import Flask, jsonify
from flask_cors import CORS
from src.config import Config
from src.extensions import backend, snapshots, drafts
from backend.exceptions import ApiError, AuthenticationError, BackendUnavailable
from invoices.exceptions import DraftNotFoundException, InvalidLineItem

# register blueprints dynamically
from routes import register_routes

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger()
    if not any(getattr(handler, "_billing_console", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._billing_console = True
        root.addHandler(handler)
    root.setLevel(level)
    # keep request noise down
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def register_error_handlers(app):
    logger = logging.getLogger(__name__)

    @app.errorhandler(AuthenticationError)
    def handle_reauthenticate(e):
        return jsonify({"error": e.message, "error_code": "REAUTHENTICATE"}), 401

    @app.errorhandler(BackendUnavailable)
    def handle_backend_unavailable(e):
        return jsonify({"error": e.message}), 502

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        status = e.status_code if e.status_code and 400 <= e.status_code < 600 else 502
        return jsonify({"error": e.message}), status

    @app.errorhandler(DraftNotFoundException)
    def handle_draft_not_found(e):
        return jsonify({"error": str(e) or "Draft not found"}), 404

    @app.errorhandler(InvalidLineItem)
    def handle_invalid_line_item(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(500)
    def handle_internal_error(e):
        logger.exception("Unhandled error: %s", e)
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    # Enable CORS for all routes
    CORS(
        app,
        origins=app.config["CORS_ORIGINS"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Tenant-Id", "x-admin-key"],
        supports_credentials=True,
    )

    # initialize extensions
    backend.init_app(app)
    snapshots.init_app(app)
    drafts.init_app(app)

    # register routes/blueprints
    register_routes(app)
    register_error_handlers(app)

    @app.get("/")
    def index():
        return jsonify({"message": "Tenant Billing Console API"}), 200

    @app.route('/api/test')
    def test():
        return jsonify({"message": "Backend Connected Successfully", "backend": app.config["BACKEND_API_URL"]}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8000")), debug=app.config["DEBUG"])
