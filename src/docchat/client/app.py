"""Flask web application for the document chat assistant.

This module exposes the REST API for answering questions with
retrieval-augmented generation against the locally hosted model.
"""

import logging
import os

from flask import Flask

from docchat.client.routes import chat_bp, health_bp, init_config, models_bp
from docchat.config import Settings, configure_logging
from docchat.service.context import AppContext
from docchat.service.helpers import run_async

configure_logging()
logger = logging.getLogger(__name__)

# Create Flask app
app = Flask(__name__)
logger.debug("Flask app created")

# Register blueprints
app.register_blueprint(chat_bp)
app.register_blueprint(health_bp)
app.register_blueprint(models_bp)


def initialize_services(settings: Settings | None = None) -> AppContext:
    """Build the application context and make it available to the routes.

    Args:
        settings: Settings to use (default: from environment)

    Returns:
        AppContext: The initialized context

    Raises:
        StoreError: If the vector store is unreachable
        ConfigurationError: If the settings are invalid
    """
    settings = settings or Settings.from_env()
    logger.debug(f"Using collection {settings.collection_name}, model {settings.ollama_model}")

    app_context = AppContext.from_settings(settings)
    run_async(app_context.init())
    init_config(app_context=app_context)
    return app_context


def create_app() -> Flask:
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Returns:
        Flask: The configured Flask application instance
    """
    initialize_services()
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    print("🚀 Starting docchat server...")

    app_context = initialize_services()
    print(f"🤖 Local model: {app_context.settings.ollama_model}")
    print(f"📝 System prompt: {len(app_context.settings.system_prompt)} characters")

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "3000"))
    debug = os.getenv("FLASK_ENV", "production") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"   Health check: http://{host}:{port}/health")
    print(f"   Search test:  http://{host}:{port}/api/test-search?q=your+query")
    print("📝 Press CTRL+C to quit")

    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
