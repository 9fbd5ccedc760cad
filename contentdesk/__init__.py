"""Flask application factory."""
import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from contentdesk.config import config, ContentSettings, database_engine_options
from contentdesk.errors import CollectionNotFoundError, DocumentNotFoundError, StoreValidationError
from contentdesk.extensions import db, migrate, cors


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure Flask application.

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Configured Flask application instance
    """
    # Create Flask app instance
    app = Flask(__name__)

    # Load configuration
    config_name = config_name or os.getenv("FLASK_ENV", "default")
    app.config.from_object(config[config_name])

    # Forward the remote database token to libsql drivers
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = database_engine_options(app.config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Configure logging
    if not app.debug and not app.testing:
        log_dir = os.path.dirname(app.config["LOG_FILE"])
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            app.config["LOG_FILE"],
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"
        ))
        file_handler.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
        app.logger.addHandler(file_handler)
        app.logger.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
        logging.getLogger("contentdesk").addHandler(file_handler)
        logging.getLogger("contentdesk").setLevel(getattr(logging, app.config["LOG_LEVEL"]))
        app.logger.info("ContentDesk application startup")

    # Content store, hooks and the settings snapshot handed to services
    from contentdesk.hooks import HookDispatcher, register_collection_hooks
    from contentdesk.models import COLLECTIONS
    from contentdesk.store import SQLContentStore

    hooks = register_collection_hooks(HookDispatcher())
    app.extensions["content_settings"] = ContentSettings.from_config(app.config)
    app.extensions["content_store"] = SQLContentStore(db, COLLECTIONS, hooks=hooks)

    # Register blueprints
    from contentdesk.routes.main import main_bp
    from contentdesk.routes.api import api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp, url_prefix="/api")

    # Register CLI commands
    from contentdesk.cli import db as db_cli
    app.register_blueprint(db_cli.bp)

    register_error_handlers(app)

    @app.context_processor
    def inject_config():
        """Inject configuration variables into templates."""
        return {
            "APP_NAME": app.config["APP_NAME"],
            "APP_VERSION": app.config["APP_VERSION"],
        }

    return app


def register_error_handlers(app: Flask) -> None:
    """Map store errors raised by request handlers onto HTTP responses.

    Only validation and lookup errors get a structured body; any other
    failure is left to Flask's generic 500.
    """

    @app.errorhandler(StoreValidationError)
    def handle_validation_error(error: StoreValidationError):
        return jsonify({"errors": [{"message": error.message}]}), 400

    @app.errorhandler(CollectionNotFoundError)
    @app.errorhandler(DocumentNotFoundError)
    def handle_not_found(error):
        return jsonify({"errors": [{"message": str(error)}]}), 404
