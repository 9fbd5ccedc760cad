"""Application configuration."""
import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Type
from dotenv import load_dotenv
from sqlalchemy.engine import make_url

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


class Config:
    """Base configuration class."""

    # Flask core configuration
    SECRET_KEY = os.environ.get("CONTENTDESK_SECRET") or os.environ.get("SECRET_KEY") or \
        "dev-secret-key-change-in-production"

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or "sqlite:///contentdesk.sqlite"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Token for remote libsql/Turso endpoints; only forwarded to libsql URLs
    DATABASE_AUTH_TOKEN = os.environ.get("DATABASE_AUTH_TOKEN")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {
        "pool_pre_ping": True,
    }

    # Application configuration
    APP_NAME = os.environ.get("APP_NAME", "ContentDesk")
    APP_VERSION = os.environ.get("APP_VERSION", "0.1.0")
    SERVER_URL = os.environ.get("SERVER_URL", "http://localhost:8000")

    # Content endpoints
    STATS_READ_CAP = int(os.environ.get("STATS_READ_CAP", "1000"))
    BULK_PUBLISH_LIMIT = int(os.environ.get("BULK_PUBLISH_LIMIT", "100"))
    BULK_PUBLISH_STOP_ON_ERROR = _env_flag("BULK_PUBLISH_STOP_ON_ERROR")
    CUSTOM_POSTS_DEFAULT_LIMIT = int(os.environ.get("CUSTOM_POSTS_DEFAULT_LIMIT", "10"))
    API_BOT_NAME = os.environ.get("API_BOT_NAME", "API Bot")
    REST_DEFAULT_DEPTH = int(os.environ.get("REST_DEFAULT_DEPTH", "2"))

    # Dashboard
    DASHBOARD_HTTP_TIMEOUT = float(os.environ.get("DASHBOARD_HTTP_TIMEOUT", "5"))
    DASHBOARD_PAGE_SIZE = int(os.environ.get("DASHBOARD_PAGE_SIZE", "10"))

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE", "logs/contentdesk.log")


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    SQLALCHEMY_ECHO = _env_flag("SQLALCHEMY_ECHO")


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    SQLALCHEMY_ECHO = False


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL_TEST") or "sqlite:///:memory:"
    DATABASE_AUTH_TOKEN = None
    SECRET_KEY = "test-secret-key"
    SERVER_URL = "http://testserver"


# Configuration dictionary
config: dict[str, Type[Config]] = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}


@dataclass(frozen=True)
class ContentSettings:
    """Startup-time snapshot of the settings the content endpoints read.

    Built once by the application factory and handed to services, so request
    handlers never reach back into mutable application config.
    """

    stats_read_cap: int = 1000
    bulk_publish_limit: int = 100
    bulk_publish_stop_on_error: bool = False
    custom_posts_default_limit: int = 10
    api_bot_name: str = "API Bot"
    rest_default_depth: int = 2
    server_url: str = "http://localhost:8000"
    dashboard_http_timeout: float = 5.0
    dashboard_page_size: int = 10

    @classmethod
    def from_config(cls, app_config: Mapping[str, Any]) -> "ContentSettings":
        """Build settings from a Flask config mapping."""
        return cls(
            stats_read_cap=int(app_config["STATS_READ_CAP"]),
            bulk_publish_limit=int(app_config["BULK_PUBLISH_LIMIT"]),
            bulk_publish_stop_on_error=bool(app_config["BULK_PUBLISH_STOP_ON_ERROR"]),
            custom_posts_default_limit=int(app_config["CUSTOM_POSTS_DEFAULT_LIMIT"]),
            api_bot_name=app_config["API_BOT_NAME"],
            rest_default_depth=int(app_config["REST_DEFAULT_DEPTH"]),
            server_url=app_config["SERVER_URL"],
            dashboard_http_timeout=float(app_config["DASHBOARD_HTTP_TIMEOUT"]),
            dashboard_page_size=int(app_config["DASHBOARD_PAGE_SIZE"]),
        )


def database_engine_options(app_config: Mapping[str, Any]) -> dict[str, Any]:
    """Engine options for Flask-SQLAlchemy, with the auth token for libsql URLs.

    ``DATABASE_AUTH_TOKEN`` only means something to the libsql driver; other
    drivers reject unknown connect arguments, so for them it is ignored.
    """
    options = dict(app_config["SQLALCHEMY_ENGINE_OPTIONS"])
    token = app_config.get("DATABASE_AUTH_TOKEN")
    if not token:
        return options

    drivername = make_url(app_config["SQLALCHEMY_DATABASE_URI"]).drivername
    if "libsql" not in drivername:
        logger.warning(f"DATABASE_AUTH_TOKEN is set but ignored for the '{drivername}' driver")
        return options

    connect_args = dict(options.get("connect_args", {}))
    connect_args["auth_token"] = token
    options["connect_args"] = connect_args
    return options
