"""
CampusConnect configuration classes.

Values are read from the environment; a .env file in the project root is
loaded first when present.  create_app() picks one of these by name.
"""
import os

from dotenv import load_dotenv

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(_PROJECT_ROOT, ".env"))


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Falls back to instance/campusconnect.db (SQLite) in create_app()
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URI")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLITE_BUSY_TIMEOUT = 30  # seconds a writer waits for the SQLite lock

    # Identity is issued by the upstream auth proxy and forwarded in headers
    TRUST_IDENTITY_HEADERS = _env_bool("TRUST_IDENTITY_HEADERS", True)
    IDENTITY_HEADER_PREFIX = "X-Auth-User-"

    # Feed
    FEED_DEFAULT_LIMIT = int(os.environ.get("FEED_DEFAULT_LIMIT", 20))
    MAX_FEED_LIMIT     = int(os.environ.get("MAX_FEED_LIMIT", 100))

    # Raise instead of clamping when a counter would go below zero
    STRICT_COUNTERS = _env_bool("STRICT_COUNTERS", False)

    SEED_DEMO_DATA = _env_bool("SEED_DEMO_DATA", False)

    # Flask-Limiter
    RATELIMIT_ENABLED     = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_DEFAULT     = os.environ.get("RATELIMIT_DEFAULT", "200 per minute")
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")

    TALISMAN_ENABLED = False
    TALISMAN_CONFIG: dict = {}

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    DEBUG = True
    SEED_DEMO_DATA = _env_bool("SEED_DEMO_DATA", True)
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URI", "sqlite://")
    STRICT_COUNTERS = True
    SEED_DEMO_DATA = False
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    TALISMAN_ENABLED = _env_bool("TALISMAN_ENABLED", True)
    TALISMAN_CONFIG = {
        "force_https": _env_bool("FORCE_HTTPS", True),
        "content_security_policy": None,
    }


config = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
    "default":     DevelopmentConfig,
}
