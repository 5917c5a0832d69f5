"""Flask extension singletons, bound to the app in create_app()."""
import sqlite3

from flask import current_app, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine


def rate_limit_key() -> str:
    """Bucket by forwarded user id; every user shares the proxy's address."""
    if current_app.config.get("TRUST_IDENTITY_HEADERS"):
        prefix = current_app.config.get("IDENTITY_HEADER_PREFIX", "X-Auth-User-")
        user_id = (request.headers.get(prefix + "Id") or "").strip()
        if user_id:
            return f"user:{user_id}"
    return get_remote_address()


db            = SQLAlchemy()
login_manager = LoginManager()
limiter       = Limiter(key_func=rate_limit_key)
migrate       = Migrate()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ships with FK enforcement off; ON DELETE CASCADE needs it on."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
