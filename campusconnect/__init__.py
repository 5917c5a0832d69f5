"""
CampusConnect – Flask application factory.
Campus social platform: posts, comments, likes, study resources and events.
"""
import logging
import os
from datetime import datetime

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from campusconnect.config import config
from campusconnect.errors import ApiError
from campusconnect.extensions import db, login_manager, limiter, migrate

log = logging.getLogger(__name__)


def create_app(config_name: str = "default", config_overrides: dict = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])
    if config_overrides:
        app.config.update(config_overrides)

    # Ensure instance directory exists (SQLite lives here by default)
    os.makedirs(app.instance_path, exist_ok=True)
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        app.config["SQLALCHEMY_DATABASE_URI"] = (
            "sqlite:///" + os.path.join(app.instance_path, "campusconnect.db")
        )
    _configure_engine(app)
    _configure_logging(app)

    # ── Initialise extensions ────────────────────────────────────────────────
    db.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)
    migrate.init_app(app, db)

    if app.config.get("TALISMAN_ENABLED"):
        from flask_talisman import Talisman
        Talisman(app, **app.config.get("TALISMAN_CONFIG", {}))

    # ── Register blueprints ──────────────────────────────────────────────────
    from campusconnect.blueprints.auth import auth_bp
    from campusconnect.blueprints.main import main_bp
    from campusconnect.blueprints.profiles import profiles_bp
    from campusconnect.blueprints.posts import posts_bp
    from campusconnect.blueprints.campus import campus_bp

    # Identity arrives in forwarded headers, never in a cookie session
    for bp in (auth_bp, main_bp, profiles_bp, posts_bp, campus_bp):
        app.register_blueprint(bp)

    from campusconnect.cli import register_cli
    register_cli(app)

    _register_error_handlers(app)

    # ── Database + seed ──────────────────────────────────────────────────────
    with app.app_context():
        # Register all models with SQLAlchemy before create_all().
        import importlib
        importlib.import_module("campusconnect.models")
        db.create_all()
        if app.config.get("SEED_DEMO_DATA"):
            seed_demo_data()

    return app


# ── Setup helpers ────────────────────────────────────────────────────────────
def _configure_engine(app: Flask) -> None:
    """Give SQLite writers a busy timeout so concurrent requests queue instead of failing."""
    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if not uri.startswith("sqlite"):
        return
    options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    connect_args = dict(options.get("connect_args") or {})
    connect_args.setdefault("timeout", app.config.get("SQLITE_BUSY_TIMEOUT", 30))
    connect_args.setdefault("check_same_thread", False)
    options["connect_args"] = connect_args
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = options


def _configure_logging(app: Flask) -> None:
    pkg_log = logging.getLogger("campusconnect")
    pkg_log.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if not pkg_log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        ))
        pkg_log.addHandler(handler)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def api_error(e):
        if e.status_code >= 500:
            db.session.rollback()
            log.error("%s on %s %s: %s", type(e).__name__, request.method, request.path, e)
            return jsonify(message="Internal Server Error"), e.status_code
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(message=e.description or e.name), e.code

    @app.errorhandler(Exception)
    def internal_error(e):
        db.session.rollback()
        log.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(message="Internal Server Error"), 500


# ── Seed helper ──────────────────────────────────────────────────────────────
def seed_demo_data() -> bool:
    """Seed a demo student with a profile, two posts, a resource and an event.

    Only runs against an empty database.  Returns True if anything was seeded.
    """
    from campusconnect.models import User, Resource, Event
    from campusconnect.utils.feed_service import create_post
    from campusconnect.utils.profile_service import ensure_user, upsert_profile

    if db.session.query(User.id).first() is not None:
        return False

    log.info("Seeding database...")
    user = ensure_user({
        "id":                "demo-student",
        "email":             "demo@campusconnect.example",
        "first_name":        "Demo",
        "last_name":         "Student",
        "profile_image_url": "https://api.dicebear.com/7.x/avataaars/svg?seed=Felix",
    })
    upsert_profile(user.id, {
        "bio":     "Computer Science Student | Loves Coding",
        "college": "Campus University",
        "course":  "B.Tech CS",
        "year":    "3rd Year",
        "role":    "student",
    })

    create_post(user.id, "Excited for the upcoming Hackathon! #Events",
                post_type="text", tags=["Events", "Hackathon"])
    create_post(user.id, "Check out these cool notes on React Hooks.",
                post_type="link", tags=["React", "Notes"], media_urls=["https://react.dev"])

    db.session.add(Resource(
        author_id   = user.id,
        title       = "Data Structures Notes",
        description = "Comprehensive notes for DSA.",
        category    = "Notes",
        file_url    = "https://example.com/dsa-notes.pdf",
    ))
    db.session.add(Event(
        author_id   = user.id,
        title       = "Tech Fest",
        description = "Annual tech festival of Campus University.",
        date        = datetime(2025, 4, 15, 10, 0),
        location    = "Main Auditorium",
    ))
    db.session.commit()
    log.info("Database seeded successfully.")
    return True
