"""
Shared fixtures.

Every test gets a fresh file-backed SQLite database under tmp_path; unlike
an in-memory database it hands each thread its own connection, which the
concurrency tests rely on.
"""
from datetime import datetime

import pytest

from campusconnect import create_app
from campusconnect.extensions import db
from campusconnect.models import Post
from campusconnect.utils.counters import find_counter_drift
from campusconnect.utils.profile_service import ensure_user, upsert_profile


@pytest.fixture
def app(tmp_path):
    app = create_app("testing", {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'campus.db'}",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """An application context for calling services directly."""
    with app.app_context():
        yield


def identity_headers(user_id: str, first_name: str = "Test", last_name: str = "User") -> dict:
    return {
        "X-Auth-User-Id":         user_id,
        "X-Auth-User-Email":      f"{user_id}@campus.test",
        "X-Auth-User-First-Name": first_name,
        "X-Auth-User-Last-Name":  last_name,
        "X-Auth-User-Avatar":     f"https://avatars.test/{user_id}.png",
    }


@pytest.fixture
def auth():
    """auth("alice") → identity headers for alice."""
    return identity_headers


@pytest.fixture
def make_user(app):
    def _make(user_id: str, first_name: str = "Test", last_name: str = "User",
              role: str = None) -> str:
        with app.app_context():
            ensure_user({
                "id":         user_id,
                "email":      f"{user_id}@campus.test",
                "first_name": first_name,
                "last_name":  last_name,
            })
            if role:
                upsert_profile(user_id, {"role": role})
        return user_id
    return _make


@pytest.fixture
def make_post(app):
    def _make(author_id: str, content: str = "Hello campus", post_type: str = "text",
              created_at: datetime = None) -> int:
        with app.app_context():
            post = Post(author_id=author_id, content=content, type=post_type)
            if created_at is not None:
                post.created_at = created_at
            db.session.add(post)
            db.session.commit()
            return post.id
    return _make


@pytest.fixture
def no_counter_drift(app):
    """Assert after the test that every cached counter equals its live count."""
    yield
    with app.app_context():
        assert find_counter_drift() == []
