"""
End-to-end tests of the HTTP API through the Flask test client.

Identity is supplied with the X-Auth-User-* headers built by the `auth`
fixture, the same way the upstream auth proxy forwards it.
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from campusconnect import create_app
from campusconnect.extensions import db
from campusconnect.models import Comment, Like, Post, User
from campusconnect.utils import aggregation


def _create_post(client, headers, **body):
    body.setdefault("content", "Hello campus")
    r = client.post("/api/posts", json=body, headers=headers)
    assert r.status_code == 201, r.get_json()
    return r.get_json()


# ── Feed scenario ─────────────────────────────────────────────────────────────

@pytest.mark.usefixtures("no_counter_drift")
class TestFeedScenario:

    def test_post_like_comment_read(self, client, auth):
        alice, bob = auth("alice", "Alice", "Ng"), auth("bob", "Bob", "Lee")

        post = _create_post(client, alice, content="  Hackathon this weekend!  ",
                            tags=["Events", " "], mediaUrls=[])
        assert post["authorId"] == "alice"
        assert post["content"] == "Hackathon this weekend!"
        assert post["type"] == "text"
        assert post["tags"] == ["Events"]
        assert (post["likesCount"], post["commentsCount"]) == (0, 0)

        r = client.post(f"/api/posts/{post['id']}/like", headers=bob)
        assert r.get_json() == {"liked": True, "likesCount": 1}

        r = client.post(f"/api/posts/{post['id']}/comments", json={"content": "Count me in"},
                        headers=bob)
        assert r.status_code == 201
        comment = r.get_json()
        assert comment["postId"] == post["id"]
        assert comment["authorId"] == "bob"

        feed = client.get("/api/posts").get_json()
        assert len(feed) == 1
        assert feed[0]["likesCount"] == 1
        assert feed[0]["commentsCount"] == 1
        assert feed[0]["author"]["firstName"] == "Alice"

        detail = client.get(f"/api/posts/{post['id']}").get_json()
        assert [c["id"] for c in detail["comments"]] == [comment["id"]]
        assert detail["comments"][0]["author"]["lastName"] == "Lee"

        r = client.post(f"/api/posts/{post['id']}/like", headers=bob)
        assert r.get_json() == {"liked": False, "likesCount": 0}

    def test_feed_filter_and_limit(self, client, auth):
        alice = auth("alice")
        _create_post(client, alice, content="notes", type="pdf",
                     mediaUrls=["https://files.test/notes.pdf"])
        for i in range(3):
            _create_post(client, alice, content=f"text {i}")

        pdfs = client.get("/api/posts?type=pdf").get_json()
        assert [p["type"] for p in pdfs] == ["pdf"]
        assert pdfs[0]["mediaUrls"] == ["https://files.test/notes.pdf"]

        assert len(client.get("/api/posts?limit=2").get_json()) == 2
        assert len(client.get("/api/posts?limit=0").get_json()) == 1

    def test_delete_comment_decrements_counter(self, client, auth):
        alice, bob = auth("alice"), auth("bob")
        post = _create_post(client, alice)
        comment = client.post(f"/api/posts/{post['id']}/comments", json={"content": "hi"},
                              headers=bob).get_json()

        assert client.delete(f"/api/comments/{comment['id']}", headers=alice).status_code == 403
        assert client.delete(f"/api/comments/{comment['id']}", headers=bob).status_code == 204
        assert client.delete(f"/api/comments/{comment['id']}", headers=bob).status_code == 404

        detail = client.get(f"/api/posts/{post['id']}").get_json()
        assert detail["commentsCount"] == 0
        assert detail["comments"] == []


# ── Post deletion ─────────────────────────────────────────────────────────────

class TestDeletePost:

    def test_requires_authentication(self, client, auth):
        post = _create_post(client, auth("alice"))
        assert client.delete(f"/api/posts/{post['id']}").status_code == 401

    def test_missing_post_is_404_for_everyone(self, client, auth):
        r = client.delete("/api/posts/999", headers=auth("bob"))
        assert r.status_code == 404
        assert r.get_json() == {"message": "Post not found"}

    def test_other_user_forbidden(self, client, auth):
        post = _create_post(client, auth("alice"))
        r = client.delete(f"/api/posts/{post['id']}", headers=auth("bob"))
        assert r.status_code == 403
        assert client.get(f"/api/posts/{post['id']}").status_code == 200

    def test_author_can_delete(self, client, auth):
        alice = auth("alice")
        post = _create_post(client, alice)
        assert client.delete(f"/api/posts/{post['id']}", headers=alice).status_code == 204
        assert client.get(f"/api/posts/{post['id']}").status_code == 404

    def test_admin_delete_cascades(self, app, client, auth, make_user):
        make_user("root", role="admin")
        post = _create_post(client, auth("alice"))
        client.post(f"/api/posts/{post['id']}/like", headers=auth("bob"))
        client.post(f"/api/posts/{post['id']}/comments", json={"content": "hi"},
                    headers=auth("bob"))

        assert client.delete(f"/api/posts/{post['id']}", headers=auth("root")).status_code == 204

        with app.app_context():
            assert db.session.get(Post, post["id"]) is None
            assert db.session.scalar(select(func.count(Comment.id))) == 0
            assert db.session.scalar(select(func.count(Like.id))) == 0


# ── Validation ────────────────────────────────────────────────────────────────

class TestValidation:

    @pytest.mark.parametrize("body,field", [
        ({}, "content"),
        ({"content": "   "}, "content"),
        ({"content": 7}, "content"),
        ({"content": ["hello", "world"]}, "content"),
        ({"content": "x", "type": "video"}, "type"),
        ({"content": "x", "mediaUrls": [1, 2]}, "mediaUrls"),
        ({"content": "x", "tags": [{"a": 1}]}, "tags"),
    ])
    def test_create_post_rejects(self, client, auth, body, field):
        r = client.post("/api/posts", json=body, headers=auth("alice"))
        assert r.status_code == 400
        assert r.get_json()["field"] == field

    def test_body_must_be_an_object(self, client, auth):
        r = client.post("/api/posts", json=["not", "an", "object"], headers=auth("alice"))
        assert r.status_code == 400
        assert r.get_json() == {"message": "Request body must be a JSON object"}

    def test_create_post_requires_authentication(self, client):
        assert client.post("/api/posts", json={"content": "x"}).status_code == 401

    def test_feed_rejects_unknown_type(self, client):
        r = client.get("/api/posts?type=video")
        assert r.status_code == 400
        assert r.get_json()["field"] == "type"

    def test_feed_rejects_non_integer_limit(self, client):
        r = client.get("/api/posts?limit=ten")
        assert r.status_code == 400
        assert r.get_json()["field"] == "limit"

    def test_comment_on_missing_post(self, client, auth):
        r = client.post("/api/posts/999/comments", json={"content": "hi"}, headers=auth("bob"))
        assert r.status_code == 404

    def test_blank_comment(self, client, auth):
        post = _create_post(client, auth("alice"))
        r = client.post(f"/api/posts/{post['id']}/comments", json={"content": " "},
                        headers=auth("bob"))
        assert r.status_code == 400
        assert r.get_json()["field"] == "content"

    def test_like_missing_post(self, client, auth):
        r = client.post("/api/posts/999/like", headers=auth("bob"))
        assert r.status_code == 404
        assert r.get_json() == {"message": "Post not found"}


# ── Resources & events ────────────────────────────────────────────────────────

class TestCampusRoutes:

    def test_share_and_list_resources(self, client, auth):
        alice = auth("alice")
        r = client.post("/api/resources", json={
            "title": "DSA Notes", "category": "Notes", "fileUrl": "https://files.test/dsa.pdf",
        }, headers=alice)
        assert r.status_code == 201
        assert r.get_json()["description"] is None

        client.post("/api/resources", json={
            "title": "OS Slides", "category": "Slides", "fileUrl": "https://files.test/os.pdf",
            "description": "Week 1-4",
        }, headers=alice)

        assert [x["title"] for x in client.get("/api/resources").get_json()] == \
            ["OS Slides", "DSA Notes"]
        notes = client.get("/api/resources?category=Notes").get_json()
        assert [x["title"] for x in notes] == ["DSA Notes"]
        assert notes[0]["author"]["id"] == "alice"

    def test_resource_requires_file_url(self, client, auth):
        r = client.post("/api/resources", json={"title": "t", "category": "Notes"},
                        headers=auth("alice"))
        assert r.status_code == 400
        assert r.get_json()["field"] == "fileUrl"

    def test_announce_and_list_events(self, client, auth):
        alice = auth("alice")
        for title, date in (("Tech Fest", "2026-04-15T10:00:00Z"),
                            ("Career Fair", "2026-06-01T09:30:00+02:00")):
            r = client.post("/api/events", json={
                "title": title, "description": f"{title}!", "date": date, "location": "Main Hall",
            }, headers=alice)
            assert r.status_code == 201

        events = client.get("/api/events").get_json()
        assert [e["title"] for e in events] == ["Career Fair", "Tech Fest"]
        assert events[0]["date"] == "2026-06-01T07:30:00Z"
        assert events[1]["date"] == "2026-04-15T10:00:00Z"

    def test_event_rejects_bad_date(self, client, auth):
        r = client.post("/api/events", json={
            "title": "t", "description": "d", "date": "next tuesday", "location": "l",
        }, headers=auth("alice"))
        assert r.status_code == 400
        assert r.get_json()["field"] == "date"

    def test_event_requires_authentication(self, client):
        r = client.post("/api/events", json={"title": "t"})
        assert r.status_code == 401


# ── Identity & service endpoints ──────────────────────────────────────────────

class TestAuthUser:

    def test_anonymous(self, client):
        r = client.get("/api/auth/user")
        assert r.status_code == 401

    def test_current_user_with_profile(self, client, auth):
        alice = auth("alice", "Alice", "Ng")
        body = client.get("/api/auth/user", headers=alice).get_json()
        assert body["id"] == "alice"
        assert body["email"] == "alice@campus.test"
        assert body["profileImageUrl"] == "https://avatars.test/alice.png"
        assert body["profile"] is None

        client.put("/api/profiles/alice", json={"college": "CU"}, headers=alice)
        body = client.get("/api/auth/user", headers=alice).get_json()
        assert body["profile"]["college"] == "CU"

    def test_headers_ignored_when_not_trusted(self, app, client, auth):
        app.config["TRUST_IDENTITY_HEADERS"] = False
        assert client.get("/api/auth/user", headers=auth("alice")).status_code == 401


class TestServiceEndpoints:

    def test_healthz(self, client):
        r = client.get("/healthz")
        assert r.status_code == 200
        assert r.get_json() == {"status": "ok", "database": "ok"}

    def test_unexpected_error_is_generic(self, client, monkeypatch):
        def boom(**kwargs):
            raise RuntimeError("sqlite:///secret/path.db exploded")

        monkeypatch.setattr(aggregation, "list_posts", boom)
        r = client.get("/api/posts")
        assert r.status_code == 500
        assert r.get_json() == {"message": "Internal Server Error"}
        assert b"secret" not in r.data

    def test_unknown_route_is_json(self, client):
        r = client.get("/api/nothing-here")
        assert r.status_code == 404
        assert "message" in r.get_json()


# ── Rate limiting ─────────────────────────────────────────────────────────────

@pytest.fixture
def limited_client(tmp_path):
    app = create_app("testing", {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'limited.db'}",
        "RATELIMIT_ENABLED":       True,
    })
    yield app.test_client()
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


class TestRateLimit:

    def test_limits_are_per_user(self, limited_client, auth):
        alice = auth("alice")
        for i in range(30):
            r = limited_client.post("/api/posts", json={"content": f"post {i}"}, headers=alice)
            assert r.status_code == 201

        r = limited_client.post("/api/posts", json={"content": "one too many"}, headers=alice)
        assert r.status_code == 429
        assert "message" in r.get_json()

        r = limited_client.post("/api/posts", json={"content": "first"}, headers=auth("bob"))
        assert r.status_code == 201


# ── Identity edge cases ───────────────────────────────────────────────────────

class TestIdentity:

    def test_email_already_held_by_another_user(self, app, client, auth):
        alice = dict(auth("alice"), **{"X-Auth-User-Email": "shared@campus.test"})
        bob = dict(auth("bob"), **{"X-Auth-User-Email": "shared@campus.test"})

        assert client.get("/api/auth/user", headers=alice).status_code == 200
        r = client.post("/api/posts", json={"content": "hi"}, headers=bob)
        assert r.status_code == 201

        with app.app_context():
            assert db.session.get(User, "alice").email == "shared@campus.test"
            assert db.session.get(User, "bob").email is None

    def test_session_cookie_does_not_authenticate(self, client, make_user):
        make_user("alice")
        with client.session_transaction() as sess:
            sess["_user_id"] = "alice"
            sess["_fresh"] = True
        assert client.get("/api/auth/user").status_code == 401

    def test_json_api_needs_no_csrf_token(self, tmp_path, auth):
        app = create_app("testing", {
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'csrf.db'}",
            "WTF_CSRF_ENABLED":        True,
        })
        r = app.test_client().post("/api/posts", json={"content": "hi"}, headers=auth("alice"))
        assert r.status_code == 201
        with app.app_context():
            db.session.remove()
            db.engine.dispose()


# ── Timestamps ────────────────────────────────────────────────────────────────

class TestTimestamps:

    def test_stored_naive_utc_and_serialized_with_offset(self, app, client, auth):
        before = datetime.now(timezone.utc).replace(tzinfo=None)
        post = _create_post(client, auth("alice"))

        assert post["createdAt"].endswith("Z")
        with app.app_context():
            created_at = db.session.get(Post, post["id"]).created_at
        assert created_at.tzinfo is None
        assert before - timedelta(seconds=5) <= created_at <= before + timedelta(minutes=1)
        assert datetime.fromisoformat(post["createdAt"][:-1]) == created_at
