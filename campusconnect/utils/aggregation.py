"""
Aggregation reader – assembles the feed, post detail, resource and event views.

Each read names its joins and ordering explicitly through a JoinSpec, so the
number of queries per view is fixed: one SELECT for a list (authors are
joined in), two for a post detail (the post, then its comment thread).
Counters come from the cached Post columns and are never recomputed here.
"""
from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import joinedload

from campusconnect.errors import NotFoundError
from campusconnect.extensions import db
from campusconnect.models.event import Event
from campusconnect.models.feed import Comment, Post
from campusconnect.models.resource import Resource
from campusconnect.utils.serializers import (
    serialize_event, serialize_post, serialize_resource,
)


@dataclass(frozen=True)
class JoinSpec:
    """Which to-one relations to embed and how to order the rows."""
    model:    type
    embed:    tuple = ("author",)
    order_by: tuple = field(default_factory=tuple)

    def select(self, *criteria, limit: int = None):
        stmt = select(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        for rel in self.embed:
            stmt = stmt.options(joinedload(getattr(self.model, rel)))
        stmt = stmt.order_by(*self.order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    def all(self, *criteria, limit: int = None) -> list:
        return list(db.session.execute(self.select(*criteria, limit=limit)).scalars().unique())


# Ties on the timestamp fall back to id so the order is stable
FEED       = JoinSpec(Post,     order_by=(Post.created_at.desc(), Post.id.desc()))
THREAD     = JoinSpec(Comment,  order_by=(Comment.created_at.desc(), Comment.id.desc()))
RESOURCES  = JoinSpec(Resource, order_by=(Resource.created_at.desc(), Resource.id.desc()))
EVENTS     = JoinSpec(Event,    order_by=(Event.date.desc(), Event.id.desc()))


def clamp_limit(limit) -> int:
    """Bound a requested page size to 1..MAX_FEED_LIMIT."""
    cfg = current_app.config
    if limit is None:
        limit = cfg.get("FEED_DEFAULT_LIMIT", 20)
    return max(1, min(int(limit), cfg.get("MAX_FEED_LIMIT", 100)))


def list_posts(limit: int = None, post_type: str = None) -> list[dict]:
    """Newest posts first, each with its author and cached counters."""
    criteria = [Post.type == post_type] if post_type else []
    posts = FEED.all(*criteria, limit=clamp_limit(limit))
    return [serialize_post(p, author=True) for p in posts]


def get_post(post_id: int) -> dict:
    """One post with its author and full comment thread (newest first)."""
    post = db.session.execute(FEED.select(Post.id == post_id)).scalars().first()
    if post is None:
        raise NotFoundError("Post not found")
    comments = THREAD.all(Comment.post_id == post_id)
    return serialize_post(post, author=True, comments=comments)


def list_resources(category: str = None) -> list[dict]:
    criteria = [Resource.category == category] if category else []
    return [serialize_resource(r, author=True) for r in RESOURCES.all(*criteria)]


def list_events() -> list[dict]:
    """Events by scheduled date, latest first."""
    return [serialize_event(e, author=True) for e in EVENTS.all()]
