"""
Feed service – post creation and removal.

Counters on a new post start at zero and are only moved afterwards by
campusconnect.utils.counters.  Deleting a post takes its comments and likes
with it in the same transaction.
"""
import logging

from campusconnect.extensions import db
from campusconnect.models.feed import Post

log = logging.getLogger(__name__)


def create_post(author_id: str, content: str, post_type: str = "text",
                media_urls: list = None, tags: list = None) -> Post:
    post = Post(
        author_id      = author_id,
        content        = content.strip(),
        type           = post_type or "text",
        media_urls     = list(media_urls or []),
        tags           = list(tags or []),
        likes_count    = 0,
        comments_count = 0,
    )
    db.session.add(post)
    db.session.commit()
    log.info("Post %s (%s) created by %s", post.id, post.type, author_id)
    return post


def delete_post(post: Post) -> None:
    """Delete *post*; its Comment and Like rows cascade with it."""
    post_id, author_id = post.id, post.author_id
    try:
        db.session.delete(post)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    log.info("Post %s by %s deleted", post_id, author_id)
