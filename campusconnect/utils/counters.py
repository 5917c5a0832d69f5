"""
Counter-consistency engine for Post.likes_count / Post.comments_count.

Every Like/Comment write goes through here so the relation row and the
cached counter commit (or roll back) together.  Counters are always moved
with an in-database ``col = col + delta`` UPDATE; nothing reads a count into
Python and writes it back.

Like uniqueness is enforced by the ``uq_like_post_author`` index, not by the
existence check in toggle_like(): two concurrent first-time toggles can both
see "no like", and the index turns the second INSERT into an IntegrityError
that is reported as a no-op.
"""
import logging
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from campusconnect.errors import CounterUnderflowError, NotFoundError, ValidationError
from campusconnect.extensions import db
from campusconnect.models.feed import Comment, Like, Post

log = logging.getLogger(__name__)

COUNTER_COLUMNS = ("likes_count", "comments_count")


@dataclass
class CounterDrift:
    """A post whose cached counters disagree with the live row counts."""
    post_id:         int
    likes_count:     int
    live_likes:      int
    comments_count:  int
    live_comments:   int


# ── Internal helpers ──────────────────────────────────────────────────────────

def _counter_column(column: str):
    if column not in COUNTER_COLUMNS:
        raise ValueError(f"Unknown counter column: {column!r}")
    return getattr(Post, column)


def _post_exists(post_id: int) -> bool:
    return db.session.scalar(select(Post.id).where(Post.id == post_id)) is not None


def _find_like_id(post_id: int, author_id: str):
    return db.session.scalar(
        select(Like.id).where(Like.post_id == post_id, Like.author_id == author_id)
    )


def current_count(post_id: int, column: str) -> int:
    """Read one counter straight from the row, bypassing the identity map."""
    col = _counter_column(column)
    return db.session.scalar(select(col).where(Post.id == post_id)) or 0


# ── Primitives ────────────────────────────────────────────────────────────────

def apply_counter_delta(post_id: int, column: str, delta: int) -> bool:
    """
    Move a post counter by *delta* in a single UPDATE statement.

    Decrements carry a ``col >= -delta`` guard so the counter never drops
    below zero.  A decrement that the guard rejects is a logic error: it is
    logged, and raised as CounterUnderflowError when STRICT_COUNTERS is on.
    An increment against a missing post raises NotFoundError.

    Adds to the current transaction but does NOT commit.
    """
    if delta == 0:
        return True
    col  = _counter_column(column)
    stmt = update(Post).where(Post.id == post_id)
    if delta < 0:
        stmt = stmt.where(col >= -delta)
    result = db.session.execute(
        stmt.values({col: col + delta}).execution_options(synchronize_session=False)
    )
    if result.rowcount:
        return True

    if delta > 0:
        raise NotFoundError("Post not found")

    log.error("Counter underflow: post=%s %s%+d would go below zero", post_id, column, delta)
    if current_app.config.get("STRICT_COUNTERS"):
        raise CounterUnderflowError(f"{column} of post {post_id} would go below zero")
    return False


def insert_with_counter(row, post_id: int, column: str, delta: int = 1):
    """Insert *row* and apply *delta* to the post counter in one transaction."""
    try:
        db.session.add(row)
        db.session.flush()
        apply_counter_delta(post_id, column, delta)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return row


def delete_with_counter(model, row_id: int, post_id: int, column: str) -> int:
    """
    Delete one row by id and decrement the post counter by the number of rows
    actually removed, in one transaction.  Returns that number (0 or 1).

    A concurrent delete of the same row removes nothing here, so the counter
    is only ever decremented once per row.
    """
    try:
        removed = db.session.execute(
            delete(model)
            .where(model.id == row_id)
            .execution_options(synchronize_session=False)
        ).rowcount
        if removed:
            apply_counter_delta(post_id, column, -removed)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return removed


# ── Comments ──────────────────────────────────────────────────────────────────

def add_comment(post_id: int, author_id: str, content: str) -> Comment:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment cannot be empty", field="content")
    if not _post_exists(post_id):
        raise NotFoundError("Post not found")

    comment = Comment(post_id=post_id, author_id=author_id, content=content)
    insert_with_counter(comment, post_id, "comments_count", +1)
    log.info("Comment %s added to post %s by %s", comment.id, post_id, author_id)
    return comment


def remove_comment(comment: Comment) -> bool:
    """Delete *comment* and decrement its post's comments_count."""
    post_id = comment.post_id
    removed = delete_with_counter(Comment, comment.id, post_id, "comments_count")
    if removed:
        log.info("Comment removed from post %s", post_id)
    else:
        log.warning("Comment on post %s was already removed", post_id)
    return bool(removed)


# ── Likes ─────────────────────────────────────────────────────────────────────

def toggle_like(post_id: int, author_id: str) -> dict:
    """
    Flip the like state of (post_id, author_id).

    Returns {"liked": bool, "likesCount": int} where likesCount is the
    counter as committed after this call.
    """
    if not _post_exists(post_id):
        raise NotFoundError("Post not found")

    like_id = _find_like_id(post_id, author_id)
    if like_id is not None:
        delete_with_counter(Like, like_id, post_id, "likes_count")
        liked = False
    else:
        try:
            insert_with_counter(
                Like(post_id=post_id, author_id=author_id), post_id, "likes_count", +1
            )
        except IntegrityError:
            # insert_with_counter has already rolled back
            if not _post_exists(post_id):
                raise NotFoundError("Post not found")
            duplicate = db.session.scalar(
                select(func.count(Like.id))
                .where(Like.post_id == post_id, Like.author_id == author_id)
            )
            if not duplicate:
                raise
            log.warning(
                "Concurrent like of post %s by %s resolved by unique index",
                post_id, author_id,
            )
        liked = True

    return {"liked": liked, "likesCount": current_count(post_id, "likes_count")}


# ── Reconciliation ────────────────────────────────────────────────────────────

def _live_counts():
    like_counts = (
        select(Like.post_id, func.count(Like.id).label("n"))
        .group_by(Like.post_id)
        .subquery()
    )
    comment_counts = (
        select(Comment.post_id, func.count(Comment.id).label("n"))
        .group_by(Comment.post_id)
        .subquery()
    )
    return db.session.execute(
        select(
            Post.id,
            Post.likes_count,
            func.coalesce(like_counts.c.n, 0),
            Post.comments_count,
            func.coalesce(comment_counts.c.n, 0),
        )
        .outerjoin(like_counts, like_counts.c.post_id == Post.id)
        .outerjoin(comment_counts, comment_counts.c.post_id == Post.id)
        .order_by(Post.id)
    ).all()


def find_counter_drift() -> list[CounterDrift]:
    """Return every post whose cached counters differ from the live counts."""
    return [
        CounterDrift(post_id, likes, live_likes, comments, live_comments)
        for post_id, likes, live_likes, comments, live_comments in _live_counts()
        if likes != live_likes or comments != live_comments
    ]


def reconcile_counters() -> list[CounterDrift]:
    """
    Recompute drifted counters from the Like/Comment tables and commit.

    The new values are computed by correlated subqueries inside the UPDATE,
    so writes that land between the drift scan and the fix are not lost.
    Returns the drift that was found.
    """
    drift = find_counter_drift()
    if not drift:
        return drift

    live_likes = (
        select(func.count(Like.id)).where(Like.post_id == Post.id).scalar_subquery()
    )
    live_comments = (
        select(func.count(Comment.id)).where(Comment.post_id == Post.id).scalar_subquery()
    )
    try:
        db.session.execute(
            update(Post)
            .where(Post.id.in_([d.post_id for d in drift]))
            .values(likes_count=live_likes, comments_count=live_comments)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    log.info("Reconciled counters on %d post(s)", len(drift))
    return drift
