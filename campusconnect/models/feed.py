"""Feed models: Post, Comment, Like.

likes_count / comments_count on Post are denormalized caches of the
related row counts.  They are only ever changed through
campusconnect.utils.counters, which applies a signed delta in the same
transaction as the Like/Comment row write.
"""
from campusconnect.extensions import db
from campusconnect.utils.helpers import utcnow

POST_TYPES = ["text", "image", "pdf", "link"]


class Post(db.Model):
    __tablename__ = "posts"
    __table_args__ = (
        db.CheckConstraint("likes_count >= 0",    name="ck_post_likes_nonneg"),
        db.CheckConstraint("comments_count >= 0", name="ck_post_comments_nonneg"),
        db.CheckConstraint(
            "type IN ('text', 'image', 'pdf', 'link')", name="ck_post_type",
        ),
    )

    id             = db.Column(db.Integer, primary_key=True)
    author_id      = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content        = db.Column(db.Text, nullable=False)
    type           = db.Column(db.String(10), nullable=False, default="text")
    media_urls     = db.Column(db.JSON, nullable=False, default=list)
    tags           = db.Column(db.JSON, nullable=False, default=list)
    likes_count    = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    comments_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    created_at     = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    author   = db.relationship("User", foreign_keys=[author_id])
    likes    = db.relationship("Like", back_populates="post",
                               cascade="all, delete-orphan", passive_deletes=True)
    comments = db.relationship("Comment", back_populates="post",
                               cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Post {self.id} by {self.author_id}>"


class Comment(db.Model):
    __tablename__ = "comments"

    id         = db.Column(db.Integer, primary_key=True)
    post_id    = db.Column(
        db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id  = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content    = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    post   = db.relationship("Post", back_populates="comments")
    author = db.relationship("User", foreign_keys=[author_id])


class Like(db.Model):
    __tablename__ = "likes"
    __table_args__ = (
        db.UniqueConstraint("post_id", "author_id", name="uq_like_post_author"),
    )

    id         = db.Column(db.Integer, primary_key=True)
    post_id    = db.Column(
        db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    author_id  = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    post   = db.relationship("Post", back_populates="likes")
    author = db.relationship("User", foreign_keys=[author_id])
