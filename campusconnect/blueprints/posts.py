"""
Posts blueprint.

GET    /api/posts                      – feed, newest first (?type=, ?limit=)
POST   /api/posts                      – create a post
GET    /api/posts/<id>                 – one post with its comment thread
DELETE /api/posts/<id>                 – delete (author or admin)
POST   /api/posts/<post_id>/comments   – add a comment
POST   /api/posts/<post_id>/like       – toggle like
DELETE /api/comments/<comment_id>      – delete a comment (author or admin)
"""
from flask import Blueprint, jsonify, request, abort
from flask_login import login_required, current_user

from campusconnect.errors import ValidationError
from campusconnect.extensions import db, limiter
from campusconnect.forms.base import bind_json, validate_or_raise
from campusconnect.forms.posts import CommentForm, PostForm
from campusconnect.models.feed import Comment, Post, POST_TYPES
from campusconnect.utils import aggregation, counters, feed_service
from campusconnect.utils.decorators import can_delete_comment, can_delete_post
from campusconnect.utils.serializers import serialize_comment, serialize_post

posts_bp = Blueprint("posts", __name__)


# ── Feed ──────────────────────────────────────────────────────────────────────

@posts_bp.route("/api/posts")
def list_posts():
    post_type = request.args.get("type") or None
    if post_type is not None and post_type not in POST_TYPES:
        raise ValidationError(f"Type must be one of: {', '.join(POST_TYPES)}", field="type")

    limit = request.args.get("limit")
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            raise ValidationError("Limit must be an integer", field="limit") from None

    return jsonify(aggregation.list_posts(limit=limit, post_type=post_type))


@posts_bp.route("/api/posts", methods=["POST"])
@login_required
@limiter.limit("30 per minute")
def create_post():
    form = validate_or_raise(bind_json(PostForm))
    post = feed_service.create_post(
        author_id  = current_user.id,
        content    = form.content.data,
        post_type  = form.type.data,
        media_urls = form.mediaUrls.data,
        tags       = form.tags.data,
    )
    return jsonify(serialize_post(post)), 201


@posts_bp.route("/api/posts/<int:post_id>")
def show_post(post_id):
    return jsonify(aggregation.get_post(post_id))


@posts_bp.route("/api/posts/<int:post_id>", methods=["DELETE"])
@login_required
def delete_post(post_id):
    post = db.get_or_404(Post, post_id, description="Post not found")
    if not can_delete_post(current_user, post):
        abort(403)
    feed_service.delete_post(post)
    return "", 204


# ── Comments ──────────────────────────────────────────────────────────────────

@posts_bp.route("/api/posts/<int:post_id>/comments", methods=["POST"])
@login_required
@limiter.limit("60 per minute")
def add_comment(post_id):
    form = validate_or_raise(bind_json(CommentForm))
    comment = counters.add_comment(post_id, current_user.id, form.content.data)
    return jsonify(serialize_comment(comment)), 201


@posts_bp.route("/api/comments/<int:comment_id>", methods=["DELETE"])
@login_required
def delete_comment(comment_id):
    comment = db.get_or_404(Comment, comment_id, description="Comment not found")
    if not can_delete_comment(current_user, comment):
        abort(403)
    counters.remove_comment(comment)
    return "", 204


# ── Like toggle ───────────────────────────────────────────────────────────────

@posts_bp.route("/api/posts/<int:post_id>/like", methods=["POST"])
@login_required
def toggle_like(post_id):
    return jsonify(counters.toggle_like(post_id, current_user.id))
