"""
Authorization guard.

Rules:
  - Profile edits are self-only: the caller's id must match the path user_id.
  - A post or comment may be deleted by its author, or by any user whose
    profile role is "admin".
  - Every other mutation only needs an authenticated caller (@login_required).

Existence is always checked before ownership: routes load the row with
get_or_404 first, so a missing id is a 404 for every caller.
"""
from __future__ import annotations
from functools import wraps
from typing import TYPE_CHECKING

from flask import abort
from flask_login import current_user

if TYPE_CHECKING:
    from campusconnect.models.user import User
    from campusconnect.models.feed import Post, Comment


def self_only(view_arg: str = "user_id"):
    """Abort 403 unless the authenticated user owns the *view_arg* path value.

    Stack below @login_required so anonymous callers get 401 first.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if kwargs.get(view_arg) != current_user.id:
                abort(403)
            return f(*args, **kwargs)
        return decorated
    return decorator


def is_owner_or_admin(user: "User", author_id: str) -> bool:
    if user.id == author_id:
        return True
    return user.is_admin


def can_delete_post(user: "User", post: "Post") -> bool:
    """Return True if user may delete post."""
    return is_owner_or_admin(user, post.author_id)


def can_delete_comment(user: "User", comment: "Comment") -> bool:
    return is_owner_or_admin(user, comment.author_id)
