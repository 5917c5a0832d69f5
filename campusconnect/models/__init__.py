# Import all models so SQLAlchemy can discover them for db.create_all()
# Order matters: FK targets must be imported before dependents.
from campusconnect.models.user import User
from campusconnect.models.profile import Profile, PROFILE_ROLES
from campusconnect.models.feed import Post, Comment, Like, POST_TYPES
from campusconnect.models.resource import Resource
from campusconnect.models.event import Event

__all__ = [
    "User",
    "Profile", "PROFILE_ROLES",
    "Post", "Comment", "Like", "POST_TYPES",
    "Resource",
    "Event",
]
