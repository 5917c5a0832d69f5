"""
User and Profile management.

Both halves of the one-to-one User↔Profile pair are written with
upsert_by_unique_key(), so concurrent first-time writes for the same user
resolve to a single row instead of racing on "does it exist yet?".
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from campusconnect.errors import ForbiddenError, NotFoundError, ValidationError
from campusconnect.extensions import db
from campusconnect.models.profile import Profile
from campusconnect.models.user import User
from campusconnect.utils.helpers import utcnow
from campusconnect.utils.storage import upsert_by_unique_key

log = logging.getLogger(__name__)

PROFILE_FIELDS = ("bio", "college", "course", "year", "role")
IDENTITY_FIELDS = ("email", "first_name", "last_name", "profile_image_url")


def ensure_user(identity: dict) -> User:
    """
    Create or refresh the User row for an identity issued by the auth provider.

    *identity* carries "id" plus any of IDENTITY_FIELDS; fields that are
    absent or None are left untouched on an existing row.  An email that
    already belongs to another user id is dropped from the write instead of
    failing the request.  Commits.
    """
    user_id = (identity.get("id") or "").strip()
    if not user_id:
        raise ValidationError("Identity is missing a user id", field="id")

    values = {k: identity[k] for k in IDENTITY_FIELDS if identity.get(k) is not None}
    values["updated_at"] = utcnow()
    try:
        return _write_user(user_id, values)
    except IntegrityError:
        if "email" not in values:
            raise
        log.warning("Email of %s is already used by another user; stored without it", user_id)
        values.pop("email")
        return _write_user(user_id, values)


def _write_user(user_id: str, values: dict) -> User:
    try:
        user = upsert_by_unique_key(User, {"id": user_id}, values)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return user


def get_profile(user_id: str) -> Profile:
    profile = db.session.scalar(select(Profile).where(Profile.user_id == user_id))
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


def upsert_profile(user_id: str, fields: dict, actor: User = None) -> Profile:
    """
    Merge *fields* into the user's profile, creating it on first use.

    Only the supplied keys change.  When *actor* is given and is not an
    admin, a change of role is refused.  Commits.
    """
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown profile field: {sorted(unknown)[0]}", field=sorted(unknown)[0])

    if "role" in fields and actor is not None and not actor.is_admin:
        current = db.session.scalar(select(Profile.role).where(Profile.user_id == user_id))
        if fields["role"] != (current or "student"):
            raise ForbiddenError("Only administrators can change roles")

    if db.session.get(User, user_id) is None:
        raise NotFoundError("User not found")

    try:
        profile = upsert_by_unique_key(Profile, {"user_id": user_id}, dict(fields))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    if not fields:
        log.warning("Empty profile update for %s", user_id)
    else:
        log.info("Profile of %s updated: %s", user_id, ", ".join(sorted(fields)))
    return profile
