from flask_login import UserMixin
from campusconnect.extensions import db
from campusconnect.utils.helpers import utcnow


class User(db.Model, UserMixin):
    """A campus member.

    The id is issued by the external identity provider and never changes;
    the remaining columns are refreshed from the forwarded identity on each
    authenticated request.
    """
    __tablename__ = "users"

    id                = db.Column(db.String(64), primary_key=True)
    email             = db.Column(db.String(255), unique=True, nullable=True, index=True)
    first_name        = db.Column(db.String(100), nullable=True)
    last_name         = db.Column(db.String(100), nullable=True)
    profile_image_url = db.Column(db.String(500), nullable=True)
    created_at        = db.Column(db.DateTime, default=utcnow)
    updated_at        = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    profile = db.relationship("Profile", back_populates="user", uselist=False)

    # ── Role helpers ────────────────────────────────────────────────────────
    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == "admin"

    # ── Display helpers ─────────────────────────────────────────────────────
    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.email or self.id

    def __repr__(self) -> str:
        return f"<User {self.id}>"
