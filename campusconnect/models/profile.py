"""
Profile model.

One row per user, created lazily by the first profile update (or eagerly by
the demo seed).  user_id carries a unique constraint so that concurrent
first-time updates resolve to a single row via INSERT ... ON CONFLICT.
"""
from campusconnect.extensions import db

PROFILE_ROLES = ["student", "admin"]


class Profile(db.Model):
    __tablename__ = "profiles"
    __table_args__ = (
        db.CheckConstraint("role IN ('student', 'admin')", name="ck_profile_role"),
    )

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
    )
    bio     = db.Column(db.Text, nullable=True)
    college = db.Column(db.String(200), nullable=True)
    course  = db.Column(db.String(200), nullable=True)
    year    = db.Column(db.String(50), nullable=True)
    role    = db.Column(db.String(20), nullable=False, default="student", server_default="student")

    user = db.relationship("User", back_populates="profile")

    def __repr__(self) -> str:
        return f"<Profile user={self.user_id} role={self.role}>"
