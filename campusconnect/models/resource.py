from campusconnect.extensions import db
from campusconnect.utils.helpers import utcnow


class Resource(db.Model):
    """A shared study resource.  category is a free-form label (e.g. "Notes")."""
    __tablename__ = "resources"

    id          = db.Column(db.Integer, primary_key=True)
    title       = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category    = db.Column(db.String(100), nullable=False, index=True)
    file_url    = db.Column(db.String(1000), nullable=False)
    author_id   = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at  = db.Column(db.DateTime, default=utcnow, nullable=False)

    author = db.relationship("User", foreign_keys=[author_id])

    def __repr__(self) -> str:
        return f"<Resource {self.title!r} [{self.category}]>"
