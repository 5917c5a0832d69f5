from campusconnect.extensions import db
from campusconnect.utils.helpers import utcnow


class Event(db.Model):
    """A campus event announcement.  Listed by its scheduled date, not creation time."""
    __tablename__ = "events"

    id          = db.Column(db.Integer, primary_key=True)
    title       = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    date        = db.Column(db.DateTime, nullable=False, index=True)
    location    = db.Column(db.String(200), nullable=False)
    author_id   = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at  = db.Column(db.DateTime, default=utcnow, nullable=False)

    author = db.relationship("User", foreign_keys=[author_id])

    def __repr__(self) -> str:
        return f"<Event {self.title!r} on {self.date:%Y-%m-%d}>"
