from datetime import datetime, timezone
from podshop.extensions import db


class Notification(db.Model):
    """In-app notification delivered to a vendor or admin."""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.BigInteger, nullable=False, index=True)
    event_type = db.Column(db.String(50), nullable=False)
    payload = db.Column(db.JSON, default=dict)
    read_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    @property
    def is_read(self):
        return self.read_at is not None

    def __repr__(self):
        return f"<Notification {self.event_type} -> {self.recipient_id}>"
