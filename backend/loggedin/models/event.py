"""Event model with geofence and QR secret."""
import secrets
import uuid
from loggedin import db
from loggedin.models.base import BaseModel

class Event(BaseModel):
    """Event that students check in to."""

    __tablename__ = 'events'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    location = db.Column(db.String(255), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False, index=True)
    attendance_required = db.Column(db.Boolean, default=True, nullable=False)

    # {"type": "circle", "center": {"latitude": .., "longitude": ..}, "radius": meters}
    geo_fence = db.Column(db.JSON, nullable=True)
    qr_code_secret = db.Column(db.String(64), nullable=False)

    __table_args__ = (
        db.CheckConstraint('end_time > start_time', name='ck_events_end_after_start'),
    )

    @staticmethod
    def generate_qr_code_secret() -> str:
        """Generate a fresh QR secret."""
        return secrets.token_urlsafe(9)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary; the QR secret is only shown to admins."""
        exclude = exclude if exclude is not None else ['qr_code_secret']
        return super().to_dict(exclude=exclude)

    def __repr__(self):
        return f'<Event {self.title}>'
