"""Attendance model with verification details."""
from enum import Enum
from loggedin import db
from loggedin.models.base import BaseModel
from loggedin.utils.helpers import utcnow

class VerificationMethod(str, Enum):
    """How presence was established."""
    LOCATION = 'location'
    QR = 'qr'
    MANUAL = 'manual'

class VerificationStatus(str, Enum):
    """Review state of an attendance record."""
    VERIFIED = 'verified'
    PENDING = 'pending'
    REJECTED = 'rejected'
    FAILED = 'failed'

class AttendanceRecord(BaseModel):
    """Attendance record model."""

    __tablename__ = 'attendance'

    student_email = db.Column(db.String(255), nullable=False, index=True)
    event_id = db.Column(db.String(36), db.ForeignKey('events.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    check_in_time = db.Column(db.DateTime, default=utcnow, nullable=False)

    # {"latitude", "longitude", "accuracy"}; only for location check-ins
    check_in_location = db.Column(db.JSON, nullable=True)

    ip_address = db.Column(db.String(64), nullable=True)
    device_info = db.Column(db.Text, nullable=True)

    # Verification details
    verification_method = db.Column(db.String(20), nullable=False, default=VerificationMethod.LOCATION.value)
    verification_status = db.Column(db.String(20), nullable=False, default=VerificationStatus.PENDING.value,
                                    index=True)

    event = db.relationship('Event', backref=db.backref('attendance_records', cascade='all, delete-orphan'))

    def __repr__(self):
        return f'<AttendanceRecord {self.student_email}-{self.event_id}>'
