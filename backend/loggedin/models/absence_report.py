"""Student-submitted absence reports."""
from enum import Enum
from loggedin import db
from loggedin.models.base import BaseModel

class ReportStatus(str, Enum):
    PENDING = 'pending'
    RESOLVED = 'resolved'
    REJECTED = 'rejected'

class AbsenceReport(BaseModel):
    """Claim of inability to attend, awaiting admin review."""

    __tablename__ = 'attendance_reports'

    student_email = db.Column(db.String(255), nullable=False, index=True)
    event_id = db.Column(db.String(36), db.ForeignKey('events.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    report_type = db.Column(db.String(20), nullable=False, default='absence')
    report_reason = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=ReportStatus.PENDING.value, index=True)
    admin_notes = db.Column(db.Text, nullable=True)

    event = db.relationship('Event', backref=db.backref('absence_reports', cascade='all, delete-orphan'))

    def __repr__(self):
        return f'<AbsenceReport {self.student_email}-{self.event_id}>'
