"""Append-only security audit trail."""
from enum import Enum
from loggedin import db
from loggedin.models.base import BaseModel

class Severity(str, Enum):
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'

class SecurityLog(BaseModel):
    """One verification attempt or outcome."""

    __tablename__ = 'security_logs'

    log_type = db.Column(db.String(64), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    severity = db.Column(db.String(10), nullable=False, default=Severity.INFO.value, index=True)
    related_student = db.Column(db.String(255), nullable=True)
    # Plain column: logs outlive the events they mention
    related_event = db.Column(db.String(36), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    def __repr__(self):
        return f'<SecurityLog {self.log_type}>'
