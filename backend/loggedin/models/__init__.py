"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .event import Event
from .attendance import AttendanceRecord, VerificationMethod, VerificationStatus
from .security_log import SecurityLog, Severity
from .absence_report import AbsenceReport, ReportStatus

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'Event', 'AttendanceRecord', 'VerificationMethod', 'VerificationStatus',
    'SecurityLog', 'Severity',
    'AbsenceReport', 'ReportStatus'
]
