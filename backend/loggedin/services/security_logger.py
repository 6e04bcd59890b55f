"""Security event logging service."""
import logging
from typing import Optional
from loggedin.models.security_log import Severity

logger = logging.getLogger(__name__)

class SecurityLogType:
    """Security log type tags."""
    SUCCESSFUL_CHECK_IN = 'SUCCESSFUL_CHECK_IN'
    LOCATION_ACCESS_FAILED = 'LOCATION_ACCESS_FAILED'
    LOCATION_VERIFICATION_FAILED = 'LOCATION_VERIFICATION_FAILED'
    QR_VERIFICATION_FAILED = 'QR_VERIFICATION_FAILED'
    CHECK_IN_FAILED = 'CHECK_IN_FAILED'
    ABSENCE_REPORTED = 'ABSENCE_REPORTED'

class SecurityLogger:
    """Append-only sink for the ``security_logs`` table.

    Writing a log entry must never break the operation being logged, so
    every failure is reported to the application log and dropped.
    """

    def __init__(self, store):
        self.store = store

    def log(self, log_type: str, description: str, severity: str = Severity.INFO.value,
            related_student: Optional[str] = None, related_event: Optional[str] = None,
            ip_address: Optional[str] = None) -> bool:
        """Append one entry. Returns False if it could not be written."""
        severity = getattr(severity, 'value', severity)
        try:
            self.store.insert('security_logs', {
                'log_type': log_type,
                'description': description,
                'severity': severity,
                'related_student': related_student,
                'related_event': related_event,
                'ip_address': ip_address,
            })
            return True
        except Exception:
            logger.exception("Error logging security event %s", log_type)
            return False
