"""Administrator review of attendance, absence reports and security logs."""
import logging
from typing import Any, Dict, List, Optional
from loggedin.models.attendance import VerificationStatus
from loggedin.models.absence_report import ReportStatus
from loggedin.models.security_log import Severity
from loggedin.services.errors import ServiceError
from loggedin.services.record_store import RecordStore, RecordNotFoundError, RecordStoreError
from loggedin.utils.helpers import utcnow

logger = logging.getLogger(__name__)

SUSPICIOUS_STATUSES = [VerificationStatus.FAILED.value, VerificationStatus.PENDING.value]
ALERT_SEVERITIES = [Severity.ERROR.value, Severity.WARNING.value]

class ReviewService:
    """Status transitions and dashboard queries for administrators."""

    def __init__(self, store: Optional[RecordStore] = None):
        self.store = store or RecordStore()

    # =================== ATTENDANCE ===================

    def _set_attendance_status(self, record_id: int, status: VerificationStatus):
        try:
            record = self.store.get('attendance', record_id)
            if record is None:
                raise ServiceError("Attendance record not found", 404)
            if record.verification_status == status.value:
                return record
            return self.store.update('attendance', record_id, {'verification_status': status.value})
        except RecordNotFoundError:
            raise ServiceError("Attendance record not found", 404)
        except RecordStoreError as e:
            logger.error("Error updating attendance %s: %s", record_id, e)
            raise ServiceError("Could not update the attendance status. Please try again.", 500)

    def approve_attendance(self, record_id: int):
        """Mark a record verified; approving a verified record is a no-op."""
        return self._set_attendance_status(record_id, VerificationStatus.VERIFIED)

    def reject_attendance(self, record_id: int):
        return self._set_attendance_status(record_id, VerificationStatus.REJECTED)

    def list_suspicious_activity(self, limit: Optional[int] = None) -> List[Any]:
        """Attendance awaiting review: status failed OR pending, newest first."""
        return self.store.query('attendance', filters={'verification_status': SUSPICIOUS_STATUSES},
                                order_by='check_in_time', descending=True, limit=limit)

    # =================== ABSENCE REPORTS ===================

    def list_reports(self, status: Optional[str] = None, limit: Optional[int] = None) -> List[Any]:
        filters = {'status': status} if status else None
        return self.store.query('attendance_reports', filters=filters, order_by='created_at',
                                descending=True, limit=limit)

    def resolve_report(self, report_id: int, status: str):
        """Close a pending report as resolved or rejected."""
        try:
            status = ReportStatus(status)
        except ValueError:
            raise ServiceError("Status must be 'resolved' or 'rejected'", 400)
        if status == ReportStatus.PENDING:
            raise ServiceError("Status must be 'resolved' or 'rejected'", 400)

        try:
            report = self.store.get('attendance_reports', report_id)
            if report is None:
                raise ServiceError("Report not found", 404)
            if report.status == status.value:
                return report
            if report.status != ReportStatus.PENDING.value:
                raise ServiceError(f"Report has already been {report.status}", 409)

            stamp = utcnow().strftime('%Y-%m-%d %H:%M:%S UTC')
            return self.store.update('attendance_reports', report_id, {
                'status': status.value,
                'admin_notes': f"Marked as {status.value} by admin on {stamp}",
            })
        except RecordNotFoundError:
            raise ServiceError("Report not found", 404)
        except RecordStoreError as e:
            logger.error("Error updating report %s: %s", report_id, e)
            raise ServiceError("Could not update the report status. Please try again.", 500)

    # =================== LOGS & DASHBOARD ===================

    def list_security_logs(self, severity: Optional[str] = None, limit: Optional[int] = None) -> List[Any]:
        filters = {'severity': severity} if severity else None
        return self.store.query('security_logs', filters=filters, order_by='created_at',
                                descending=True, limit=limit)

    def dashboard_summary(self, recent_limit: int = 50) -> Dict[str, Any]:
        """Counts and recent check-ins for the admin dashboard."""
        events = self.store.query('events')
        titles = {event.id: event.title for event in events}

        check_ins = []
        for record in self.store.query('attendance', order_by='check_in_time', descending=True,
                                       limit=recent_limit):
            item = record.to_dict()
            item['event_title'] = titles.get(record.event_id, 'Unknown Event')
            check_ins.append(item)

        # alert count degrades to 0
        try:
            security_alerts = self.store.count('security_logs', {'severity': ALERT_SEVERITIES})
        except RecordStoreError as e:
            logger.error("Error fetching security alerts: %s", e)
            security_alerts = 0

        return {
            'event_count': len(events),
            'recent_check_ins': check_ins,
            'security_alerts': security_alerts,
            'pending_attendance': self.store.count('attendance',
                                                   {'verification_status': VerificationStatus.PENDING.value}),
            'pending_reports': self.store.count('attendance_reports',
                                                {'status': ReportStatus.PENDING.value}),
        }
