"""Check-in orchestration: verification gates every attendance write.

One attempt moves ``idle -> verifying -> accepted | rejected``:

1. Input check. Location and manual check-ins need a selected event;
   a QR scan names its own event and overrides any selection.
2. Verification. ``location`` takes one position fix and runs the
   geofence check; ``qr`` matches the payload secret against the
   upcoming events; ``manual`` skips verification and is recorded as
   ``pending`` for admin review.
3. Persistence. Only an attempt that passed step 2 is written.

Failed verification writes no attendance row, only a warning log.
There is no automatic retry; the student simply tries again.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional
from loggedin.models.attendance import VerificationMethod, VerificationStatus
from loggedin.models.security_log import Severity
from loggedin.services.errors import ServiceError
from loggedin.services.geofence_service import GeofenceService
from loggedin.services.providers import LocationAccessError, SubmittedPositionProvider
from loggedin.services.qr_service import QRService
from loggedin.services.record_store import RecordStoreError
from loggedin.services.security_logger import SecurityLogger, SecurityLogType
from loggedin.services.verification_types import CheckInState, Rejected, VerificationOutcome
from loggedin.utils.helpers import utcnow

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong. Please try again."
LOCATION_ACCESS_MESSAGE = "Could not access your location. Please enable location services."

@dataclass
class CheckInResult:
    """Final state of one check-in attempt."""
    state: CheckInState
    message: str
    status_code: int
    outcome: Optional[VerificationOutcome] = None
    record: Optional[Any] = None
    log_type: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.state == CheckInState.ACCEPTED

class CheckInService:
    """Runs check-in attempts against a record store.

    ``state`` is ``VERIFYING`` while an attempt is in flight and ``IDLE``
    otherwise. The final ``ACCEPTED`` or ``REJECTED`` state of an attempt is
    carried by the returned ``CheckInResult``.
    """

    def __init__(self, store, security_logger: Optional[SecurityLogger] = None, ip_provider=None,
                 geolocation_timeout: float = 5, allow_manual: bool = True,
                 clock: Callable = utcnow):
        self.store = store
        self.security_logger = security_logger or SecurityLogger(store)
        self.ip_provider = ip_provider
        self.geolocation_timeout = geolocation_timeout
        self.allow_manual = allow_manual
        self.clock = clock
        self.state = CheckInState.IDLE

    # =================== HELPERS ===================

    def _resolve_ip(self) -> str:
        if self.ip_provider is None:
            return 'unknown'
        try:
            return self.ip_provider.get_public_ip() or 'unknown'
        except Exception as e:
            logger.warning("Error getting IP address: %s", e)
            return 'unknown'

    def _upcoming_events(self):
        return self.store.query('events', filters={'end_time__gte': self.clock()},
                                order_by='start_time')

    def _find_upcoming_event(self, event_id):
        events = self.store.query('events', filters={'id': str(event_id), 'end_time__gte': self.clock()},
                                  limit=1)
        return events[0] if events else None

    def _finish(self, state: CheckInState, message: str, status_code: int, **kwargs) -> CheckInResult:
        self.state = CheckInState.IDLE
        return CheckInResult(state=state, message=message, status_code=status_code, **kwargs)

    def _reject(self, message: str, status_code: int = 400, **kwargs) -> CheckInResult:
        return self._finish(CheckInState.REJECTED, message, status_code, **kwargs)

    # =================== CHECK-IN ===================

    def check_in(self, student_email: str, method: str, selected_event_id: Optional[str] = None,
                 geolocation=None, qr_data: Optional[str] = None,
                 device_info: Optional[str] = None) -> CheckInResult:
        """Run one check-in attempt and return its outcome."""
        try:
            method = VerificationMethod(method)
        except ValueError:
            return self._reject(f"Unsupported verification method: {method}")

        if method == VerificationMethod.MANUAL and not self.allow_manual:
            return self._reject("Manual check-in is disabled")

        if method != VerificationMethod.QR and not selected_event_id:
            return self._reject("No event selected")

        self.state = CheckInState.VERIFYING
        ip_address = self._resolve_ip()

        try:
            if method == VerificationMethod.LOCATION:
                return self._check_in_with_location(student_email, selected_event_id,
                                                    geolocation, device_info, ip_address)
            if method == VerificationMethod.QR:
                return self._check_in_with_qr(student_email, selected_event_id,
                                              qr_data, device_info, ip_address)
            return self._check_in_manually(student_email, selected_event_id, device_info, ip_address)
        except RecordStoreError as e:
            self.security_logger.log(
                SecurityLogType.CHECK_IN_FAILED,
                f"Check-in failed: {e}",
                Severity.ERROR.value,
                student_email, selected_event_id, ip_address
            )
            return self._reject(GENERIC_FAILURE, 500, log_type=SecurityLogType.CHECK_IN_FAILED)

    def _check_in_with_location(self, student_email, event_id, geolocation, device_info, ip_address):
        provider = geolocation or SubmittedPositionProvider()
        try:
            position = provider.get_current_position(self.geolocation_timeout)
        except LocationAccessError as e:
            self.security_logger.log(
                SecurityLogType.LOCATION_ACCESS_FAILED,
                f"Could not access location: {e}",
                Severity.WARNING.value,
                student_email, event_id, ip_address
            )
            return self._reject(LOCATION_ACCESS_MESSAGE, log_type=SecurityLogType.LOCATION_ACCESS_FAILED)

        event = self._find_upcoming_event(event_id)
        if event is None:
            outcome = Rejected("Event not found")
        else:
            outcome = GeofenceService.verify_location(event.geo_fence, position, event_id=event.id)

        if not outcome.verified:
            self.security_logger.log(
                SecurityLogType.LOCATION_VERIFICATION_FAILED,
                f"Location verification failed: {outcome.reason}",
                Severity.WARNING.value,
                student_email, event_id, ip_address
            )
            return self._reject(outcome.reason, outcome=outcome,
                                log_type=SecurityLogType.LOCATION_VERIFICATION_FAILED)

        return self._record(student_email, outcome.event_id, VerificationMethod.LOCATION,
                            VerificationStatus.VERIFIED, position.to_dict(), device_info, ip_address,
                            outcome=outcome)

    def _check_in_with_qr(self, student_email, selected_event_id, qr_data, device_info, ip_address):
        outcome = QRService.verify_qr_code(qr_data, self._upcoming_events())

        if not outcome.verified:
            self.security_logger.log(
                SecurityLogType.QR_VERIFICATION_FAILED,
                f"QR verification failed: {outcome.reason}",
                Severity.WARNING.value,
                student_email, selected_event_id, ip_address
            )
            return self._reject(outcome.reason, outcome=outcome,
                                log_type=SecurityLogType.QR_VERIFICATION_FAILED)

        return self._record(student_email, outcome.event_id, VerificationMethod.QR,
                            VerificationStatus.VERIFIED, None, device_info, ip_address,
                            outcome=outcome)

    def _check_in_manually(self, student_email, event_id, device_info, ip_address):
        event = self._find_upcoming_event(event_id)
        if event is None:
            return self._reject("Event not found", 404)

        return self._record(student_email, event.id, VerificationMethod.MANUAL,
                            VerificationStatus.PENDING, None, device_info, ip_address)

    def _record(self, student_email, event_id, method, status, location, device_info, ip_address,
                outcome=None):
        record = self.store.insert('attendance', {
            'student_email': student_email,
            'event_id': event_id,
            'check_in_time': self.clock(),
            'check_in_location': location,
            'ip_address': ip_address,
            'device_info': device_info,
            'verification_status': status.value,
            'verification_method': method.value,
        })

        description = f"Student successfully checked in to event {event_id}"
        if method == VerificationMethod.QR:
            description += " via QR code"
        elif status == VerificationStatus.PENDING:
            description += " (pending review)"

        self.security_logger.log(
            SecurityLogType.SUCCESSFUL_CHECK_IN,
            description,
            Severity.INFO.value,
            student_email, event_id, ip_address
        )

        message = "You have successfully checked in to the event."
        if status == VerificationStatus.PENDING:
            message = "Your check-in was recorded and is pending review."

        logger.info("Check-in accepted: %s -> %s (%s)", student_email, event_id, method.value)
        return self._finish(CheckInState.ACCEPTED, message, 201, outcome=outcome, record=record,
                            log_type=SecurityLogType.SUCCESSFUL_CHECK_IN)

    # =================== ABSENCE ===================

    def report_absence(self, student_email: str, selected_event_id: Optional[str],
                       reason: Optional[str] = None):
        """Record an absence report; no verification step."""
        if not selected_event_id:
            raise ServiceError("No event selected", 400)

        ip_address = self._resolve_ip()
        try:
            report = self.store.insert('attendance_reports', {
                'student_email': student_email,
                'event_id': selected_event_id,
                'report_type': 'absence',
                'report_reason': reason or "Student reported inability to attend",
            })
        except RecordStoreError as e:
            logger.error("Error reporting absence for %s: %s", student_email, e)
            raise ServiceError(GENERIC_FAILURE, 500) from e

        self.security_logger.log(
            SecurityLogType.ABSENCE_REPORTED,
            f"Student reported absence for event {selected_event_id}",
            Severity.INFO.value,
            student_email, selected_event_id, ip_address
        )
        return report
