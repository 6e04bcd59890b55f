"""Attendance API: check-in and absence reporting."""
from flask import Blueprint, current_app, g, request
from flask_jwt_extended import jwt_required
from loggedin.services.checkin_service import CheckInService
from loggedin.services.errors import ServiceError
from loggedin.services.event_service import EventService, EventError
from loggedin.services.providers import RequestIpProvider, SubmittedPositionProvider, describe_device
from loggedin.services.record_store import RecordStore, RecordStoreError
from loggedin.utils.decorators import student_required
from loggedin.utils.helpers import success_response, error_response

attendance_bp = Blueprint('attendance', __name__)

def _checkin_service() -> CheckInService:
    return CheckInService(
        RecordStore(),
        ip_provider=RequestIpProvider(request),
        geolocation_timeout=current_app.config.get('GEOLOCATION_TIMEOUT_SECONDS', 5),
        allow_manual=current_app.config.get('ALLOW_MANUAL_CHECKIN', True)
    )

def _check_in_response(result):
    if not result.accepted:
        return error_response(result.message, result.status_code)

    record = result.record
    return success_response(
        data={
            'attendance_id': record.id,
            'event_id': record.event_id,
            'verification_method': record.verification_method,
            'verification_status': record.verification_status,
            'check_in_time': record.check_in_time.isoformat()
        },
        message=result.message,
        status_code=result.status_code
    )

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/checkin', methods=['POST'])
@jwt_required()
@student_required
def check_in():
    """Check in by location, QR payload or manual request.

    Body: ``event_id``, ``method`` (``location`` | ``qr`` | ``manual``),
    ``position`` or ``location_error`` for location, ``qr_data`` for QR,
    optional ``platform``.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Request body must be a JSON object", 400)

    method = data.get('method', 'location')
    geolocation = None
    if method == 'location':
        geolocation = SubmittedPositionProvider(data.get('position'), data.get('location_error'))

    if method == 'qr' and not data.get('qr_data'):
        return error_response("QR data is required", 400)

    result = _checkin_service().check_in(
        student_email=g.current_user.email,
        method=method,
        selected_event_id=data.get('event_id'),
        geolocation=geolocation,
        qr_data=data.get('qr_data'),
        device_info=describe_device(request.headers.get('User-Agent'), data.get('platform'))
    )
    return _check_in_response(result)

@attendance_bp.route('/qr-checkin', methods=['POST'])
@jwt_required()
@student_required
def qr_check_in():
    """Check in with a scanned QR payload; the payload names the event."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return error_response("Request body must be a JSON object", 400)
    if not data.get('qr_data'):
        return error_response("QR data is required", 400)

    result = _checkin_service().check_in(
        student_email=g.current_user.email,
        method='qr',
        selected_event_id=data.get('event_id'),
        qr_data=data['qr_data'],
        device_info=describe_device(request.headers.get('User-Agent'), data.get('platform'))
    )
    return _check_in_response(result)

@attendance_bp.route('/report-absence', methods=['POST'])
@jwt_required()
@student_required
def report_absence():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return error_response("Request body must be a JSON object", 400)
    event_id = data.get('event_id')

    if event_id:
        try:
            EventService.get_event(event_id)
        except EventError as e:
            return error_response(e.message, e.status_code)

    try:
        report = _checkin_service().report_absence(g.current_user.email, event_id, data.get('reason'))
    except ServiceError as e:
        return error_response(e.message, e.status_code)

    return success_response(
        data=report.to_dict(),
        message="Your absence has been reported to the administrator.",
        status_code=201
    )

@attendance_bp.route('/my', methods=['GET'])
@jwt_required()
@student_required
def my_attendance():
    """The signed-in student's check-in history."""
    try:
        records = RecordStore().query('attendance', filters={'student_email': g.current_user.email},
                                      order_by='check_in_time', descending=True)
    except RecordStoreError:
        return error_response("Failed to load attendance", 500)

    return success_response(data={'records': [record.to_dict() for record in records]})
