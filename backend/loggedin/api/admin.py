"""Admin API: dashboard, security logs and attendance review."""
from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required
from loggedin.services.errors import ServiceError
from loggedin.services.record_store import RecordStoreError
from loggedin.services.review_service import ReviewService
from loggedin.utils.decorators import admin_required
from loggedin.utils.helpers import success_response, error_response

admin_bp = Blueprint('admin', __name__)

@admin_bp.route('/dashboard', methods=['GET'])
@jwt_required()
@admin_required
def dashboard():
    try:
        summary = ReviewService().dashboard_summary(current_app.config.get('RECENT_CHECKINS_LIMIT', 50))
    except RecordStoreError:
        return error_response("Failed to load dashboard data", 500)

    return success_response(data=summary)

@admin_bp.route('/security-logs', methods=['GET'])
@jwt_required()
@admin_required
def security_logs():
    severity = request.args.get('severity')
    limit = request.args.get('limit', current_app.config.get('SECURITY_LOGS_LIMIT', 100), type=int)
    try:
        logs = ReviewService().list_security_logs(severity=severity, limit=limit)
    except RecordStoreError:
        return error_response("Failed to load security logs", 500)

    return success_response(data={'logs': [log.to_dict() for log in logs]})

@admin_bp.route('/suspicious', methods=['GET'])
@jwt_required()
@admin_required
def suspicious_activity():
    """Attendance records with status failed or pending."""
    try:
        records = ReviewService().list_suspicious_activity()
    except RecordStoreError:
        return error_response("Failed to load suspicious activity", 500)

    return success_response(data={'records': [record.to_dict() for record in records]})

@admin_bp.route('/attendance/<int:record_id>/approve', methods=['POST'])
@jwt_required()
@admin_required
def approve_attendance(record_id):
    try:
        record = ReviewService().approve_attendance(record_id)
    except ServiceError as e:
        return error_response(e.message, e.status_code)

    return success_response(data=record.to_dict(), message="Attendance approved")

@admin_bp.route('/attendance/<int:record_id>/reject', methods=['POST'])
@jwt_required()
@admin_required
def reject_attendance(record_id):
    try:
        record = ReviewService().reject_attendance(record_id)
    except ServiceError as e:
        return error_response(e.message, e.status_code)

    return success_response(data=record.to_dict(), message="Attendance rejected")

@admin_bp.route('/reports', methods=['GET'])
@jwt_required()
@admin_required
def list_reports():
    try:
        reports = ReviewService().list_reports(status=request.args.get('status'))
    except RecordStoreError:
        return error_response("Failed to load reports", 500)

    return success_response(data={'reports': [report.to_dict() for report in reports]})

@admin_bp.route('/reports/<int:report_id>/resolve', methods=['POST'])
@jwt_required()
@admin_required
def resolve_report(report_id):
    """Body: ``{"status": "resolved" | "rejected"}``."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return error_response("Request body must be a JSON object", 400)
    try:
        report = ReviewService().resolve_report(report_id, data.get('status', 'resolved'))
    except ServiceError as e:
        return error_response(e.message, e.status_code)

    return success_response(data=report.to_dict(), message=f"Report {report.status}")
