"""Test the admin dashboard and review endpoints."""
import json
from loggedin.models import AbsenceReport, AttendanceRecord
from loggedin.services.record_store import RecordStore
from loggedin.services.security_logger import SecurityLogger
from loggedin.utils.helpers import utcnow

def add_attendance(event, status, email='a@sti.edu.ph'):
    return RecordStore().insert('attendance', {
        'student_email': email,
        'event_id': event.id,
        'check_in_time': utcnow(),
        'verification_method': 'manual',
        'verification_status': status,
    })

def add_report(event, status='pending'):
    return RecordStore().insert('attendance_reports', {
        'student_email': 'a@sti.edu.ph',
        'event_id': event.id,
        'report_reason': 'Sick',
        'status': status,
    })

def test_dashboard_requires_admin(client, student_headers):
    response = client.get('/api/admin/dashboard', headers=student_headers)
    assert response.status_code == 403

def test_dashboard_summary(client, event, admin_headers):
    add_attendance(event, 'verified')
    add_attendance(event, 'pending', email='b@sti.edu.ph')
    add_report(event)
    logger = SecurityLogger(RecordStore())
    logger.log('LOCATION_VERIFICATION_FAILED', 'far away', 'warning')
    logger.log('CHECK_IN_FAILED', 'db down', 'error')
    logger.log('SUCCESSFUL_CHECK_IN', 'ok', 'info')

    response = client.get('/api/admin/dashboard', headers=admin_headers)

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['event_count'] == 1
    assert data['security_alerts'] == 2
    assert data['pending_attendance'] == 1
    assert data['pending_reports'] == 1
    assert len(data['recent_check_ins']) == 2
    assert {c['event_title'] for c in data['recent_check_ins']} == {'Programming Workshop'}

def test_suspicious_activity_lists_failed_or_pending(client, event, admin_headers):
    add_attendance(event, 'verified')
    add_attendance(event, 'pending')
    add_attendance(event, 'failed')
    add_attendance(event, 'rejected')

    response = client.get('/api/admin/suspicious', headers=admin_headers)

    records = json.loads(response.data)['data']['records']
    assert sorted(r['verification_status'] for r in records) == ['failed', 'pending']

def test_approve_attendance(client, event, admin_headers):
    record = add_attendance(event, 'pending')

    response = client.post(f'/api/admin/attendance/{record.id}/approve', headers=admin_headers)

    assert response.status_code == 200
    assert AttendanceRecord.get_by_id(record.id).verification_status == 'verified'

def test_approve_verified_attendance_is_a_no_op(client, event, admin_headers):
    record = add_attendance(event, 'verified')
    updated_at = record.updated_at

    response = client.post(f'/api/admin/attendance/{record.id}/approve', headers=admin_headers)

    assert response.status_code == 200
    assert json.loads(response.data)['data']['verification_status'] == 'verified'
    assert AttendanceRecord.get_by_id(record.id).updated_at == updated_at

def test_reject_attendance(client, event, admin_headers):
    record = add_attendance(event, 'pending')

    response = client.post(f'/api/admin/attendance/{record.id}/reject', headers=admin_headers)

    assert response.status_code == 200
    assert AttendanceRecord.get_by_id(record.id).verification_status == 'rejected'

def test_review_missing_attendance(client, admin_headers):
    response = client.post('/api/admin/attendance/999/approve', headers=admin_headers)
    assert response.status_code == 404

def test_list_reports_by_status(client, event, admin_headers):
    add_report(event)
    add_report(event, status='resolved')

    response = client.get('/api/admin/reports?status=pending', headers=admin_headers)

    reports = json.loads(response.data)['data']['reports']
    assert [r['status'] for r in reports] == ['pending']

def test_resolve_report(client, event, admin_headers):
    report = add_report(event)

    response = client.post(f'/api/admin/reports/{report.id}/resolve', json={'status': 'rejected'},
                           headers=admin_headers)

    assert response.status_code == 200
    stored = AbsenceReport.get_by_id(report.id)
    assert stored.status == 'rejected'
    assert stored.admin_notes.startswith("Marked as rejected by admin on ")

def test_resolve_report_transitions(client, event, admin_headers):
    report = add_report(event, status='resolved')
    url = f'/api/admin/reports/{report.id}/resolve'

    assert client.post(url, json={'status': 'resolved'}, headers=admin_headers).status_code == 200
    assert client.post(url, json={'status': 'rejected'}, headers=admin_headers).status_code == 409
    assert client.post(url, json={'status': 'pending'}, headers=admin_headers).status_code == 400
    assert client.post('/api/admin/reports/999/resolve', json={'status': 'resolved'},
                       headers=admin_headers).status_code == 404

def test_security_logs_filter_and_limit(client, admin_headers):
    logger = SecurityLogger(RecordStore())
    for i in range(3):
        logger.log('QR_VERIFICATION_FAILED', f'attempt {i}', 'warning')
    logger.log('SUCCESSFUL_CHECK_IN', 'ok', 'info')

    response = client.get('/api/admin/security-logs?severity=warning&limit=2', headers=admin_headers)

    logs = json.loads(response.data)['data']['logs']
    assert len(logs) == 2
    assert {log['severity'] for log in logs} == {'warning'}

def test_resolve_report_rejects_non_object_body(client, event, admin_headers):
    report = add_report(event)

    response = client.post(f'/api/admin/reports/{report.id}/resolve', json=['resolved'],
                           headers=admin_headers)

    assert response.status_code == 400
    assert AbsenceReport.get_by_id(report.id).status == 'pending'
