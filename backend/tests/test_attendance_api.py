"""Test check-in and absence endpoints."""
import json
from loggedin.models import AbsenceReport, AttendanceRecord, SecurityLog
from tests.factories import CENTER, STUDENT_EMAIL, north_of

def test_location_check_in(client, event, student_headers):
    """Test check-in from inside the geofence."""
    response = client.post('/api/attendance/checkin', json={
        'event_id': event.id,
        'method': 'location',
        'position': {'latitude': 14.5994, 'longitude': 120.9841, 'accuracy': 12},
        'platform': 'Linux'
    }, headers={**student_headers, 'User-Agent': 'Firefox', 'X-Forwarded-For': '203.0.113.9, 10.0.0.1'})

    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['event_id'] == event.id
    assert data['verification_method'] == 'location'
    assert data['verification_status'] == 'verified'

    record = AttendanceRecord.query.one()
    assert record.student_email == STUDENT_EMAIL
    assert record.ip_address == '203.0.113.9'
    assert record.device_info == 'Linux - Firefox'

def test_location_check_in_outside_fence(client, event, student_headers):
    lat, lon = north_of(*CENTER, 5000)
    response = client.post('/api/attendance/checkin', json={
        'event_id': event.id,
        'position': {'latitude': lat, 'longitude': lon}
    }, headers=student_headers)

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == "You are not at the event location"
    assert AttendanceRecord.query.count() == 0
    assert SecurityLog.query.filter_by(log_type='LOCATION_VERIFICATION_FAILED').count() == 1

def test_location_error_reported_by_browser(client, event, student_headers):
    response = client.post('/api/attendance/checkin', json={
        'event_id': event.id,
        'location_error': 'User denied Geolocation'
    }, headers=student_headers)

    assert response.status_code == 400
    assert AttendanceRecord.query.count() == 0
    assert SecurityLog.query.filter_by(log_type='LOCATION_ACCESS_FAILED').count() == 1

def test_check_in_without_event(client, event, student_headers):
    response = client.post('/api/attendance/checkin', json={
        'position': {'latitude': CENTER[0], 'longitude': CENTER[1]}
    }, headers=student_headers)

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == "No event selected"

def test_qr_check_in(client, event, student_headers):
    payload = json.dumps({'eventId': event.id, 'secret': 'S1'})
    response = client.post('/api/attendance/qr-checkin', json={'qr_data': payload}, headers=student_headers)

    assert response.status_code == 201
    assert json.loads(response.data)['data']['verification_method'] == 'qr'

def test_qr_check_in_wrong_secret(client, event, student_headers):
    payload = json.dumps({'eventId': event.id, 'secret': 's1'})
    response = client.post('/api/attendance/qr-checkin', json={'qr_data': payload}, headers=student_headers)

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == "Invalid QR code secret"
    assert AttendanceRecord.query.count() == 0

def test_qr_check_in_requires_payload(client, event, student_headers):
    response = client.post('/api/attendance/qr-checkin', json={}, headers=student_headers)
    assert response.status_code == 400

def test_admins_cannot_check_in(client, event, admin_headers):
    response = client.post('/api/attendance/checkin', json={'event_id': event.id, 'method': 'manual'},
                           headers=admin_headers)
    assert response.status_code == 403

def test_report_absence(client, event, student_headers):
    response = client.post('/api/attendance/report-absence', json={'event_id': event.id},
                           headers=student_headers)

    assert response.status_code == 201
    report = AbsenceReport.query.one()
    assert report.student_email == STUDENT_EMAIL
    assert report.status == 'pending'
    assert report.report_reason == "Student reported inability to attend"

def test_report_absence_errors(client, event, student_headers):
    response = client.post('/api/attendance/report-absence', json={}, headers=student_headers)
    assert response.status_code == 400

    response = client.post('/api/attendance/report-absence', json={'event_id': 'missing'},
                           headers=student_headers)
    assert response.status_code == 404

    assert AbsenceReport.query.count() == 0

def test_my_attendance(client, event, student_headers):
    client.post('/api/attendance/checkin', json={'event_id': event.id, 'method': 'manual'},
                headers=student_headers)

    response = client.get('/api/attendance/my', headers=student_headers)

    assert response.status_code == 200
    records = json.loads(response.data)['data']['records']
    assert len(records) == 1
    assert records[0]['verification_status'] == 'pending'

def test_non_object_bodies_are_rejected(client, event, student_headers):
    for url in ['/api/attendance/checkin', '/api/attendance/qr-checkin', '/api/attendance/report-absence']:
        response = client.post(url, json=[1], headers=student_headers)
        assert response.status_code == 400

    assert AttendanceRecord.query.count() == 0
    assert AbsenceReport.query.count() == 0
