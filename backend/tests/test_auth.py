"""Test authentication endpoints."""
import json
from loggedin.models import User, UserRole

def test_health_check(client):
    """Test auth health endpoint."""
    response = client.get('/api/auth/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'Auth service is running'

def test_student_login_creates_student(client):
    """Test institutional email login."""
    response = client.post('/api/auth/student-login', json={'email': 'a@sti.edu.ph'})

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['error'] == False
    assert 'access_token' in data['data']
    assert data['data']['user']['role'] == 'student'
    assert User.query.filter_by(email='a@sti.edu.ph').one().role == UserRole.STUDENT

def test_student_login_reuses_account(client):
    client.post('/api/auth/student-login', json={'email': 'a@sti.edu.ph'})
    client.post('/api/auth/student-login', json={'email': 'a@sti.edu.ph'})
    assert User.query.count() == 1

def test_student_login_rejects_other_domains(client):
    """Test the institutional domain gate."""
    for email in ['a@gmail.com', 'a@sti.edu.ph.evil.com', 'a@STI.EDU.PH']:
        response = client.post('/api/auth/student-login', json={'email': email})
        assert response.status_code == 403

    assert User.query.count() == 0

def test_student_login_validation(client):
    response = client.post('/api/auth/student-login', json={})
    assert response.status_code == 400

    response = client.post('/api/auth/student-login', data='x', content_type='text/plain')
    assert response.status_code == 400

def test_verify_email(client):
    response = client.post('/api/auth/verify-email', json={'email': 'b@sti.edu.ph'})
    assert response.status_code == 200
    assert json.loads(response.data)['data']['valid'] is True

    response = client.post('/api/auth/verify-email', json={'email': 'b@example.com'})
    assert response.status_code == 403

def test_admin_login_success(client, admin_user):
    response = client.post('/api/auth/login', json={
        'email': 'admin@sti.edu.ph',
        'password': 'admin-password'
    })

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['data']['user']['role'] == 'admin'

def test_admin_login_invalid_credentials(client, admin_user):
    response = client.post('/api/auth/login', json={
        'email': 'admin@sti.edu.ph',
        'password': 'wrongpassword'
    })
    assert response.status_code == 401

def test_student_cannot_use_admin_login(client, student_headers):
    response = client.post('/api/auth/login', json={
        'email': 'a@sti.edu.ph',
        'password': 'anything'
    })
    assert response.status_code == 401

def test_get_current_user(client, student_headers):
    response = client.get('/api/auth/me', headers=student_headers)

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['data']['email'] == 'a@sti.edu.ph'

def test_me_requires_token(client):
    response = client.get('/api/auth/me')
    assert response.status_code == 401

def test_refresh_token(client):
    login = json.loads(client.post('/api/auth/student-login', json={'email': 'a@sti.edu.ph'}).data)
    refresh_token = login['data']['refresh_token']

    response = client.post('/api/auth/refresh', headers={'Authorization': f'Bearer {refresh_token}'})

    assert response.status_code == 200
    assert 'access_token' in json.loads(response.data)['data']

def test_login_rejects_non_object_body(client, admin_user):
    for url in ['/api/auth/student-login', '/api/auth/login', '/api/auth/verify-email']:
        response = client.post(url, json=['a@sti.edu.ph'])
        assert response.status_code == 400
