"""Shared fixtures for the check-in test suite."""
import json
import pytest
from loggedin import create_app, db
from loggedin.models import User, UserRole
from tests.factories import STUDENT_EMAIL, make_event

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def event(app):
    """Ongoing event with a 100 m circular geofence."""
    return make_event()

@pytest.fixture
def admin_user(app):
    user = User(email='admin@sti.edu.ph', role=UserRole.ADMIN)
    user.set_password('admin-password')
    return user.save()

@pytest.fixture
def admin_headers(client, admin_user):
    response = client.post('/api/auth/login', json={
        'email': 'admin@sti.edu.ph',
        'password': 'admin-password'
    })
    token = json.loads(response.data)['data']['access_token']
    return {'Authorization': f'Bearer {token}'}

@pytest.fixture
def student_headers(client):
    response = client.post('/api/auth/student-login', json={'email': STUDENT_EMAIL})
    token = json.loads(response.data)['data']['access_token']
    return {'Authorization': f'Bearer {token}'}
