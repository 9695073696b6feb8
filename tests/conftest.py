import pytest
import jwt
from datetime import datetime
from roomportal import create_app, db
from roomportal.models import User, Room, Booking
from roomportal.config import TestingConfig
from roomportal.services import get_booking_service

@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def service(app):
    return get_booking_service()

@pytest.fixture
def init_data(app):
    alice = User(name='Alice', email='alice@test.com', phone_number='9000000001', employee_id='E1')
    bob = User(name='Bob', email='bob@test.com', phone_number='9000000002', employee_id='E2')
    admin = User(name='Admin', email='admin@test.com', phone_number='9000000003', role='admin')
    r1 = Room(name='R1', capacity=6, location='Floor 1')
    r2 = Room(name='R2', capacity=4, location='Floor 2', is_working=False)
    db.session.add_all([alice, bob, admin, r1, r2])
    db.session.commit()
    return alice, bob, admin, r1, r2

@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = jwt.encode({'user_id': user.id}, app.config['SECRET_KEY'], algorithm="HS256")
        return {'Authorization': f'Bearer {token}'}
    return _headers

def at(hour, minute=0, day=10):
    """A moment on 2025-06-<day>."""
    return datetime(2025, 6, day, hour, minute)

def active_bookings(room_id):
    return Booking.query.filter_by(room_id=room_id, is_cancelled=False).all()
