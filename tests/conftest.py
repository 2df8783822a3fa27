"""
Shared pytest fixtures.

Every application is built with the testing config on in-memory SQLite and a
stub geocoder, so no test reaches the network.
"""

from datetime import date, datetime, time

import pytest

from trackas import create_app
from trackas.extensions import db, get_attendance_store, GEOCODER_KEY
from trackas.models import Lecturer
from trackas.utils.geo import Coordinate

LAGOS = Coordinate(6.5244, 3.3792)
NEAR_LAGOS = Coordinate(6.6000, 3.3500)  # roughly 9 km away
IBADAN = Coordinate(7.3775, 3.9470)  # roughly 113 km away

LECTURER_PASSWORD = 'correct-horse-battery'


class StubGeocoder:
    """Records lookups and answers with a fixed result."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def resolve(self, location_name):
        self.calls.append(location_name)
        return self.result


@pytest.fixture
def app():
    app = create_app('testing')
    app.extensions[GEOCODER_KEY] = StubGeocoder()

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def geocoder(app):
    return app.extensions[GEOCODER_KEY]


@pytest.fixture
def store(app):
    return get_attendance_store()


@pytest.fixture
def lecturer(app):
    lecturer = Lecturer(email='ada@example.edu', full_name='Ada Obi')
    lecturer.set_password(LECTURER_PASSWORD)
    return lecturer.save()


@pytest.fixture
def other_lecturer(app):
    lecturer = Lecturer(email='bola@example.edu', full_name='Bola Ade')
    lecturer.set_password(LECTURER_PASSWORD)
    return lecturer.save()


@pytest.fixture
def auth_client(client, lecturer):
    response = client.post('/auth/login', json={
        'email': lecturer.email,
        'password': LECTURER_PASSWORD
    })
    assert response.status_code == 200
    return client


@pytest.fixture
def make_class(store, lecturer):
    def _make_class(latitude=LAGOS.lat, longitude=LAGOS.lng, location_name='University of Lagos',
                    class_date=date(2026, 10, 20), owner=None):
        return store.create_class(
            lecturer_id=(owner or lecturer).id,
            course_title='Introduction to Surveying',
            course_code='SVY101',
            date=class_date,
            time=datetime.combine(class_date, time(9, 0)),
            location_name=location_name,
            latitude=latitude,
            longitude=longitude
        )
    return _make_class


@pytest.fixture
def class_session(make_class):
    return make_class()
