import math

import pytest

from trackas.models import Attendance
from trackas.services.attendance_store import AttendanceStore, StorageError, DuplicateRecordError
from trackas.services.eligibility_service import PositionResult
from trackas.services.registration_service import (
    RegistrationWorkflow, RegistrationState, RegistrationError, DEGRADED_NOTICE
)
from trackas.extensions import db
from trackas.utils.geo import Coordinate, distance_meters

from conftest import LAGOS, NEAR_LAGOS, IBADAN, StubGeocoder

RADIUS = 30000


def point_north_of(origin, meters):
    """A point `meters` due north of origin along the meridian."""
    return Coordinate(origin.lat + math.degrees(meters / 6371000), origin.lng)


@pytest.fixture
def workflow(store, geocoder):
    return RegistrationWorkflow(store, geocoder, threshold_meters=RADIUS)


def test_load_with_valid_venue_skips_geocoding(workflow, geocoder, class_session):
    result = workflow.load(class_session.id)

    assert result['success'] is True
    assert result['venue'] == LAGOS.to_dict()
    assert result['distance_check_enabled'] is True
    assert result['notice'] is None
    assert workflow.state is RegistrationState.AWAITING_POSITION
    assert geocoder.calls == []


def test_load_unknown_class(workflow):
    result = workflow.load('no-such-class')

    assert result['success'] is False
    assert result['error_code'] == RegistrationError.CLASS_NOT_FOUND
    assert workflow.state is RegistrationState.REJECTED


def test_invalid_venue_is_resolved_and_saved(store, make_class):
    # Both components out of range, so no axis swap can rescue the pair
    class_session = make_class(latitude=91, longitude=200, location_name='Faculty of Science, Unilag')
    geocoder = StubGeocoder(Coordinate(6.5, 3.4))
    workflow = RegistrationWorkflow(store, geocoder, threshold_meters=RADIUS)

    result = workflow.load(class_session.id)

    assert geocoder.calls == ['Faculty of Science, Unilag']
    assert result['venue'] == {'latitude': 6.5, 'longitude': 3.4}
    assert result['class']['latitude'] == 6.5

    db.session.expire_all()
    saved = store.get_class(class_session.id)
    assert (saved.latitude, saved.longitude) == (6.5, 3.4)

    verdict = workflow.receive_position(PositionResult.available(Coordinate(6.51, 3.41)))
    assert verdict.distance_check_enabled is True
    assert verdict.within_range is True


def test_missing_venue_resolves_from_name(store, make_class):
    class_session = make_class(latitude=None, longitude=None)
    geocoder = StubGeocoder(LAGOS)

    result = RegistrationWorkflow(store, geocoder).load(class_session.id)

    assert result['distance_check_enabled'] is True
    assert store.get_class(class_session.id).latitude == LAGOS.lat


def test_unresolved_venue_blocks_submission(store, make_class):
    class_session = make_class(latitude=None, longitude=None, location_name='Room 12')
    workflow = RegistrationWorkflow(store, StubGeocoder(None), threshold_meters=RADIUS)

    result = workflow.load(class_session.id)
    assert result['distance_check_enabled'] is False
    assert result['notice'] == DEGRADED_NOTICE
    assert result['venue'] is None

    verdict = workflow.receive_position(PositionResult.available(NEAR_LAGOS))
    assert verdict.within_range is False
    assert verdict.distance_meters is None

    submitted = workflow.submit('Chinedu Okafor', 'u2021/001')
    assert submitted['error_code'] == RegistrationError.DISTANCE_CHECK_DISABLED
    assert Attendance.query.count() == 0
    assert store.get_class(class_session.id).latitude is None


def test_venue_write_back_failure_is_not_fatal(app, make_class):
    class FailingUpdateStore(AttendanceStore):
        def update_venue_coordinates(self, class_id, coordinate):
            raise StorageError('read-only replica')

    class_session = make_class(latitude=None, longitude=None)
    workflow = RegistrationWorkflow(FailingUpdateStore(db.session), StubGeocoder(LAGOS))

    result = workflow.load(class_session.id)

    assert result['success'] is True
    assert result['venue'] == LAGOS.to_dict()


def test_register_within_range(workflow, class_session):
    workflow.load(class_session.id)
    workflow.receive_position(PositionResult.available(NEAR_LAGOS))

    result = workflow.submit('  Chinedu Okafor ', ' u2021/001 ')

    assert result['success'] is True
    assert workflow.state is RegistrationState.SUBMITTED

    record = Attendance.query.one()
    assert record.student_name == 'CHINEDU OKAFOR'
    assert record.matric_no == 'U2021/001'
    assert record.status is True
    assert record.distance == pytest.approx(distance_meters(NEAR_LAGOS, LAGOS))


def test_boundary_distance_is_accepted_and_duplicate_rejected(store, make_class):
    class_session = make_class(latitude=6.5, longitude=3.4)
    venue = Coordinate(6.5, 3.4)
    live = point_north_of(venue, RADIUS)
    boundary = distance_meters(live, venue)
    assert boundary == pytest.approx(RADIUS, abs=1e-6)

    first = RegistrationWorkflow(store, StubGeocoder(), threshold_meters=boundary)
    first.load(class_session.id)
    first.receive_position(PositionResult.available(live))
    assert first.submit('Amaka Eze', 'U2021/002')['success'] is True

    second = RegistrationWorkflow(store, StubGeocoder(), threshold_meters=boundary)
    second.load(class_session.id)
    second.receive_position(PositionResult.available(live))
    result = second.submit('Amaka Eze', 'u2021/002')

    assert result['error_code'] == RegistrationError.DUPLICATE_REGISTRATION
    assert second.state is RegistrationState.REJECTED
    assert Attendance.query.filter_by(class_id=class_session.id).count() == 1


def test_point_thirty_kilometres_away_is_accepted_at_fixed_radius(workflow, make_class):
    class_session = make_class(latitude=6.5, longitude=3.4)
    live = point_north_of(Coordinate(6.5, 3.4), 30000)
    workflow.load(class_session.id)

    verdict = workflow.receive_position(PositionResult.available(live))

    assert workflow.threshold_meters == 30000
    assert verdict.distance_meters == pytest.approx(30000, abs=1e-6)
    assert verdict.within_range is True
    assert workflow.submit('Amaka Eze', 'U2021/002')['success'] is True


def test_just_beyond_radius_is_rejected(workflow, make_class):
    class_session = make_class(latitude=6.5, longitude=3.4)
    workflow.load(class_session.id)
    workflow.receive_position(PositionResult.available(point_north_of(Coordinate(6.5, 3.4), RADIUS + 1)))

    result = workflow.submit('Amaka Eze', 'U2021/002')

    assert result['error_code'] == RegistrationError.OUT_OF_RANGE
    assert 'within 30.00 km' in result['message']
    assert workflow.state is RegistrationState.EVALUATED


def test_out_of_range_student_can_move_and_retry(workflow, class_session):
    workflow.load(class_session.id)
    workflow.receive_position(PositionResult.available(IBADAN))
    assert workflow.submit('Amaka Eze', 'U2021/002')['error_code'] == RegistrationError.OUT_OF_RANGE

    workflow.receive_position(PositionResult.available(NEAR_LAGOS))
    assert workflow.submit('Amaka Eze', 'U2021/002')['success'] is True


@pytest.mark.parametrize('name, matric_no', [('', 'U1'), ('Amaka', '  '), (None, 'U1')])
def test_missing_fields(workflow, class_session, name, matric_no):
    workflow.load(class_session.id)
    workflow.receive_position(PositionResult.available(NEAR_LAGOS))

    result = workflow.submit(name, matric_no)

    assert result['error_code'] == RegistrationError.MISSING_FIELDS
    assert workflow.state is RegistrationState.EVALUATED


@pytest.mark.parametrize('position', [PositionResult.denied(), PositionResult.unknown()])
def test_unavailable_position_blocks_submission(workflow, class_session, position):
    workflow.load(class_session.id)
    verdict = workflow.receive_position(position)

    assert verdict.within_range is False
    result = workflow.submit('Amaka Eze', 'U2021/002')
    assert result['error_code'] == RegistrationError.POSITION_UNAVAILABLE
    assert result['position_status'] == position.status.value


def test_submit_before_any_position_is_blocked(workflow, class_session):
    workflow.load(class_session.id)

    result = workflow.submit('Amaka Eze', 'U2021/002')

    assert result['error_code'] == RegistrationError.POSITION_UNAVAILABLE


def test_closed_workflow_ignores_late_results(workflow, class_session):
    workflow.load(class_session.id)
    workflow.close()
    assert workflow.closed

    assert workflow.receive_position(PositionResult.available(NEAR_LAGOS)) is None
    assert workflow.state is RegistrationState.AWAITING_POSITION
    assert workflow.submit('Amaka Eze', 'U2021/002')['error_code'] == RegistrationError.INVALID_STATE


def test_geocoder_finishing_after_close_changes_nothing(store, make_class):
    class_session = make_class(latitude=None, longitude=None)

    class ClosingGeocoder(StubGeocoder):
        def __init__(self, result):
            super().__init__(result)
            self.workflow = None

        def resolve(self, location_name):
            self.workflow.close()
            return super().resolve(location_name)

    geocoder = ClosingGeocoder(LAGOS)
    workflow = RegistrationWorkflow(store, geocoder)
    geocoder.workflow = workflow

    result = workflow.load(class_session.id)

    assert result['error_code'] == RegistrationError.INVALID_STATE
    assert workflow.venue is None
    assert store.get_class(class_session.id).latitude is None


def test_storage_failure_on_insert_allows_resubmit(app, class_session):
    class FlakyInsertStore(AttendanceStore):
        failures = 1

        def insert_attendance(self, **fields):
            if self.failures:
                self.failures -= 1
                raise StorageError('connection reset')
            return super().insert_attendance(**fields)

    workflow = RegistrationWorkflow(FlakyInsertStore(db.session), StubGeocoder())
    workflow.load(class_session.id)
    workflow.receive_position(PositionResult.available(NEAR_LAGOS))

    first = workflow.submit('Amaka Eze', 'U2021/002')
    assert first['error_code'] == RegistrationError.STORAGE_ERROR
    assert workflow.state is RegistrationState.EVALUATED

    assert workflow.submit('Amaka Eze', 'U2021/002')['success'] is True


def test_concurrent_duplicate_insert_is_reported_as_duplicate(app, class_session):
    class RacingStore(AttendanceStore):
        def find_attendance(self, class_id, matric_no):
            return None

        def insert_attendance(self, **fields):
            raise DuplicateRecordError('UNIQUE constraint failed')

    workflow = RegistrationWorkflow(RacingStore(db.session), StubGeocoder())
    workflow.load(class_session.id)
    workflow.receive_position(PositionResult.available(NEAR_LAGOS))

    result = workflow.submit('Amaka Eze', 'U2021/002')

    assert result['error_code'] == RegistrationError.DUPLICATE_REGISTRATION
    assert workflow.state is RegistrationState.REJECTED


def test_submitted_workflow_cannot_submit_again(workflow, class_session):
    workflow.load(class_session.id)
    workflow.receive_position(PositionResult.available(NEAR_LAGOS))
    workflow.submit('Amaka Eze', 'U2021/002')

    result = workflow.submit('Amaka Eze', 'U2021/003')

    assert result['error_code'] == RegistrationError.INVALID_STATE
    assert Attendance.query.count() == 1
