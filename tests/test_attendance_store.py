from datetime import date, datetime

import pytest

from trackas.models import Attendance, ClassSession
from trackas.services.attendance_store import DuplicateRecordError
from trackas.utils.geo import Coordinate


def add_attendance(store, class_session, matric_no, timestamp):
    return store.insert_attendance(
        class_id=class_session.id,
        student_name=f'STUDENT {matric_no}',
        matric_no=matric_no,
        distance=120.0,
        timestamp=timestamp
    )


def test_get_class_returns_none_when_missing(store):
    assert store.get_class('no-such-class') is None
    assert store.get_class(None) is None


def test_update_venue_coordinates(store, class_session):
    assert store.update_venue_coordinates(class_session.id, Coordinate(6.5, 3.4)) is True

    reloaded = store.get_class(class_session.id)
    assert (reloaded.latitude, reloaded.longitude) == (6.5, 3.4)


def test_update_missing_class_returns_false(store):
    assert store.update_class('no-such-class', note='x') is False


def test_list_classes_newest_first(store, make_class, lecturer, other_lecturer):
    older = make_class(class_date=date(2026, 9, 1))
    newer = make_class(class_date=date(2026, 10, 1))
    make_class(owner=other_lecturer)

    assert [c.id for c in store.list_classes(lecturer.id)] == [newer.id, older.id]


def test_query_filters_and_orders(store, make_class):
    first = make_class(class_date=date(2026, 9, 1))
    second = make_class(class_date=date(2026, 10, 1))

    rows = store.query(ClassSession, order_by='date', course_code='SVY101')
    assert [c.id for c in rows] == [first.id, second.id]
    assert store.query(ClassSession, course_code='NOPE') == []


def test_list_attendance_oldest_first_and_since(store, class_session):
    late = add_attendance(store, class_session, 'U2', datetime(2026, 10, 20, 9, 30))
    early = add_attendance(store, class_session, 'U1', datetime(2026, 10, 20, 9, 5))

    assert [a.id for a in store.list_attendance(class_session.id)] == [early.id, late.id]
    assert [a.id for a in store.list_attendance(class_session.id, since=datetime(2026, 10, 20, 9, 10))] == [late.id]


def test_find_and_count_attendance(store, make_class):
    first = make_class()
    second = make_class()
    add_attendance(store, first, 'U1', datetime(2026, 10, 20, 9, 5))
    add_attendance(store, first, 'U2', datetime(2026, 10, 20, 9, 6))

    assert store.find_attendance(first.id, 'U1').matric_no == 'U1'
    assert store.find_attendance(second.id, 'U1') is None
    assert store.count_attendance([first.id, second.id]) == {first.id: 2}
    assert store.count_attendance([]) == {}


def test_duplicate_insert_is_rejected(store, class_session):
    add_attendance(store, class_session, 'U1', datetime(2026, 10, 20, 9, 5))

    with pytest.raises(DuplicateRecordError):
        add_attendance(store, class_session, 'U1', datetime(2026, 10, 20, 9, 6))

    assert Attendance.query.filter_by(class_id=class_session.id).count() == 1
