from trackas.models import ClassSession, Lecturer
from trackas.extensions import db
from trackas.utils.geo import Coordinate


def test_create_lecturer(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['create-lecturer', 'kemi@example.edu', 'Kemi Bello', '--password', 'secret-pass'])

    assert result.exit_code == 0
    assert 'Created lecturer kemi@example.edu' in result.output
    assert Lecturer.query.filter_by(email='kemi@example.edu').one().check_password('secret-pass')


def test_resolve_venues_dry_run(app, make_class, geocoder):
    class_session = make_class(latitude=None, longitude=None)
    geocoder.result = Coordinate(6.5, 3.4)

    result = app.test_cli_runner().invoke(args=['resolve-venues', '--dry-run'])

    assert result.exit_code == 0
    assert 'Dry run: 1 of 1 venues would be updated.' in result.output
    db.session.expire_all()
    assert db.session.get(ClassSession, class_session.id).latitude is None


def test_resolve_venues(app, make_class, geocoder):
    class_session = make_class(latitude=91, longitude=200)
    make_class()
    geocoder.result = Coordinate(6.5, 3.4)

    result = app.test_cli_runner().invoke(args=['resolve-venues'])

    assert 'Updated 1 of 1 venues.' in result.output
    assert geocoder.calls == ['University of Lagos']
    db.session.expire_all()
    assert db.session.get(ClassSession, class_session.id).latitude == 6.5


def test_watch_unknown_class(app):
    result = app.test_cli_runner().invoke(args=['watch-attendance', 'missing'])

    assert result.exit_code == 1
