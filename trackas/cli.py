# cli.py
"""
Flask CLI commands for the attendance system.
"""

import time

import click
from flask import current_app
from flask.cli import with_appcontext

from trackas.extensions import db, get_attendance_store, get_geocoding_service


@click.command("init-db")
@with_appcontext
def init_db():
    """Create all database tables."""
    db.create_all()
    click.echo("Database tables created.")


@click.command("create-lecturer")
@click.argument("email")
@click.argument("full_name")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_lecturer(email, full_name, password):
    """Create a lecturer account."""
    from trackas.services.auth_service import AuthService

    success, lecturer, message = AuthService.register_lecturer(email, full_name, password)
    if not success:
        click.echo(f"Error: {message}", err=True)
        raise SystemExit(1)

    click.echo(f"Created lecturer {lecturer.email} ({lecturer.id})")


@click.command("resolve-venues")
@click.option("--dry-run", is_flag=True, help="Show what would be done without making changes")
@with_appcontext
def resolve_venues(dry_run):
    """
    Geocode classes whose stored venue coordinate is missing or invalid.

    Example usage:
        flask resolve-venues            # Resolve and save coordinates
        flask resolve-venues --dry-run  # Preview lookups without saving
    """
    from trackas.models import ClassSession
    from trackas.utils.geo import normalize_coordinates

    store = get_attendance_store()
    geocoder = get_geocoding_service()

    pending = [
        class_session for class_session in store.query(ClassSession, order_by='date')
        if normalize_coordinates(class_session.latitude, class_session.longitude) is None
    ]

    if not pending:
        click.echo("All classes have usable venue coordinates.")
        return

    click.echo(f"Found {len(pending)} classes without usable venue coordinates")
    click.echo("-" * 80)

    resolved = 0
    for class_session in pending:
        coordinate = geocoder.resolve(class_session.location_name)
        label = f"{class_session.course_code:<12} {(class_session.location_name or '-'):<40}"

        if coordinate is None:
            click.echo(f"{label} unresolved")
            continue

        resolved += 1
        click.echo(f"{label} {coordinate.lat:.6f}, {coordinate.lng:.6f}")
        if not dry_run:
            store.update_venue_coordinates(class_session.id, coordinate)

    click.echo("-" * 80)
    if dry_run:
        click.echo(f"Dry run: {resolved} of {len(pending)} venues would be updated.")
    else:
        click.echo(f"Updated {resolved} of {len(pending)} venues.")


@click.command("watch-attendance")
@click.argument("class_id")
@click.option("--interval", type=int, default=None, help="Seconds between refreshes")
@with_appcontext
def watch_attendance(class_id, interval):
    """Print registrations for a class as they arrive. Stop with Ctrl+C."""
    from trackas.services.attendance_poller import AttendancePoller

    app = current_app._get_current_object()
    store = get_attendance_store()

    if store.get_class(class_id) is None:
        click.echo(f"Error: class {class_id} not found", err=True)
        raise SystemExit(1)

    def fetch():
        with app.app_context():
            return [attendance.to_dict() for attendance in store.list_attendance(class_id)]

    def on_update(records):
        for record in records:
            click.echo(f"{record['timestamp']}  {record['matric_no']:<15} {record['student_name']}")

    interval = interval or app.config['ATTENDANCE_POLL_INTERVAL']
    click.echo(f"Watching attendance for class {class_id} every {interval}s")

    with AttendancePoller(fetch, on_update, interval=interval):
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            click.echo("Stopped.")


def register_cli_commands(app):
    """Register all CLI commands with the Flask app."""
    app.cli.add_command(init_db)
    app.cli.add_command(create_lecturer)
    app.cli.add_command(resolve_venues)
    app.cli.add_command(watch_attendance)
