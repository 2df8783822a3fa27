# controllers/lecturer.py
"""
Lecturer routes: schedule classes, review previous classes, poll and export
attendance lists. All routes are limited to the logged-in lecturer's classes.
"""

import io
from datetime import datetime, timezone

from flask import jsonify, request, current_app, send_file
from flask_login import login_required, current_user

from .forms.class_forms import ScheduleClassForm
from trackas.extensions import get_attendance_store
from trackas.services.class_schedule_service import ClassScheduleService, ScheduleError
from trackas.services.export_service import ExportService, ExportError

from . import lecturer_bp

STATUS_BY_ERROR = {
    ScheduleError.MISSING_VENUE: 400,
    ScheduleError.CLASS_NOT_FOUND: 404,
    ScheduleError.STORAGE_ERROR: 503,
    ExportError.NO_ATTENDANCE: 404,
    ExportError.UNSUPPORTED_FORMAT: 400,
    ExportError.EXPORT_FAILED: 500,
}


def _schedule_service():
    return ClassScheduleService(get_attendance_store(), current_app.config['PUBLIC_BASE_URL'])


def _error_response(result):
    return jsonify(result), STATUS_BY_ERROR.get(result.get('error_code'), 400)


def _parse_since(value):
    """Parse an ISO timestamp into naive UTC, or raise ValueError."""
    since = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if since.tzinfo is not None:
        since = since.astimezone(timezone.utc).replace(tzinfo=None)
    return since


@lecturer_bp.route('/classes', methods=['POST'])
@login_required
def schedule_class():
    """Schedule a class and return its registration link and QR code."""
    form = ScheduleClassForm()
    if not form.validate_on_submit():
        return jsonify({
            'success': False,
            'message': 'Invalid input',
            'error_code': 'validation_error',
            'errors': form.errors
        }), 400

    result = _schedule_service().schedule_class(
        lecturer_id=current_user.id,
        course_title=form.course_title.data,
        course_code=form.course_code.data,
        location_name=form.lecture_venue.data,
        class_date=form.date.data,
        class_time=form.time.data,
        note=form.note.data,
        latitude=form.latitude.data,
        longitude=form.longitude.data
    )

    if not result['success']:
        return _error_response(result)

    return jsonify(result), 201


@lecturer_bp.route('/classes', methods=['GET'])
@login_required
def previous_classes():
    """List of previous classes, newest first, with attendance totals."""
    result = _schedule_service().list_previous_classes(current_user.id)
    if not result['success']:
        return _error_response(result)
    return jsonify(result)


@lecturer_bp.route('/classes/<class_id>', methods=['GET'])
@login_required
def class_detail(class_id):
    """A single class including its QR code."""
    result = _schedule_service().class_detail(current_user.id, class_id)
    if not result['success']:
        return _error_response(result)
    return jsonify(result)


@lecturer_bp.route('/classes/<class_id>/attendance', methods=['GET'])
@login_required
def attendance_list(class_id):
    """
    Attendance list for a class, oldest first.

    Views refresh this every `poll_interval` seconds, passing the returned
    `next_since` back as `since` to fetch only new records.
    """
    since = None
    if request.args.get('since'):
        try:
            since = _parse_since(request.args['since'])
        except ValueError:
            return jsonify({
                'success': False,
                'message': 'since must be an ISO 8601 timestamp',
                'error_code': 'validation_error'
            }), 400

    result = _schedule_service().attendance_list(current_user.id, class_id, since=since)
    if not result['success']:
        return _error_response(result)

    attendances = result['attendances']
    next_since = attendances[-1].timestamp.isoformat() if attendances else (since.isoformat() if since else None)

    return jsonify({
        'success': True,
        'class': result['class'],
        'attendances': [attendance.to_dict() for attendance in attendances],
        'total': len(attendances),
        'next_since': next_since,
        'poll_interval': current_app.config['ATTENDANCE_POLL_INTERVAL']
    })


@lecturer_bp.route('/classes/<class_id>/export', methods=['GET'])
@login_required
def export_attendance(class_id):
    """Download the attendance list as CSV or Excel."""
    result = _schedule_service().attendance_list(current_user.id, class_id)
    if not result['success']:
        return _error_response(result)

    export = ExportService.export_attendance(result['attendances'], request.args.get('format', 'csv'))
    if not export['success']:
        return _error_response(export)

    return send_file(
        io.BytesIO(export['content']),
        mimetype=export['content_type'],
        as_attachment=True,
        download_name=export['filename']
    )
