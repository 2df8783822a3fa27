# controllers/attendance.py
"""
Student registration routes reached from a class QR code.
Each request drives its own RegistrationWorkflow and closes it before
responding.
"""

import logging

from flask import jsonify, request, current_app
from flask_wtf.csrf import generate_csrf

from .forms.attendance_forms import PositionForm, AttendanceRegistrationForm
from trackas.extensions import get_attendance_store, get_geocoding_service
from trackas.services.eligibility_service import PositionResult
from trackas.services.registration_service import RegistrationWorkflow, RegistrationError

from . import attendance_bp

logger = logging.getLogger('attendance')

STATUS_BY_ERROR = {
    RegistrationError.CLASS_NOT_FOUND: 404,
    RegistrationError.MISSING_FIELDS: 400,
    RegistrationError.OUT_OF_RANGE: 403,
    RegistrationError.DISTANCE_CHECK_DISABLED: 403,
    RegistrationError.POSITION_UNAVAILABLE: 403,
    RegistrationError.DUPLICATE_REGISTRATION: 409,
    RegistrationError.INVALID_STATE: 409,
    RegistrationError.STORAGE_ERROR: 503,
}


def _workflow():
    return RegistrationWorkflow(
        store=get_attendance_store(),
        geocoder=get_geocoding_service(),
        threshold_meters=current_app.config['ATTENDANCE_RADIUS_METERS']
    )


def _error_response(result):
    return jsonify(result), STATUS_BY_ERROR.get(result.get('error_code'), 400)


def _form_errors(form):
    return jsonify({
        'success': False,
        'message': 'Invalid input',
        'error_code': 'validation_error',
        'errors': form.errors
    }), 400


def _position_from(form):
    return PositionResult.from_payload(
        form.latitude.data,
        form.longitude.data,
        error=form.position_error.data
    )


@attendance_bp.route('', methods=['GET'])
def class_details():
    """
    Class details for the registration page.

    Includes the venue, whether the distance check is active and the options
    the page should use when requesting the device position.
    """
    class_id = request.args.get('classId') or request.args.get('class_id')
    if not class_id:
        return jsonify({
            'success': False,
            'message': 'classId is required',
            'error_code': 'validation_error'
        }), 400

    workflow = _workflow()
    try:
        result = workflow.load(class_id)
    finally:
        workflow.close()

    if not result['success']:
        return _error_response(result)

    result['position_options'] = {
        'enable_high_accuracy': current_app.config['POSITION_HIGH_ACCURACY'],
        'timeout_ms': current_app.config['POSITION_TIMEOUT_MS'],
        'maximum_age_ms': current_app.config['POSITION_MAXIMUM_AGE_MS']
    }
    result['csrf_token'] = generate_csrf()
    return jsonify(result)


@attendance_bp.route('/evaluate', methods=['POST'])
def evaluate():
    """Distance to the venue and eligibility for a reported position."""
    form = PositionForm()
    if not form.validate_on_submit():
        return _form_errors(form)

    workflow = _workflow()
    try:
        loaded = workflow.load(form.class_id.data)
        if not loaded['success']:
            return _error_response(loaded)

        position = _position_from(form)
        verdict = workflow.receive_position(position)
    finally:
        workflow.close()

    return jsonify({
        'success': True,
        'verdict': verdict.to_dict(),
        'position_status': position.status.value,
        'distance_check_enabled': loaded['distance_check_enabled'],
        'notice': loaded['notice'],
        'radius_meters': loaded['radius_meters']
    })


@attendance_bp.route('/register', methods=['POST'])
def register():
    """
    Mark attendance.

    The distance is recomputed here from the reported position; the position
    itself is whatever the student's device sent.
    """
    form = AttendanceRegistrationForm()
    if not form.validate_on_submit():
        return _form_errors(form)

    workflow = _workflow()
    try:
        loaded = workflow.load(form.class_id.data)
        if not loaded['success']:
            return _error_response(loaded)

        workflow.receive_position(_position_from(form))
        result = workflow.submit(form.name.data, form.matric_no.data)
    finally:
        workflow.close()

    if not result['success']:
        logger.info(f"Registration refused for class {form.class_id.data}: {result['error_code']}")
        return _error_response(result)

    return jsonify(result), 201
