# services/registration_service.py
"""
Student attendance registration.
Drives one student's registration attempt: load the class, make sure the
venue has a usable coordinate (repairing it through the geocoder when
needed), evaluate the reported position and record attendance once.
"""

import logging
from enum import Enum

from trackas.services.attendance_store import StorageError, DuplicateRecordError
from trackas.services.eligibility_service import (
    EligibilityService, PositionResult, PositionStatus, NOT_EVALUATED, DEFAULT_RADIUS_METERS
)
from trackas.utils.geo import normalize_coordinates, format_distance

logger = logging.getLogger('registration_service')

DEGRADED_NOTICE = 'Class coordinates missing or invalid. Distance check disabled.'


class RegistrationState(Enum):
    LOADING = 'loading'
    VENUE_READY = 'venue_ready'
    AWAITING_POSITION = 'awaiting_position'
    EVALUATED = 'evaluated'
    SUBMITTING = 'submitting'
    SUBMITTED = 'submitted'
    REJECTED = 'rejected'


class RegistrationError:
    """Registration-specific error codes."""
    CLASS_NOT_FOUND = 'class_not_found'
    MISSING_FIELDS = 'missing_fields'
    OUT_OF_RANGE = 'out_of_range'
    DISTANCE_CHECK_DISABLED = 'distance_check_disabled'
    POSITION_UNAVAILABLE = 'position_unavailable'
    DUPLICATE_REGISTRATION = 'duplicate_registration'
    STORAGE_ERROR = 'storage_error'
    INVALID_STATE = 'invalid_state'


class RegistrationWorkflow:
    """
    One student's registration attempt against one class.

    Instances are not shared between students. Once close() has been called,
    late position or geocoding results no longer change the workflow.
    """

    def __init__(self, store, geocoder=None, threshold_meters=DEFAULT_RADIUS_METERS):
        self.store = store
        self.geocoder = geocoder
        self.threshold_meters = threshold_meters

        self.state = RegistrationState.LOADING
        self.class_session = None
        self.venue = None
        self.position = PositionResult.unknown()
        self.verdict = NOT_EVALUATED
        self.attendance = None

        self._venue_written = False
        self._closed = False

    @property
    def closed(self):
        return self._closed

    @property
    def distance_check_enabled(self):
        return self.venue is not None

    def close(self):
        """Tear down the workflow; later callbacks become no-ops."""
        self._closed = True

    def load(self, class_id):
        """
        Fetch the class and prepare its venue coordinate.

        Returns:
            dict: Class details, venue and degraded-mode notice
        """
        if self._closed or self.state != RegistrationState.LOADING:
            return self._error(RegistrationError.INVALID_STATE, 'Registration session is not loading')

        try:
            class_session = self.store.get_class(class_id)
        except StorageError:
            return self._error(RegistrationError.STORAGE_ERROR, 'Failed to load class details.')

        if class_session is None:
            logger.warning(f"Registration attempted for unknown class {class_id}")
            self.state = RegistrationState.REJECTED
            return self._error(RegistrationError.CLASS_NOT_FOUND, 'Class not found')

        venue = normalize_coordinates(class_session.latitude, class_session.longitude)
        if venue is None:
            venue = self._resolve_venue(class_session)

        if self._closed:
            return self._error(RegistrationError.INVALID_STATE, 'Registration session was closed')

        self.class_session = class_session
        self.venue = venue
        self.state = RegistrationState.VENUE_READY

        self.verdict = EligibilityService.evaluate(None, self.venue, self.threshold_meters)
        self.state = RegistrationState.AWAITING_POSITION

        if venue is None:
            logger.warning(f"Distance check disabled for class {class_session.id}: no usable venue coordinate")

        return {
            'success': True,
            'state': self.state.value,
            'class': self.class_details(),
            'venue': venue.to_dict() if venue else None,
            'distance_check_enabled': self.distance_check_enabled,
            'notice': None if venue else DEGRADED_NOTICE,
            'radius_meters': self.threshold_meters
        }

    def receive_position(self, position):
        """
        Apply a device position sample and re-evaluate eligibility.

        Args:
            position: PositionResult

        Returns:
            EligibilityVerdict, or None when the workflow cannot take positions
        """
        if self._closed:
            logger.debug("Position received after registration session closed; ignored")
            return None

        if self.state not in (RegistrationState.AWAITING_POSITION, RegistrationState.EVALUATED):
            logger.warning(f"Position received in state {self.state.value}; ignored")
            return None

        self.position = position
        live = position.coordinate if position.status is PositionStatus.AVAILABLE else None
        self.verdict = EligibilityService.evaluate(live, self.venue, self.threshold_meters)
        self.state = RegistrationState.EVALUATED

        return self.verdict

    def submit(self, student_name, matric_no):
        """
        Record attendance if the student is eligible and not yet registered.

        Args:
            student_name: Student's name
            matric_no: Student identifier (matriculation number)

        Returns:
            dict: Result with the stored attendance on success
        """
        if self._closed or self.state not in (RegistrationState.AWAITING_POSITION,
                                              RegistrationState.EVALUATED):
            return self._error(RegistrationError.INVALID_STATE, 'Registration cannot be submitted now')

        student_name = '' if student_name is None else str(student_name).strip()
        matric_no = '' if matric_no is None else str(matric_no).strip()
        if not student_name or not matric_no:
            return self._error(RegistrationError.MISSING_FIELDS, 'Name and Matriculation Number are required.')

        gate_error = self._eligibility_error()
        if gate_error:
            return gate_error

        self.state = RegistrationState.SUBMITTING
        student_name = student_name.upper()
        matric_no = matric_no.upper()

        try:
            existing = self.store.find_attendance(self.class_session.id, matric_no)
        except StorageError:
            self.state = RegistrationState.EVALUATED
            return self._error(RegistrationError.STORAGE_ERROR, 'Error marking attendance. Please try again.')

        if existing:
            return self._reject_duplicate(matric_no)

        try:
            self.attendance = self.store.insert_attendance(
                class_id=self.class_session.id,
                student_name=student_name,
                matric_no=matric_no,
                distance=self.verdict.distance_meters,
                status=True
            )
        except DuplicateRecordError:
            return self._reject_duplicate(matric_no)
        except StorageError:
            self.state = RegistrationState.EVALUATED
            return self._error(RegistrationError.STORAGE_ERROR, 'Error marking attendance. Please try again.')

        self.state = RegistrationState.SUBMITTED
        logger.info(f"Attendance recorded: {matric_no} for class {self.class_session.id} "
                    f"at {format_distance(self.verdict.distance_meters)}")

        return {
            'success': True,
            'state': self.state.value,
            'message': 'Attendance marked successfully!',
            'attendance': self.attendance.to_dict()
        }

    def class_details(self):
        if self.class_session is None:
            return None
        details = self.class_session.to_dict()
        details['latitude'] = self.venue.lat if self.venue else None
        details['longitude'] = self.venue.lng if self.venue else None
        return details

    def _resolve_venue(self, class_session):
        if self.geocoder is None:
            return None

        coordinate = self.geocoder.resolve(class_session.location_name)
        if coordinate is None or self._closed:
            return None

        if not self._venue_written:
            self._venue_written = True
            try:
                self.store.update_venue_coordinates(class_session.id, coordinate)
                logger.info(f"Venue for class {class_session.id} resolved from "
                            f"'{class_session.location_name}' and saved")
            except StorageError:
                logger.warning(f"Could not save resolved venue for class {class_session.id}")

        return coordinate

    def _eligibility_error(self):
        if not self.verdict.distance_check_enabled:
            return self._error(RegistrationError.DISTANCE_CHECK_DISABLED,
                               'The lecture venue location could not be verified, registration is unavailable.')

        if self.position.status is not PositionStatus.AVAILABLE:
            return self._error(RegistrationError.POSITION_UNAVAILABLE,
                               'Location unavailable, cannot verify eligibility.')

        if not self.verdict.within_range:
            return self._error(RegistrationError.OUT_OF_RANGE,
                               f'You must be within {format_distance(self.threshold_meters)} '
                               f'of the lecture venue to register.')

        return None

    def _reject_duplicate(self, matric_no):
        logger.info(f"Duplicate registration: {matric_no} for class {self.class_session.id}")
        self.state = RegistrationState.REJECTED
        return self._error(RegistrationError.DUPLICATE_REGISTRATION,
                           'This matriculation number has already been registered.')

    def _error(self, error_code, message):
        result = {
            'success': False,
            'state': self.state.value,
            'message': message,
            'error_code': error_code
        }
        if self.class_session is not None:
            result['verdict'] = self.verdict.to_dict()
            result['position_status'] = self.position.status.value
        return result
