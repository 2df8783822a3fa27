# services/class_schedule_service.py
"""
Class scheduling and lecturer class views.
Creates classes with their registration link and QR code, lists previous
classes and serves attendance lists for the lecturer who owns the class.
"""

import logging
from datetime import datetime
from urllib.parse import urlencode

from trackas.services.attendance_store import StorageError
from trackas.services.qr_code_service import QRCodeService
from trackas.utils.geo import normalize_coordinates, to_wkt_point

logger = logging.getLogger('class_schedule_service')


class ScheduleError:
    """Scheduling error codes."""
    MISSING_VENUE = 'missing_venue'
    CLASS_NOT_FOUND = 'class_not_found'
    STORAGE_ERROR = 'storage_error'


class ClassScheduleService:
    """Lecturer-side class operations over an AttendanceStore."""

    def __init__(self, store, public_base_url):
        self.store = store
        self.public_base_url = public_base_url.rstrip('/')

    def schedule_class(self, lecturer_id, course_title, course_code, location_name,
                       class_date, class_time, note=None, latitude=None, longitude=None):
        """
        Create a class and attach its registration QR code.

        Args:
            lecturer_id: Owning lecturer ID
            course_title: Course title
            course_code: Course code
            location_name: Venue display name
            class_date: datetime.date of the class
            class_time: datetime.time the class starts
            note: Optional note for students
            latitude, longitude: Optional map-selected venue coordinate

        Returns:
            dict: Result with the class, registration link and QR data URL
        """
        location_name = (location_name or '').strip()
        coordinate = normalize_coordinates(latitude, longitude)

        if not location_name and coordinate is None:
            return {
                'success': False,
                'message': 'Please select a lecture venue location.',
                'error_code': ScheduleError.MISSING_VENUE
            }

        if coordinate is None and any(value not in (None, '') for value in (latitude, longitude)):
            logger.warning(f"Discarding invalid venue coordinate ({latitude}, {longitude}) "
                           f"for '{location_name}'")

        try:
            class_session = self.store.create_class(
                lecturer_id=lecturer_id,
                course_title=course_title.strip(),
                course_code=course_code.strip(),
                date=class_date,
                time=datetime.combine(class_date, class_time),
                note=(note or '').strip() or None,
                location_name=location_name or None,
                location=to_wkt_point(coordinate) if coordinate else None,
                latitude=coordinate.lat if coordinate else None,
                longitude=coordinate.lng if coordinate else None,
                qr_code=''
            )
        except StorageError:
            return {
                'success': False,
                'message': 'Error creating class. Please try again.',
                'error_code': ScheduleError.STORAGE_ERROR
            }

        registration_link = self.build_registration_link(
            class_session.id, class_time.strftime('%H:%M'), class_session.course_code, coordinate
        )

        qr_result = QRCodeService.generate_data_url(registration_link)
        qr_code = qr_result.get('data_url')
        if qr_code:
            try:
                self.store.update_class(class_session.id, qr_code=qr_code)
            except StorageError:
                logger.warning(f"Class {class_session.id} created without a stored QR code")
        else:
            logger.warning(f"QR generation failed for class {class_session.id}: {qr_result.get('message')}")

        logger.info(f"Class {class_session.course_code} scheduled by lecturer {lecturer_id}")

        return {
            'success': True,
            'message': 'Class schedule created successfully',
            'class': class_session.to_dict(),
            'registration_link': registration_link,
            'qr_code': qr_code
        }

    def build_registration_link(self, class_id, time_label, course_code, coordinate=None):
        params = {'classId': class_id, 'time': time_label, 'courseCode': course_code}
        if coordinate is not None:
            params['lat'] = coordinate.lat
            params['lng'] = coordinate.lng
        return f"{self.public_base_url}/attendance?{urlencode(params)}"

    def list_previous_classes(self, lecturer_id):
        """Lecturer's classes, newest first, with attendance totals."""
        try:
            classes = self.store.list_classes(lecturer_id)
            counts = self.store.count_attendance([c.id for c in classes])
        except StorageError:
            return {
                'success': False,
                'message': 'Error fetching class data.',
                'error_code': ScheduleError.STORAGE_ERROR
            }

        items = []
        for class_session in classes:
            item = class_session.to_dict()
            item['total_attendance'] = counts.get(class_session.id, 0)
            items.append(item)

        return {'success': True, 'classes': items}

    def get_owned_class(self, lecturer_id, class_id):
        """The class if it exists and belongs to the lecturer, else None."""
        class_session = self.store.get_class(class_id)
        if class_session is None or class_session.lecturer_id != lecturer_id:
            return None
        return class_session

    def class_detail(self, lecturer_id, class_id):
        """One of the lecturer's classes, including its QR code."""
        try:
            class_session = self.get_owned_class(lecturer_id, class_id)
        except StorageError:
            return {
                'success': False,
                'message': 'Error fetching class data.',
                'error_code': ScheduleError.STORAGE_ERROR
            }

        if class_session is None:
            return {
                'success': False,
                'message': 'Class not found',
                'error_code': ScheduleError.CLASS_NOT_FOUND
            }

        details = class_session.to_dict()
        details['qr_code'] = class_session.qr_code
        return {'success': True, 'class': details}

    def attendance_list(self, lecturer_id, class_id, since=None):
        """
        Attendance for one of the lecturer's classes, oldest first.

        Args:
            lecturer_id: Requesting lecturer
            class_id: Class ID
            since: Optional datetime; only newer records are returned
        """
        try:
            class_session = self.get_owned_class(lecturer_id, class_id)
            if class_session is None:
                return {
                    'success': False,
                    'message': 'Class not found',
                    'error_code': ScheduleError.CLASS_NOT_FOUND
                }
            attendances = self.store.list_attendance(class_id, since=since)
        except StorageError:
            return {
                'success': False,
                'message': 'Error fetching attendees.',
                'error_code': ScheduleError.STORAGE_ERROR
            }

        return {
            'success': True,
            'class': class_session.to_dict(),
            'attendances': attendances
        }
