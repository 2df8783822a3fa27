# services/attendance_store.py
"""
Data-store handle for classes and attendance records.
Wraps a SQLAlchemy session; one instance is built at application startup and
passed to the services that need persistence.
"""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from trackas.models import Attendance, ClassSession

logger = logging.getLogger('attendance_store')


class StorageError(Exception):
    """A fetch, insert or update was rejected by the database."""


class DuplicateRecordError(StorageError):
    """An insert violated a uniqueness constraint."""


class AttendanceStore:
    """Query, insert and update operations over ClassSession and Attendance."""

    def __init__(self, session):
        self.session = session

    def query(self, model, order_by=None, descending=False, **filters):
        """
        Fetch rows of `model` matching equality filters.

        Args:
            model: Mapped model class
            order_by: Column name to order by (optional)
            descending: Order direction
            **filters: column=value equality filters

        Returns:
            list of model instances
        """
        try:
            query = self.session.query(model).filter_by(**filters)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            return query.all()
        except SQLAlchemyError as e:
            self._fail(f"Query on {model.__tablename__} failed", e)

    def get_class(self, class_id):
        """Return the class or None when no row matches."""
        if not class_id:
            return None
        try:
            return self.session.get(ClassSession, class_id)
        except SQLAlchemyError as e:
            self._fail(f"Fetching class {class_id} failed", e)

    def create_class(self, **fields):
        class_session = ClassSession(**fields)
        try:
            self.session.add(class_session)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail("Creating class failed", e)
        return class_session

    def update_class(self, class_id, **fields):
        """
        Update columns on a class.

        Returns:
            bool: False when the class does not exist
        """
        try:
            updated = (
                self.session.query(ClassSession)
                .filter_by(id=class_id)
                .update(fields, synchronize_session='fetch')
            )
            self.session.commit()
            return updated > 0
        except SQLAlchemyError as e:
            self._fail(f"Updating class {class_id} failed", e)

    def update_venue_coordinates(self, class_id, coordinate):
        return self.update_class(class_id, latitude=coordinate.lat, longitude=coordinate.lng)

    def list_classes(self, lecturer_id):
        """Classes owned by a lecturer, newest first."""
        return self.query(ClassSession, order_by='date', descending=True, lecturer_id=lecturer_id)

    def find_attendance(self, class_id, matric_no):
        try:
            return (
                self.session.query(Attendance)
                .filter_by(class_id=class_id, matric_no=matric_no)
                .first()
            )
        except SQLAlchemyError as e:
            self._fail(f"Fetching attendance for {matric_no} failed", e)

    def insert_attendance(self, **fields):
        attendance = Attendance(**fields)
        try:
            self.session.add(attendance)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Duplicate attendance insert rejected: {fields.get('matric_no')}")
            raise DuplicateRecordError(str(e.orig)) from e
        except SQLAlchemyError as e:
            self._fail("Inserting attendance failed", e)
        return attendance

    def list_attendance(self, class_id, since=None):
        """
        Attendance for a class, oldest first.

        Args:
            class_id: Class ID
            since: Only return records with a timestamp after this datetime
        """
        try:
            query = self.session.query(Attendance).filter(Attendance.class_id == class_id)
            if isinstance(since, datetime):
                query = query.filter(Attendance.timestamp > since)
            return query.order_by(Attendance.timestamp.asc()).all()
        except SQLAlchemyError as e:
            self._fail(f"Listing attendance for class {class_id} failed", e)

    def count_attendance(self, class_ids):
        """Map of class ID to number of attendance records."""
        if not class_ids:
            return {}
        try:
            rows = (
                self.session.query(Attendance.class_id, func.count(Attendance.id))
                .filter(Attendance.class_id.in_(class_ids))
                .group_by(Attendance.class_id)
                .all()
            )
            return {class_id: count for class_id, count in rows}
        except SQLAlchemyError as e:
            self._fail("Counting attendance failed", e)

    def _fail(self, message, error):
        self.session.rollback()
        logger.error(f"{message}: {str(error)}")
        raise StorageError(message) from error
