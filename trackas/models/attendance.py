# models/attendance.py
from datetime import datetime, timezone

from sqlalchemy import Index, UniqueConstraint

from trackas.extensions import db
from .base import BaseModel


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Attendance(BaseModel):
    __tablename__ = 'attendance'

    class_id = db.Column(db.String(36), db.ForeignKey('classes.id'), nullable=False, index=True)
    student_name = db.Column(db.String(200), nullable=False)
    matric_no = db.Column(db.String(50), nullable=False)
    distance = db.Column(db.Float, nullable=True)  # meters, as computed at submission time
    status = db.Column(db.Boolean, default=True, nullable=False)
    timestamp = db.Column(db.DateTime, default=_utcnow, nullable=False)  # UTC

    class_session = db.relationship('ClassSession', back_populates='attendances')

    __table_args__ = (
        Index('idx_attendance_class_timestamp', 'class_id', 'timestamp'),

        # One record per student per class
        UniqueConstraint('class_id', 'matric_no', name='uq_attendance_class_matric'),
    )

    def __repr__(self):
        return f'<Attendance {self.matric_no} - {self.class_id}>'
