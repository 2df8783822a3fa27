# models/class_session.py
from sqlalchemy import Index

from trackas.extensions import db
from .base import BaseModel


class ClassSession(BaseModel):
    """A scheduled lecture and its venue."""

    __tablename__ = 'classes'
    __private_fields__ = ('qr_code',)

    course_title = db.Column(db.String(200), nullable=False)
    course_code = db.Column(db.String(50), nullable=False)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.DateTime, nullable=False)  # class date combined with start time
    note = db.Column(db.Text, nullable=True)

    # Venue
    location_name = db.Column(db.String(255), nullable=True)
    location = db.Column(db.String(100), nullable=True)  # SRID=4326;POINT(lng lat)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)

    qr_code = db.Column(db.Text, nullable=True)  # PNG data URL of the registration link

    lecturer_id = db.Column(db.String(36), db.ForeignKey('lecturers.id'), nullable=False, index=True)

    lecturer = db.relationship('Lecturer', back_populates='classes')
    attendances = db.relationship('Attendance', back_populates='class_session', lazy='dynamic',
                                  cascade='all, delete-orphan')

    __table_args__ = (
        Index('idx_classes_lecturer_date', 'lecturer_id', 'date'),
    )

    def __repr__(self):
        return f'<ClassSession {self.course_code} {self.date}>'
