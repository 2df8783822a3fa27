# models/lecturer.py
from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from trackas.extensions import db
from .base import BaseModel


class Lecturer(UserMixin, BaseModel):
    """Lecturer account. Owns the classes it schedules."""

    __tablename__ = 'lecturers'
    __private_fields__ = ('password_hash',)

    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    classes = db.relationship('ClassSession', back_populates='lecturer', lazy='dynamic')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def record_login(self):
        self.last_login = datetime.now()

    def __repr__(self):
        return f'<Lecturer {self.email}>'
