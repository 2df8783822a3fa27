# forms/attendance_forms.py
"""
Flask-WTF forms for student attendance registration.
Name and matric number are checked by the registration workflow so that
missing fields produce the same error as any other gated submit.
"""

from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired


class PositionForm(FlaskForm):
    """A device position report for a class."""

    class_id = StringField('Class', validators=[DataRequired(message='Class is required')])

    # Raw browser values; parsed into a PositionResult
    latitude = StringField('Latitude')
    longitude = StringField('Longitude')
    position_error = StringField('Position Error')


class AttendanceRegistrationForm(PositionForm):
    """Student registration form."""

    name = StringField('Name')
    matric_no = StringField('Matriculation Number')
